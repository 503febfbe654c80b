"""
Persistence for `User` records.

`UserStore.save()` is the only write path. It runs the hash-on-write
step before touching the database, so a hashing failure never leaves a
partially written row behind.
"""

import logging
from typing import Optional

import psycopg2.errors

from backend.auth_service.models import User
from backend.auth_service.passwords import PasswordManager
from backend.database.db_connection import Database

USER_COLUMNS = "user_id, email, password, is_verified, last_login, created_at, updated_at"


class UserAlreadyExistsError(Exception):
    """Raised when the unique email constraint rejects a write."""


class UserStore:
    def __init__(self, db: Database, passwords: PasswordManager) -> None:
        self.db = db
        self.passwords = passwords

    def find_by_email(self, email: str) -> Optional[User]:
        """
        Exact, case-sensitive lookup on the stored (trimmed) email.
        """
        sql = f"SELECT {USER_COLUMNS} FROM users WHERE email = %s;"
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (email,))
                row = cur.fetchone()
        return User.from_row(row) if row else None

    def save(self, user: User) -> User:
        """
        Insert a new user or update an existing one.

        The hashed password is assigned to `user` only after the write
        succeeds; a failed write leaves the user as it was.

        Raises:
            PasswordHashingError: If the password could not be hashed.
            UserAlreadyExistsError: If another user already owns the email.
        """
        hashed = user.needs_password_hash
        password = user.password_for_write(self.passwords)
        if hashed:
            logging.info("[Auth] Password hashed before save")

        try:
            if user.is_new:
                row = self._insert(user, password)
            else:
                row = self._update(user, password)
        except psycopg2.errors.UniqueViolation as e:
            raise UserAlreadyExistsError(user.email) from e

        saved = User.from_row(row)
        user.user_id = saved.user_id
        user.password = saved.password
        user.created_at = saved.created_at
        user.updated_at = saved.updated_at
        user.mark_saved()
        return user

    def _insert(self, user: User, password: str) -> dict:
        sql = f"""
            INSERT INTO users (email, password, is_verified, last_login)
            VALUES (%s, %s, %s, %s)
            RETURNING {USER_COLUMNS};
        """
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (user.email, password, user.is_verified, user.last_login))
                return dict(cur.fetchone())

    def _update(self, user: User, password: str) -> dict:
        sql = f"""
            UPDATE users
            SET email = %s, password = %s, is_verified = %s, last_login = %s,
                updated_at = CURRENT_TIMESTAMP
            WHERE user_id = %s
            RETURNING {USER_COLUMNS};
        """
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql,
                    (user.email, password, user.is_verified, user.last_login, user.user_id),
                )
                return dict(cur.fetchone())
