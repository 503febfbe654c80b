from datetime import datetime, timezone
from unittest.mock import MagicMock

import psycopg2.errors
import pytest

from backend.auth_service.models import User
from backend.auth_service.passwords import PasswordManager
from backend.auth_service.store import UserStore
from backend.config import Settings
from backend.gateway.server import create_app


class InMemoryUserStore(UserStore):
    """
    UserStore whose rows live in a dict. Only the SQL-facing methods are
    replaced, so save() still runs the real hash-on-write step.
    """

    def __init__(self, passwords):
        super().__init__(db=None, passwords=passwords)
        self.rows = {}
        self.next_id = 1

    def find_by_email(self, email):
        for row in self.rows.values():
            if row["email"] == email:
                return User.from_row(row)
        return None

    def _insert(self, user, password):
        if any(r["email"] == user.email for r in self.rows.values()):
            raise psycopg2.errors.UniqueViolation("duplicate key value violates unique constraint")
        now = datetime.now(timezone.utc)
        row = {
            "user_id": self.next_id,
            "email": user.email,
            "password": password,
            "is_verified": user.is_verified,
            "last_login": user.last_login,
            "created_at": now,
            "updated_at": now,
        }
        self.rows[self.next_id] = row
        self.next_id += 1
        return dict(row)

    def _update(self, user, password):
        row = self.rows[user.user_id]
        row.update(
            email=user.email,
            password=password,
            is_verified=user.is_verified,
            last_login=user.last_login,
            updated_at=datetime.now(timezone.utc),
        )
        return dict(row)


@pytest.fixture
def passwords():
    # Cheap parameters keep the suite fast; the algorithm is unchanged.
    return PasswordManager(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def user_store(passwords):
    return InMemoryUserStore(passwords)


@pytest.fixture
def mock_db():
    """
    Mocks the Database handle, its pooled connection, and the cursor.
    """
    mock_db = MagicMock()
    mock_conn = MagicMock()
    mock_cursor = MagicMock()

    mock_conn.__enter__.return_value = mock_conn
    mock_conn.__exit__.return_value = None
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None

    mock_db.connection.return_value = mock_conn
    mock_conn.cursor.return_value = mock_cursor

    return mock_db, mock_cursor


@pytest.fixture
def settings():
    return Settings(
        database_url="postgresql://test@localhost/test",
        secret_key="test_secret",
        password_time_cost=1,
        password_memory_cost=8,
        password_parallelism=1,
    )


@pytest.fixture
def app(settings, mock_db):
    db, _ = mock_db
    app = create_app(settings, db)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
