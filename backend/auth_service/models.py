"""
User model for the authentication service.

A `User` remembers which of its fields were assigned since it was loaded
or last saved. The store relies on this to hash the password only when
the record is new or the password was actually set.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Set

from backend.auth_service.passwords import PasswordManager


@dataclass
class User:
    email: str
    password: str
    is_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_id: Optional[int] = None
    _modified: Set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.email = (self.email or "").strip()
        self._modified.clear()

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name != "_modified" and "_modified" in self.__dict__:
            self._modified.add(name)

    @property
    def is_new(self) -> bool:
        return self.user_id is None

    def is_modified(self, name: str) -> bool:
        return name in self._modified

    def mark_saved(self) -> None:
        self._modified.clear()

    @property
    def needs_password_hash(self) -> bool:
        return self.is_new or self.is_modified("password")

    def password_for_write(self, passwords: PasswordManager) -> str:
        """
        Return the value to persist for `password`.

        A freshly assigned plaintext is hashed; an unchanged stored hash is
        returned as is. The user itself is not touched, so a failed write
        leaves the plaintext in place for a retry.

        Raises:
            PasswordHashingError: If hashing fails.
        """
        if not self.needs_password_hash:
            return self.password
        return passwords.hash(self.password)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        """
        Build a clean (unmodified) user from a `users` table row.
        """
        user = cls(
            email=row["email"],
            password=row["password"],
            is_verified=bool(row["is_verified"]),
            last_login=row["last_login"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            user_id=row["user_id"],
        )
        user.mark_saved()
        return user

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the full stored record for API responses.
        """
        return {
            "_id": self.user_id,
            "email": self.email,
            "password": self.password,
            "isVerified": self.is_verified,
            "lastLogin": _isoformat(self.last_login),
            "created_at": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
