"""
Signup and signin flows.

Both flows return a small result object instead of raising for
expected outcomes (user exists, unknown email, wrong password). Only
infrastructure failures end up as `ERROR`, with the exception attached
so the caller can log it.

Signin:
    START -> lookup(email)
      lookup fails    -> ERROR
      no record       -> NOT_FOUND
      record found    -> compare(password, stored hash)
        compare fails -> ERROR
        mismatch      -> INVALID_CREDENTIALS
        match         -> AUTHENTICATED (result carries the stored user)
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from backend.auth_service.models import User
from backend.auth_service.passwords import PasswordHashingError
from backend.auth_service.store import UserAlreadyExistsError, UserStore


class SigninOutcome(Enum):
    AUTHENTICATED = "authenticated"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    ERROR = "error"


class SignupOutcome(Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    ERROR = "error"


@dataclass(frozen=True)
class SigninResult:
    outcome: SigninOutcome
    user: Optional[User] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class SignupResult:
    outcome: SignupOutcome
    user: Optional[User] = None
    error: Optional[Exception] = None


def signin(store: UserStore, email: str, password: str) -> SigninResult:
    """
    Check an email/password pair against the stored hash.

    Args:
        store (UserStore): Where users are looked up.
        email (str): Email as supplied; surrounding whitespace is ignored.
        password (str): Plaintext password.

    Returns:
        SigninResult: AUTHENTICATED with the full stored user, or one of
        NOT_FOUND / INVALID_CREDENTIALS / ERROR.
    """
    try:
        user = store.find_by_email((email or "").strip())
    except Exception as e:
        return SigninResult(SigninOutcome.ERROR, error=e)

    if user is None:
        return SigninResult(SigninOutcome.NOT_FOUND)

    try:
        matched = store.passwords.verify(user.password, password)
    except PasswordHashingError as e:
        return SigninResult(SigninOutcome.ERROR, error=e)

    if not matched:
        return SigninResult(SigninOutcome.INVALID_CREDENTIALS)
    return SigninResult(SigninOutcome.AUTHENTICATED, user=user)


def signup(
    store: UserStore,
    email: str,
    password: str,
    last_login: Optional[datetime] = None,
) -> SignupResult:
    """
    Create a user unless the email is already taken.

    The email is checked up front; the unique constraint on the table
    catches the case where two signups race past that check. New users
    always start unverified.
    """
    email = (email or "").strip()
    try:
        if store.find_by_email(email) is not None:
            return SignupResult(SignupOutcome.ALREADY_EXISTS)

        user = User(email=email, password=password, is_verified=False, last_login=last_login)
        store.save(user)
    except UserAlreadyExistsError:
        return SignupResult(SignupOutcome.ALREADY_EXISTS)
    except Exception as e:
        return SignupResult(SignupOutcome.ERROR, error=e)

    return SignupResult(SignupOutcome.CREATED, user=user)
