"""
Authentication service route handlers.

Provides routes for:
- User signup
- User signin

Credentials travel in the request body. No token or session is issued;
a successful signin returns the stored user record.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, Response, current_app

from backend.auth_service.credentials import SigninOutcome, SignupOutcome, signin, signup
from backend.auth_service.passwords import PasswordManager
from backend.auth_service.store import UserStore
from backend.common.http_utils import (
    GENERIC_ERROR_MESSAGE,
    error_response,
    get_request_data,
    install_request_logging,
    parse_dt,
    success_response,
)
from backend.database.db_connection import get_db

auth_bp = Blueprint("auth", __name__)
install_request_logging(auth_bp, "Auth")

PASSWORDS_EXTENSION_KEY = "passwords"


def get_user_store() -> UserStore:
    """
    Build a `UserStore` over the app's database handle and password policy.
    """
    passwords: PasswordManager = current_app.extensions[PASSWORDS_EXTENSION_KEY]
    return UserStore(get_db(), passwords)


# --- SIGNUP ---
@auth_bp.route("/signup", methods=["POST"])
def signup_user() -> Tuple[Response, int]:
    """
    Register a new user.

    Expects a body with:
    - email (str)
    - password (str)
    - lastLogin (str, optional): ISO-8601 timestamp.

    Any `isVerified` value in the body is ignored; new users start unverified.

    Returns:
        200: `{"message": "success", "data": <user>}`.
        400: Missing email or password, or an unparseable lastLogin.
        409: Email already registered.
        500: Hashing or database failure.
    """
    data: Dict[str, Any] = get_request_data()
    email = str(data.get("email") or "").strip()
    password = data.get("password")

    if not email or not password:
        return error_response("Email and password required", 400)

    last_login = None
    if data.get("lastLogin"):
        last_login = parse_dt(data.get("lastLogin"))
        if last_login is None:
            return error_response("Invalid lastLogin format. Use ISO-8601.", 400)

    result = signup(get_user_store(), email, str(password), last_login=last_login)

    if result.outcome is SignupOutcome.ALREADY_EXISTS:
        return error_response(
            "User already exist! Please use a different email or contact the admin.", 409
        )
    if result.outcome is SignupOutcome.ERROR:
        logging.error("[Auth] Signup failed", exc_info=result.error)
        return error_response(GENERIC_ERROR_MESSAGE, 500)

    return success_response(result.user.to_dict())


# --- SIGNIN ---
@auth_bp.route("/signin", methods=["POST"])
def signin_user() -> Tuple[Response, int]:
    """
    Check credentials and return the stored user.

    Expects a body with:
    - email (str)
    - password (str)

    Returns:
        200: `{"message": "success", "data": <user>}`.
        400: Missing email or password.
        401: Password incorrect.
        404: No user with that email.
        500: Lookup or comparison failure.
    """
    data: Dict[str, Any] = get_request_data()
    email = str(data.get("email") or "").strip()
    password = data.get("password")

    if not email or not password:
        return error_response("Email and password required", 400)

    result = signin(get_user_store(), email, str(password))

    if result.outcome is SigninOutcome.NOT_FOUND:
        return error_response("User does not exist!", 404)
    if result.outcome is SigninOutcome.INVALID_CREDENTIALS:
        return error_response("Password incorrect!", 401)
    if result.outcome is SigninOutcome.ERROR:
        logging.error("[Auth] Signin failed", exc_info=result.error)
        return error_response(GENERIC_ERROR_MESSAGE, 500)

    return success_response(result.user.to_dict())
