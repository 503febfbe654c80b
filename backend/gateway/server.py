"""
API gateway: combines the auth and events blueprints.
This is the local entrypoint for development.
"""

import atexit
import logging
import sys
from typing import Optional

from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from backend.auth_service.passwords import PasswordManager
from backend.auth_service.routes import PASSWORDS_EXTENSION_KEY, auth_bp
from backend.common.http_utils import GENERIC_ERROR_MESSAGE, error_response
from backend.config import Settings
from backend.database.db_connection import EXTENSION_KEY as DATABASE_EXTENSION_KEY
from backend.database.db_connection import Database
from backend.database.init_db import init_db
from backend.events_service.routes import events_bp

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        settings (Settings, optional): Defaults to `Settings.from_env()`.
        db (Database, optional): An already opened handle. When omitted a
            pool is created from `settings.database_url`, opened, and the
            schema is ensured; that pool is closed at interpreter exit.
            A handle passed in stays owned by the caller.

    Returns:
        Flask: The configured Flask application.
    """
    settings = settings or Settings.from_env()

    app = Flask(__name__)

    # Signed cookies
    if settings.secret_key:
        app.secret_key = settings.secret_key
    else:
        logging.warning("SECRET is not set; signed cookies are disabled.")

    CORS(app, resources={
        r"/*": {
            "origins": [settings.cors_origin],
            "methods": ["GET", "PUT", "POST", "DELETE"],
            "allow_headers": ["Origin", "X-Requested-With", "Content-Type", "Accept", "Cookie"],
            "supports_credentials": True,
        }
    })

    if db is None:
        db = Database(settings.database_url, settings.db_pool_min, settings.db_pool_max)
        db.open()
        atexit.register(db.close)
        init_db(db)

    app.extensions[DATABASE_EXTENSION_KEY] = db
    app.extensions[PASSWORDS_EXTENSION_KEY] = PasswordManager(
        time_cost=settings.password_time_cost,
        memory_cost=settings.password_memory_cost,
        parallelism=settings.password_parallelism,
    )
    app.config["PORT"] = settings.port

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(events_bp)
    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINT ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return "hi", 200, {"Content-Type": "text/plain; charset=utf-8"}

    # --- JSON ERRORS ---
    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return error_response(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def internal_error(error: Exception):
        logging.exception("Unhandled error")
        return error_response(GENERIC_ERROR_MESSAGE, 500)

    return app


def main() -> int:
    settings = Settings.from_env()
    db = Database(settings.database_url, settings.db_pool_min, settings.db_pool_max)
    try:
        db.open()
        init_db(db)
        app = create_app(settings, db)
        logging.info(f"Server is listening on port {settings.port}...")
        app.run(host="0.0.0.0", port=settings.port)
    except Exception:
        logging.exception("Server failed to start")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
