"""
Create the tables used by the roster backend.

Statements are idempotent, so this can run on every startup or by hand:

    python -m backend.database.init_db
"""

import logging
import sys

from backend.config import Settings
from backend.database.db_connection import Database

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id     SERIAL PRIMARY KEY,
        email       TEXT NOT NULL,
        password    TEXT NOT NULL,
        is_verified BOOLEAN NOT NULL DEFAULT FALSE,
        last_login  TIMESTAMPTZ,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at  TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT users_email_key UNIQUE (email)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
        event_id        SERIAL PRIMARY KEY,
        created_by      TEXT,
        modified_by     TEXT,
        event_date      TIMESTAMPTZ NOT NULL,
        event_name      TEXT NOT NULL,
        leader          TEXT NOT NULL,
        backups         TEXT,
        keyboardist     TEXT,
        acoustic_guitar TEXT,
        electric_guitar TEXT,
        drums           TEXT,
        keys            TEXT,
        bass            TEXT,
        other           JSONB NOT NULL DEFAULT '[]'::jsonb,
        created_at      TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at      TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    );
    """,
)


def init_db(db: Database) -> None:
    """
    Apply every schema statement inside one transaction.

    Args:
        db (Database): An open database handle.
    """
    with db.connection() as conn:
        with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
    logging.info("[DB] Schema is up to date")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    settings = Settings.from_env()
    db = Database(settings.database_url, settings.db_pool_min, settings.db_pool_max)
    try:
        db.open()
        init_db(db)
    except Exception:
        logging.exception("[DB] Schema initialization failed")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
