"""
Runtime configuration for the roster backend.

Values come from the process environment; a `.env` file in the project
root is loaded first so local development only needs that file.
"""

import os
from dataclasses import dataclass
from typing import Optional

from argon2.profiles import RFC_9106_LOW_MEMORY
from dotenv import load_dotenv

DEFAULT_PORT = 5000
DEFAULT_CORS_ORIGIN = "http://localhost:3000"


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings bundle passed to `create_app()`.

    Attributes:
        database_url (str): PostgreSQL DSN.
        port (int): Port the HTTP listener binds to.
        secret_key (str | None): Secret used to sign cookies.
        cors_origin (str): The single origin allowed to call the API.
        password_time_cost (int): Argon2 iteration count.
        password_memory_cost (int): Argon2 memory usage in KiB.
        password_parallelism (int): Argon2 lane count.
        db_pool_min (int): Minimum pooled connections.
        db_pool_max (int): Maximum pooled connections.
    """

    database_url: str
    port: int = DEFAULT_PORT
    secret_key: Optional[str] = None
    cors_origin: str = DEFAULT_CORS_ORIGIN
    password_time_cost: int = RFC_9106_LOW_MEMORY.time_cost
    password_memory_cost: int = RFC_9106_LOW_MEMORY.memory_cost
    password_parallelism: int = RFC_9106_LOW_MEMORY.parallelism
    db_pool_min: int = 1
    db_pool_max: int = 10

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            RuntimeError: If no database URL is configured.
        """
        load_dotenv()

        database_url = os.getenv("DATABASE_URL") or os.getenv("DB_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")

        return cls(
            database_url=database_url,
            port=int(os.getenv("PORT", DEFAULT_PORT)),
            secret_key=os.getenv("SECRET"),
            cors_origin=os.getenv("CORS_ORIGIN", DEFAULT_CORS_ORIGIN),
            password_time_cost=int(os.getenv("PASSWORD_TIME_COST", RFC_9106_LOW_MEMORY.time_cost)),
            password_memory_cost=int(os.getenv("PASSWORD_MEMORY_COST", RFC_9106_LOW_MEMORY.memory_cost)),
            password_parallelism=int(os.getenv("PASSWORD_PARALLELISM", RFC_9106_LOW_MEMORY.parallelism)),
            db_pool_min=int(os.getenv("DB_POOL_MIN", 1)),
            db_pool_max=int(os.getenv("DB_POOL_MAX", 10)),
        )
