"""Database engine, sessions and schema setup for TaskMind.

A local SQLite file is the default. Production sets ``DATABASE_URL`` to a
PostgreSQL URL; schema changes ship as Alembic revisions in
``alembic/versions``.
"""

import logging
import os
from typing import Any, Dict, Iterator, Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskmind.db")
ALEMBIC_INI = os.getenv("ALEMBIC_INI", "alembic.ini")

# Run on every new SQLite connection.
SQLITE_PRAGMAS = (
    "PRAGMA foreign_keys=ON",
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=5000",
)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "False").lower() == "true"


def _is_sqlite_url(database_url: str) -> bool:
    return (database_url or "").startswith("sqlite")


def get_engine_kwargs(database_url: str) -> Dict[str, Any]:
    """create_engine() keyword arguments for ``database_url``.

    Pure function of the URL and environment, so it can be tested without
    connecting anywhere.
    """
    kwargs: Dict[str, Any] = {
        "echo": _env_flag("DEBUG"),
        "pool_pre_ping": True,
    }
    if _is_sqlite_url(database_url):
        # Sessions cross FastAPI threadpool workers.
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "5")),
            pool_timeout=int(os.getenv("DB_POOL_TIMEOUT_SEC", "30")),
        )
    return kwargs


def _apply_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def build_engine(database_url: str) -> Engine:
    """Create an engine for ``database_url``; SQLite engines get SQLITE_PRAGMAS."""
    built = create_engine(database_url, **get_engine_kwargs(database_url))
    if _is_sqlite_url(database_url):
        event.listen(built, "connect", _apply_sqlite_pragmas)
    return built


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for declarative models
Base = declarative_base()


def get_db() -> Iterator[Session]:
    """Yield a session for one request (FastAPI dependency)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_migrations(database_url: str = DATABASE_URL) -> None:
    """Upgrade ``database_url`` to the latest Alembic revision."""
    from alembic import command
    from alembic.config import Config

    config = Config(ALEMBIC_INI)
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


def init_db(bind: Optional[Engine] = None) -> None:
    """Create or upgrade the schema.

    With ``RUN_MIGRATIONS=true`` on a non-SQLite database the schema is
    upgraded through Alembic. Otherwise tables are created from the models
    on ``bind`` (the application engine by default).
    """
    # Registers the tables on Base.metadata.
    from taskmind.database import models  # noqa: F401

    if _env_flag("RUN_MIGRATIONS") and not _is_sqlite_url(DATABASE_URL):
        logger.info("Upgrading database schema with Alembic")
        run_migrations(DATABASE_URL)
        return

    Base.metadata.create_all(bind=bind or engine)
