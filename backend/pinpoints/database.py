"""Database engine and helpers.

This module builds the SQLModel/SQLAlchemy engine from the configured
URL, creates the `markers` table and provides the per-request session
dependency used by the routes.
"""

import logging

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from . import models  # noqa: F401  registers the markers table
from .context import AppContext, get_context
from .errors import StartupError

logger = logging.getLogger("pinpoints.database")


def build_engine(url: str) -> Engine:
    """Create an engine for `url`.

    SQLite URLs get ``check_same_thread=False`` because FastAPI runs
    synchronous handlers on a thread pool.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    logger.info("Trying to connect to %s", make_url(url).render_as_string(hide_password=True))
    return create_engine(url, echo=False, connect_args=connect_args)


def ping(engine: Engine) -> None:
    """Run ``SELECT 1``; raises `SQLAlchemyError` when the store is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def create_db_and_tables(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def prepare_database(engine: Engine) -> None:
    """Check connectivity and create tables; failures are fatal at startup."""
    try:
        ping(engine)
    except SQLAlchemyError as exc:
        raise StartupError(f"Failed to ping database: {exc}") from exc
    logger.info("Database connected")
    try:
        create_db_and_tables(engine)
    except SQLAlchemyError as exc:
        raise StartupError(f"Could not create initial table: {exc}") from exc


def get_session(ctx: AppContext = Depends(get_context)):
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(ctx.engine) as session:
        yield session
