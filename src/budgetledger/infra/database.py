"""Database engine and session wiring for the ledger store."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Tuple

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger

logger = get_logger(__name__)


def _install_sqlite_pragmas(engine: Engine, pragmas: dict[str, str], *, file_backed: bool) -> None:
    """Apply PRAGMAs on every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        try:
            for name, value in pragmas.items():
                if name == "journal_mode" and not file_backed:
                    continue
                cursor.execute(f"PRAGMA {name}={value}")
        finally:
            cursor.close()


def create_db_engine(config: BaseConfig) -> Engine:
    """Create SQLModel engine from configuration."""
    engine_options = config.sqlalchemy_engine_options()
    engine = create_engine(config.DATABASE_URL, **engine_options)
    if config.is_sqlite:
        file_backed = ":memory:" not in config.DATABASE_URL and config.DATABASE_URL != "sqlite://"
        _install_sqlite_pragmas(engine, config.SQLITE_PRAGMAS, file_backed=file_backed)
    logger.debug(
        "Database engine created",
        extra={"url": engine.url.render_as_string(hide_password=True)},
    )
    return engine


def init_database(engine: Engine) -> None:
    """Initialize database schema."""
    # Import all models to ensure they're registered
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def create_session_factory(engine: Engine) -> Callable[[], Iterator[Session]]:
    """Create a session factory function; each call is its own transaction."""

    @contextmanager
    def factory() -> Iterator[Session]:
        """Create a new session."""
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


def bound_session_factory(session: Session) -> Callable[[], Iterator[Session]]:
    """Factory that hands every repository the same open session.

    Commit, rollback and close stay with whoever opened ``session``, so all
    repository work inside one ledger mutation succeeds or fails together.
    """

    @contextmanager
    def factory() -> Iterator[Session]:
        yield session

    return factory


def bootstrap_database(config: BaseConfig | None = None) -> Tuple[Engine, Callable]:
    """Convenience bootstrap for engine + session_factory with schema init.

    Used by the CLI and tests to ensure consistent engine options and
    session configuration. Returns (engine, session_factory).
    """

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg)
    init_database(engine)
    return engine, create_session_factory(engine)
