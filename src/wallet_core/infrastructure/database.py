"""SQLAlchemy engine and session factory construction."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from wallet_core.infrastructure.orm import Base
from wallet_core.logging_config import get_logger

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from wallet_core.config import DatabaseSettings

logger = get_logger("infrastructure.database")


def build_engine(settings: DatabaseSettings) -> Engine:
    """Create an engine from database settings.

    SQLite engines get explicit transaction control (see
    _use_immediate_transactions); the isolation_level setting applies to
    every other backend. In-memory SQLite gets a single shared connection
    (StaticPool) so every session sees the same database; stores on such an
    engine must run one unit of work at a time (see uses_single_connection).
    """
    is_sqlite = make_url(settings.url).get_backend_name() == "sqlite"
    engine_kwargs: dict[str, Any] = {"echo": settings.echo}
    if not is_sqlite:
        engine_kwargs["isolation_level"] = settings.isolation_level
    if _is_sqlite_memory(settings.url):
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_pre_ping"] = True
        if settings.pool_size is not None:
            engine_kwargs["pool_size"] = settings.pool_size
        if settings.max_overflow is not None:
            engine_kwargs["max_overflow"] = settings.max_overflow

    engine = create_engine(settings.url, **engine_kwargs)
    if is_sqlite:
        _use_immediate_transactions(engine)
    logger.info(
        "engine_initialized",
        extra={
            "dialect": engine.dialect.name,
            "isolation_level": "IMMEDIATE" if is_sqlite else settings.isolation_level,
            "echo": settings.echo,
        },
    )
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create the ledger tables if they do not exist (migrations preferred in production)."""
    Base.metadata.create_all(engine)


def uses_single_connection(engine: Engine) -> bool:
    """True when every session of the engine shares one DBAPI connection."""
    return isinstance(engine.pool, StaticPool)


def _is_sqlite_memory(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def _use_immediate_transactions(engine: Engine) -> None:
    """Make every SQLite transaction take the write lock when it begins.

    pysqlite defers BEGIN until the first write and SQLite ignores
    SELECT ... FOR UPDATE, so two transfers could both read a balance before
    either writes it. Disabling the driver's own transaction handling and
    emitting BEGIN IMMEDIATE serializes units of work instead.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
