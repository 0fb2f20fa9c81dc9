"""Engine, session and transaction plumbing for the ledger stores."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Tuple, TypeVar

from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..errors import Conflict, Internal, LedgerError, TransactionTimeout
from ..logging_config import get_logger

T = TypeVar("T")
SessionFactory = Callable[[], ContextManager[Session]]

logger = get_logger("infra.database")

_SQLITE_LOCK_MESSAGES = ("database is locked", "database table is locked")
# lock_not_available, deadlock_detected
_PG_RETRYABLE_CODES = {"55P03", "40P01"}


def create_db_engine(config: BaseConfig) -> Engine:
    """Create SQLModel engine from configuration."""
    engine = create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())
    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine, config.SQLITE_PRAGMAS)
    elif engine.dialect.name == "postgresql":
        _configure_lock_timeout(engine, config.TX_TIMEOUT)
    return engine


def _configure_sqlite(engine: Engine, pragmas: dict[str, str]) -> None:
    """Apply pragmas and open every transaction with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first write, which lets two transactions
    read the same row before either writes it. Taking the write lock up front
    serializes ledger units of work.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        for key, value in pragmas.items():
            cursor.execute(f"PRAGMA {key}={value}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection) -> None:
        # Read-only connections use a deferred BEGIN and take no write lock.
        if connection.get_execution_options().get("ledger_read_only"):
            connection.exec_driver_sql("BEGIN")
        else:
            connection.exec_driver_sql("BEGIN IMMEDIATE")


def _configure_lock_timeout(engine: Engine, timeout: float) -> None:
    millis = max(1, int(timeout * 1000))

    @event.listens_for(engine, "begin")
    def _on_begin(connection) -> None:
        connection.exec_driver_sql(f"SET LOCAL lock_timeout = '{millis}ms'")


def init_database(engine: Engine) -> None:
    """Initialize database schema."""
    # Import all models to ensure they're registered
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def check_connection(engine: Engine) -> bool:
    """Return True when a trivial query succeeds."""
    try:
        with engine.connect().execution_options(ledger_read_only=True) as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return False
    return True


def is_lock_timeout(exc: BaseException) -> bool:
    if not isinstance(exc, OperationalError):
        return False
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in _PG_RETRYABLE_CODES:
        return True
    message = str(orig).lower()
    return any(fragment in message for fragment in _SQLITE_LOCK_MESSAGES)


def translate_error(exc: Exception) -> Exception:
    """Map storage exceptions onto the ledger error taxonomy."""

    if isinstance(exc, LedgerError) or not isinstance(exc, SQLAlchemyError):
        return exc
    if is_lock_timeout(exc):
        return TransactionTimeout("Timed out waiting for a database lock; retry the request")
    if isinstance(exc, IntegrityError):
        return Conflict("The change conflicts with a concurrent modification")
    return Internal("Storage failure; the operation was rolled back")


def create_session_factory(engine: Engine) -> SessionFactory:
    """Create a session factory function.

    Each session is one unit of work: it commits when the block exits cleanly
    and rolls back on any exception, which is re-raised as a ledger error.
    """

    @contextmanager
    def factory() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception as exc:
            session.rollback()
            translated = translate_error(exc)
            if translated is exc:
                raise
            if not isinstance(translated, TransactionTimeout):
                logger.error("Unit of work rolled back", exc_info=exc)
            raise translated from exc
        finally:
            session.close()

    return factory


def run_in_transaction(
    session_factory: SessionFactory,
    work: Callable[[Session], T],
    *,
    retries: int = 0,
) -> T:
    """Run ``work`` in its own unit of work, retrying lock timeouts."""

    attempt = 0
    while True:
        try:
            with session_factory() as session:
                return work(session)
        except TransactionTimeout:
            if attempt >= retries:
                logger.warning("Giving up after lock timeout", extra={"attempts": attempt + 1})
                raise
            attempt += 1
            logger.info("Retrying unit of work after lock timeout", extra={"attempt": attempt})


def bootstrap_database(config: BaseConfig | None = None) -> Tuple[Engine, SessionFactory]:
    """Convenience bootstrap for engine + session_factory with schema init.

    Used by the app factory, the CLI and tests. Returns (engine, session_factory).
    """

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg)
    init_database(engine)
    return engine, create_session_factory(engine)
