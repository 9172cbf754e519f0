"""
Module: ledger_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory
    management, and transactional scope utilities for the persistence
    boundary that feeds ``SqlBalanceSource``.
Architecture position: Kernel > DB.  May import from db/base.py and, in
    create_tables/drop_tables only, from models/.

Invariants enforced:
    - Sessions are handed out only after init_engine_from_url().
    - session_scope() commits on normal exit and rolls back on error.
    - The engine is URL-generic.  SQLite URLs get a single shared
      connection so in-memory databases survive across sessions.

Failure modes:
    - RuntimeError if get_engine/get_session is
      called before init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from collections.abc import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
) -> Engine:
    """
    Initialize the module-level engine and session factory.

    A second call replaces the first.  Pool sizing applies to server
    databases only; SQLite uses a StaticPool.

    Args:
        database_url: SQLAlchemy URL (``postgresql+psycopg://...``,
            ``sqlite://``...).
        echo: If True, log all SQL statements.
        pool_size: Connections kept in the pool.
        max_overflow: Connections allowed beyond pool_size.
        pool_pre_ping: Test connections before use.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine, _SessionFactory

    dialect = make_url(database_url).get_backend_name()
    if dialect == "sqlite":
        _engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        _engine = create_engine(
            database_url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
        )

    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={"dialect": dialect, "echo": echo},
    )
    return _engine


def _require(value, what: str):
    if value is None:
        raise RuntimeError(
            f"no {what}: init_engine_from_url() has not been called"
        )
    return value


def get_engine() -> Engine:
    """The engine installed by ``init_engine_from_url``.

    Raises:
        RuntimeError: No engine has been installed yet.
    """
    return _require(_engine, "engine")


def get_session() -> Session:
    """Open a fresh ``Session``; the caller owns closing it."""
    return _require(_SessionFactory, "session factory")()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Unit-of-work block for loaders and tests.

        with session_scope() as session:
            session.add(group)

    The session commits when the block exits cleanly.  Any exception
    rolls it back and is re-raised; the session is closed either way.
    """
    session = get_session()
    logger.debug("session_opened")
    try:
        yield session
        session.commit()
        logger.debug("session_committed")
    except Exception:
        session.rollback()
        logger.warning("session_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create the chart-of-accounts and balance tables."""
    from ledger_kernel.db.base import Base
    import ledger_kernel.models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """Drop every mapped table.  Test teardown only."""
    from ledger_kernel.db.base import Base
    import ledger_kernel.models  # noqa: F401

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose and forget the engine and session factory."""
    global _engine, _SessionFactory
    engine, _engine, _SessionFactory = _engine, None, None
    if engine is not None:
        engine.dispose()


@atexit.register
def _dispose_on_exit() -> None:
    if _engine is not None:
        _engine.dispose()
