"""
Database configuration and session management
"""
import logging
import re
import time
from contextlib import contextmanager
from typing import Callable, ContextManager, Generator, Iterator, Optional

from sqlalchemy import create_engine, event, make_url
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from lawdesk.core.config import get_settings
from lawdesk.core.logging_config import LoggingConfig
from lawdesk.core.metrics import (db_connection_pool_overflow,
                                  db_connection_pool_size, db_queries_total,
                                  db_query_duration_seconds)

logger = LoggingConfig.get_logger(__name__)

# Lazy initialization - don't create engine at module level
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

# Base class for models (can be created immediately)
Base = declarative_base()

_TABLE_PATTERNS = {
    'select': re.compile(r'\bFROM\s+["`]?(\w+)', re.IGNORECASE),
    'insert': re.compile(r'\bINTO\s+["`]?(\w+)', re.IGNORECASE),
    'update': re.compile(r'^\s*UPDATE\s+["`]?(\w+)', re.IGNORECASE),
    'delete': re.compile(r'\bFROM\s+["`]?(\w+)', re.IGNORECASE),
}


def _statement_labels(statement: str):
    """Extract (operation, table) metric labels from a SQL statement"""
    stripped = statement.strip()
    if not stripped:
        return "unknown", "unknown"
    operation = stripped.split()[0].lower()
    pattern = _TABLE_PATTERNS.get(operation)
    match = pattern.search(stripped) if pattern else None
    table = match.group(1).lower() if match else "unknown"
    return operation, table


def _update_pool_metrics(engine: Engine):
    pool = engine.pool
    # Not every pool class exposes size accounting (e.g. SQLite's StaticPool)
    if not hasattr(pool, "checkedout"):
        return
    checked_out = pool.checkedout()
    db_connection_pool_size.labels(state="active").set(checked_out)
    db_connection_pool_size.labels(state="idle").set(max(pool.size() - checked_out, 0))
    db_connection_pool_overflow.set(pool.overflow())


def _setup_db_metrics(engine: Engine):
    """Setup SQLAlchemy event listeners for database metrics"""

    @event.listens_for(engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault('query_start_time', []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if not conn.info.get('query_start_time'):
            return
        duration = time.time() - conn.info['query_start_time'].pop()
        operation, table = _statement_labels(statement)
        db_queries_total.labels(operation=operation, table=table).inc()
        db_query_duration_seconds.labels(operation=operation, table=table).observe(duration)

    @event.listens_for(engine, "checkout")
    def receive_checkout(dbapi_conn, connection_record, connection_proxy):
        _update_pool_metrics(engine)

    @event.listens_for(engine, "checkin")
    def receive_checkin(dbapi_conn, connection_record):
        _update_pool_metrics(engine)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with dialect-appropriate pool and connect arguments"""
    settings = get_settings()
    kwargs = {"echo": echo, "pool_pre_ping": True}

    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"timeout": 5, "check_same_thread": False}
    else:
        kwargs["pool_size"] = settings.database_pool_size
        kwargs["max_overflow"] = settings.database_max_overflow
        if database_url.startswith("postgresql"):
            kwargs["connect_args"] = {
                "connect_timeout": 5,
                "options": "-c statement_timeout=5000"
            }

    engine = create_engine(database_url, **kwargs)
    _setup_db_metrics(engine)
    return engine


def get_engine() -> Engine:
    """Get or create database engine (lazy initialization)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        # echo stays off unless explicitly requested; LoggingConfig owns SQL logging
        _engine = build_engine(settings.database_url, echo=settings.log_sqlalchemy)

        sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
        if not settings.log_sqlalchemy:
            sqlalchemy_logger.setLevel(logging.WARNING)
            sqlalchemy_logger.propagate = False

        logger.info(
            "Database engine created",
            extra={"database_url": make_url(settings.database_url).render_as_string(hide_password=True)}
        )

    return _engine


def get_session_local() -> sessionmaker:
    """Get or create session factory (lazy initialization)"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def __getattr__(name):
    """Expose engine and SessionLocal as lazily created module attributes"""
    if name == 'engine':
        return get_engine()
    elif name == 'SessionLocal':
        return get_session_local()
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def init_db(engine: Optional[Engine] = None) -> None:
    """Create any missing tables registered on Base"""
    import lawdesk.models  # noqa: F401 - register models with Base.metadata

    target = engine or get_engine()
    Base.metadata.create_all(bind=target)
    logger.info("Database tables ensured", extra={"tables": sorted(Base.metadata.tables)})


@contextmanager
def session_scope() -> Iterator[Session]:
    """Open a session and close it on exit, whatever the outcome"""
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database session

    The session is closed when the request finishes, whatever the outcome.
    """
    with session_scope() as db:
        yield db


def get_session_opener() -> Callable[[], ContextManager[Session]]:
    """
    Dependency for routes that only sometimes need the database

    Nothing is created until the returned callable is entered, so requests
    that never reach it build neither the engine nor a session.
    """
    return session_scope
