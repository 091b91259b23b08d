"""Database session management."""
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from helpdesk.config.settings import settings
from helpdesk.realtime.change_feed import ChangeCapture, change_feed


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself so SAVEPOINT works on pysqlite.

    The driver's own transaction handling otherwise swallows savepoints.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str, echo: bool = False, memory: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    Args:
        url: SQLAlchemy database URL
        echo: Log emitted SQL
        memory: Share one connection across threads (in-memory SQLite)
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if memory:
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_POOL_OVERFLOW,
    )


def create_session_factory(bind: Engine, capture: ChangeCapture = None) -> sessionmaker:
    """Session factory with change capture installed."""
    factory = sessionmaker(autocommit=False, autoflush=False, bind=bind)
    (capture or ChangeCapture(change_feed)).install(factory)
    return factory


# Create database engine using the get_database_url method
engine = create_db_engine(settings.get_database_url(), echo=settings.DB_ECHO)

# Create SessionLocal class
SessionLocal = create_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that yields a database session.

    Usage in FastAPI endpoints:
        @router.get("/items/")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
