from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session
from celpip_api.core.config import settings
import logging

logger = logging.getLogger(__name__)


def _configure_sqlite_connection(dbapi_connection, connection_record):
    """
    Per-connection SQLite setup.

    Foreign keys must be switched on for ON DELETE CASCADE to apply. The driver's
    own transaction handling is disabled so that _begin_sqlite_transaction can
    emit BEGIN before the first statement, SELECTs included; in WAL mode a
    transaction then reads from one snapshot while writers commit alongside it.
    """
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.close()


def _begin_sqlite_transaction(conn):
    conn.exec_driver_sql("BEGIN")


def create_db_engine(db_url: str) -> Engine:
    """
    Create the SQLAlchemy engine for the given URL.

    PostgreSQL gets a sized, pre-pinged connection pool. SQLite (local runs and
    tests) gets foreign key enforcement so tree deletes cascade the same way,
    and explicit transactions so multi-statement reads are consistent.
    """
    if db_url.startswith("sqlite"):
        sqlite_engine = create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
        event.listen(sqlite_engine, "connect", _configure_sqlite_connection)
        event.listen(sqlite_engine, "begin", _begin_sqlite_transaction)
        return sqlite_engine

    return create_engine(
        db_url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
    )


logger.info(f"Connecting to database: {settings.sqlalchemy_url[:20]}...")  # Log partial URL for debugging

engine = create_db_engine(settings.sqlalchemy_url)


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


def init_db(bind: Engine = engine):
    """Initialize database tables."""
    # Import models so they are registered with SQLModel metadata
    from celpip_api.models import models  # noqa: F401

    SQLModel.metadata.create_all(bind)
