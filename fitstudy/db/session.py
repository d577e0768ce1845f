# fitstudy/db/session.py

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from fitstudy.core.config import settings
from fitstudy.db.unit_of_work import WRITE_UNIT_OPTION


def make_engine(url: str, *, lock_timeout_ms: int = settings.DB_LOCK_TIMEOUT_MS) -> Engine:
    """
    Build an engine for the given database URL.

    SQLite has no row locks, so a transaction started for a write unit is
    opened with BEGIN IMMEDIATE. That takes the database write lock up front
    and makes a booking unit as exclusive as the FOR UPDATE reads are on
    PostgreSQL. Every other transaction is a plain deferred BEGIN, and the
    database runs in WAL mode so open readers never hold up a writer.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    engine = create_engine(
        url,
        connect_args={
            "check_same_thread": False,
            "timeout": lock_timeout_ms / 1000,
        },
    )

    @event.listens_for(engine, "connect")
    def _configure_sqlite_connection(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself instead of the driver.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn):
        if conn.get_execution_options().get(WRITE_UNIT_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


# The engine is the entry point to the database. It's configured with the
# database URL and handles the connection pooling.
engine = make_engine(settings.DATABASE_URL)

# SessionLocal is a factory for creating new Session objects.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
