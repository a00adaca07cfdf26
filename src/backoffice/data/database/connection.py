"""Database connection and session management."""
import logging
import time
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.exc import OperationalError
from backoffice.config import settings

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _build_engine(url: str):
    if _is_sqlite(url):
        # Busy timeout bounds how long a writer waits for the database lock
        return create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.transaction_timeout_seconds,
            },
            echo=False,
        )
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=False  # Set to True for SQL query logging
    )


# Create database engine
engine = _build_engine(settings.database_url)

if _is_sqlite(settings.database_url):

    @event.listens_for(engine, "connect")
    def _sqlite_on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself and enforce foreign keys
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _sqlite_on_begin(conn):
        # SQLite has no row locks; take the write lock up front so that
        # concurrent stock checks are serialized.
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

# Retry configuration
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 1

# Largest value an Integer column holds on every supported backend
MAX_DB_INT = 2**31 - 1


def apply_transaction_timeout(db: Session) -> None:
    """Bound the current transaction's statements on servers that support it."""
    if db.get_bind().dialect.name == "postgresql":
        timeout_ms = int(settings.transaction_timeout_seconds * 1000)
        db.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))


def get_db_session() -> Session:
    """
    Get a database session with retry logic.
    Retries up to 3 times on connection failure.
    """
    last_error = None

    for attempt in range(MAX_RETRIES):
        db = SessionLocal()
        try:
            # Test the connection with a simple query
            db.execute(text("SELECT 1"))
            # End the ping transaction so reads do not hold the SQLite write lock
            db.rollback()
            return db
        except OperationalError as e:
            db.close()
            last_error = e
            if attempt < MAX_RETRIES - 1:
                logger.warning(
                    "[DB] Connection attempt %d failed, retrying in %ss...",
                    attempt + 1, RETRY_DELAY_SECONDS,
                )
                time.sleep(RETRY_DELAY_SECONDS)
            else:
                logger.error("[DB] All %d connection attempts failed", MAX_RETRIES)

    raise last_error


def get_db():
    """Dependency for getting database session with retry logic."""
    db = get_db_session()
    try:
        yield db
    finally:
        db.close()
