# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite works for local runs and tests).
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from app.config import settings


def build_engine(url: str):
    """Create an engine with pool settings suited to the backend."""
    if url.startswith("sqlite"):
        # Sessions are handed across the request threadpool
        sqlite_engine = create_engine(url, connect_args={"check_same_thread": False, "timeout": 30}, echo=False)
        _enable_sqlite_transactions(sqlite_engine)
        return sqlite_engine
    return create_engine(
        url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


def _enable_sqlite_transactions(sqlite_engine):
    """
    pysqlite defers BEGIN until the first write, which breaks SAVEPOINT and lets
    a vote insert commit separately from its counter update. Hand transaction
    control back to SQLAlchemy and open every transaction with BEGIN IMMEDIATE.
    A deferred transaction that reads and then writes fails at once with
    "database is locked" once another connection has committed; an immediate
    one queues on the busy timeout instead. Every session transaction holds the
    write lock, so SQLite serializes all units across alerts.
    """
    @event.listens_for(sqlite_engine, "connect")
    def _no_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(sqlite_engine, "begin")
    def _explicit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.actor import Actor            # noqa
    from app.models.alert import Alert            # noqa
    from app.models.alert_vote import AlertVote   # noqa
    from app.models.alert_view import AlertView   # noqa

    Base.metadata.create_all(bind=bind or engine)
