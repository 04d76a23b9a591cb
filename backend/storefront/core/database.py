"""
Conexión a base de datos

Este módulo centraliza el acceso a la base de datos vía SQLAlchemy:
- Engine + Session factory (ORM)
- FastAPI dependency `get_db`
- Health check used by /health

PostgreSQL (psycopg2 driver) in production, SQLite for local development
and tests.

Author: TM3
Updated: 2026-10-19
"""
import logging
import time
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)


# Base para modelos
Base = declarative_base()


# Connection execution option marking a transaction that will write
WRITE_LOCK_OPTION = "storefront_write_lock"


def build_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL (defaults to settings)

    SQLite runs in WAL mode so readers never block writers. Write units
    (see begin_write) open with BEGIN IMMEDIATE so concurrent checkouts
    serialize on the write lock instead of failing with "database is
    locked" when upgrading a read lock; every other transaction is a plain
    deferred BEGIN and takes no write lock.
    PostgreSQL relies on row locks (SELECT ... FOR UPDATE) taken by the
    inventory ledger.
    """
    url = database_url or settings.get_database_url()

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

        @event.listens_for(engine, "connect")
        def _configure_sqlite(dbapi_connection, connection_record):
            # Let SQLAlchemy emit BEGIN itself (see _begin)
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _begin(conn):
            if conn.get_execution_options().get(WRITE_LOCK_OPTION):
                conn.exec_driver_sql("BEGIN IMMEDIATE")
            else:
                conn.exec_driver_sql("BEGIN")

        return engine

    return create_engine(
        url,
        pool_pre_ping=True,  # Verificar conexión antes de usar
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


# SQLAlchemy Engine
engine = build_engine()

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    FastAPI dependency para obtener sesión de SQLAlchemy

    Usage:
        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def begin_write(session: Session) -> None:
    """
    Start the session's next transaction as a write unit

    Any open read transaction on the session is rolled back first so the
    write lock is taken before the first statement runs. Services call this
    before a unit that inserts or updates rows; plain reads never do.
    """
    if session.in_transaction():
        session.rollback()
    session.connection(execution_options={WRITE_LOCK_OPTION: True})


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables registered on Base"""
    # Import models so they register themselves on Base.metadata
    from storefront import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def check_database(bind: Optional[Engine] = None) -> dict:
    """
    Run SELECT 1 against the database and report latency

    Returns:
        Dict with status ("connected" / "disconnected"), latency_ms and error
    """
    target = bind or engine
    start = time.time()

    try:
        with target.connect() as conn:
            conn.execute(text("SELECT 1"))
        latency_ms = round((time.time() - start) * 1000, 2)
        return {"status": "connected", "latency_ms": latency_ms, "error": None}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "disconnected", "latency_ms": None, "error": str(e)}
