"""SQLAlchemy engine, session factory and the request-scoped session dependency."""
import logging
import time

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

logger = logging.getLogger(__name__)

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a session for one request and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def wait_for_database(retries: int | None = None, delay: float | None = None) -> bool:
    """Probe the database with ``SELECT 1`` until it answers.

    Returns False when every attempt failed and the app is allowed to start
    degraded (development); raises the last error otherwise.
    """
    retries = retries or settings.DB_CONNECT_RETRIES
    delay = settings.DB_CONNECT_RETRY_DELAY if delay is None else delay

    for attempt in range(1, retries + 1):
        try:
            logger.info("Connecting to database (attempt %d/%d)", attempt, retries)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection established")
            return True
        except OperationalError as exc:
            logger.error("Database connection attempt %d failed: %s", attempt, exc)
            if attempt < retries:
                time.sleep(delay)
                continue
            if settings.is_dev():
                logger.warning("Starting in degraded mode: database unreachable after %d attempts", retries)
                return False
            raise
    return False
