"""
Database engine, sessions and connection state
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import settings
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": settings.DB_TIMEOUT_SECONDS}
    return {"connect_timeout": int(settings.DB_TIMEOUT_SECONDS)}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a session for the duration of one request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@dataclass
class ConnectionState:
    """Last known state of the persistence backend"""

    ready: bool = False
    attempts: int = 0
    last_error: Optional[str] = None
    last_checked: Optional[datetime] = None

    @property
    def status(self) -> str:
        return "connected" if self.ready else "disconnected"


class DatabaseHealth:
    """Tracks readiness of the store through an injectable probe.

    The probe raises on failure and returns nothing on success.
    """

    def __init__(self, probe: Callable[[], None]):
        self.probe = probe
        self.state = ConnectionState()

    def is_ready(self) -> bool:
        self.state.attempts += 1
        self.state.last_checked = utcnow()
        try:
            self.probe()
        except Exception as exc:
            logger.warning("Database readiness probe failed: %s", exc)
            self.state.ready = False
            self.state.last_error = str(exc)
            return False
        self.state.ready = True
        self.state.last_error = None
        return True


def sql_probe() -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def firestore_probe() -> None:
    from app.services.firebase_client import events_collection

    events_collection().limit(1).get(timeout=settings.DB_TIMEOUT_SECONDS)


database_health = DatabaseHealth(firestore_probe if settings.USE_FIREBASE else sql_probe)


def init_db(
    retries: Optional[int] = None,
    delay: Optional[float] = None,
    health: Optional[DatabaseHealth] = None,
) -> bool:
    """Create tables, retrying while the store is unreachable.

    Returns False once retries are exhausted; the application keeps
    running and reports the store as unavailable.
    """
    retries = settings.DB_CONNECT_RETRIES if retries is None else retries
    delay = settings.DB_CONNECT_RETRY_DELAY if delay is None else delay
    health = health or database_health

    for attempt in range(1, retries + 1):
        if health.is_ready():
            if not settings.USE_FIREBASE:
                # Import models so they register on Base
                import app.models  # noqa: F401
                Base.metadata.create_all(bind=engine)
                logger.info("Database tables created")
            logger.info("Database connected after %d attempt(s)", attempt)
            return True
        logger.warning("Database connection attempt %d/%d failed", attempt, retries)
        if attempt < retries:
            time.sleep(delay)

    logger.error("Starting without database connection: %s", health.state.last_error)
    return False
