"""FastAPI application entry point."""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import Base, engine, wait_for_database
from app.errors import register_exception_handlers
from app.logging_config import setup_logging

# Import routers
from app.routers import auth, events, notifications

# Import all models so Base.metadata knows about them
from app.models.user import User                    # noqa: F401
from app.models.event import Event                  # noqa: F401
from app.models.favorite import Favorite            # noqa: F401
from app.models.notification import Notification    # noqa: F401

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="College Events",
    description="College events directory: hackathons, workshops and contests with moderation, favorites and notifications",
    version="1.0.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])


@app.on_event("startup")
def on_startup():
    """Wait for the database; create tables directly in SQLite dev mode."""
    if wait_for_database() and settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    logger.info("College Events API started (%s)", settings.ENVIRONMENT)


@app.get("/api/health")
def health_check():
    return {
        "success": True,
        "message": "College Events API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
