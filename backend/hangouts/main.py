"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hangouts.config import settings
from hangouts.database import Base, engine

# Import routers
from hangouts.routers import users, hangouts, votes, rsvp, notifications

# Import all models so Base.metadata knows about them
from hangouts.models.user import User                  # noqa: F401
from hangouts.models.hangout import Hangout            # noqa: F401
from hangouts.models.participant import Participant    # noqa: F401
from hangouts.models.poll import Poll                  # noqa: F401
from hangouts.models.vote import Vote                  # noqa: F401
from hangouts.models.rsvp import RSVP                  # noqa: F401
from hangouts.models.notification import Notification  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Hangouts",
    description="Group plans: propose options, vote to consensus, then RSVP",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(hangouts.router, prefix="/api/hangouts", tags=["Hangouts"])
app.include_router(votes.router, prefix="/api/hangouts", tags=["Votes"])
app.include_router(rsvp.router, prefix="/api/hangouts", tags=["RSVP"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
