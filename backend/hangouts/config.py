"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./hangouts.db"
    CORS_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # Consensus defaults for newly created polls
    CONSENSUS_THRESHOLD: int = 70
    MIN_CONSENSUS_THRESHOLD: int = 50
    MIN_PARTICIPANTS: int = 2

    DEFAULT_DURATION_HOURS: int = 3
    IDENTITY_HEADER: str = "X-User-Id"

    class Config:
        env_file = ".env"


settings = Settings()
