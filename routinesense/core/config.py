from pydantic_settings import BaseSettings
from typing import Optional
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "RoutineSense"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Remote store
    MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017/routinesense")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "routinesense")

    # Local cache (one namespace per device)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    LOCAL_CACHE_PREFIX: str = "routinesense"
    LOCAL_CACHE_TTL_SECONDS: Optional[int] = None

    # Routine intelligence limits
    USAGE_EVENT_LIMIT: int = 50
    TIMELINE_LIMIT: int = 50
    MAX_INSIGHTS: int = 5
    STREAK_LOOKBACK_DAYS: int = 365
    NOTE_PREVIEW_LENGTH: int = 80

    # CORS
    BACKEND_CORS_ORIGINS: list = ["http://localhost:3000", "http://localhost:8000"]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Allow extra fields from .env file

settings = Settings()


def validate_production_settings(current: Settings = settings) -> None:
    """Refuse to serve authenticated traffic with a weak signing key"""
    if current.DEBUG:
        return
    if not current.SECRET_KEY:
        raise ValueError("SECRET_KEY must be set in production environment")
    if len(current.SECRET_KEY) < 32:
        raise ValueError("SECRET_KEY should be at least 32 characters for security")
