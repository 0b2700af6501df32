# ============================================================================
# FILE: tunetip/config.py
# ============================================================================
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    """Application configuration using Pydantic BaseSettings"""

    # App settings
    APP_NAME: str = "TuneTip"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development | production | test
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./tunetip.db"  # Change to PostgreSQL in production

    # Redis (leaderboard rank snapshots)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Security
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    # Usernames allowed to trigger system-wide jobs such as the smart playlist refresh
    OPERATOR_USERNAMES: List[str] = []

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Smart playlists
    SMART_PLAYLIST_REFRESH_ENABLED: bool = True
    SMART_PLAYLIST_REFRESH_INTERVAL_SECONDS: int = 900
    SMART_PLAYLIST_DEFAULT_LIMIT: int = 50
    SMART_PLAYLIST_MAX_LIMIT: int = 200

    # Leaderboards
    RANKING_SNAPSHOT_TTL_SECONDS: int = 7 * 24 * 3600

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def is_test(self) -> bool:
        return self.ENVIRONMENT.lower() == "test"

settings = Settings()
