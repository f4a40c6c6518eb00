# ============================================================================
# FILE: songshare/config.py
# ============================================================================
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    """Application configuration using Pydantic BaseSettings"""

    # App settings
    APP_NAME: str = "SongShare"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./songshare.db"  # Change to PostgreSQL in production

    # Redis cache (empty URL disables caching)
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_EXPIRE_SECONDS: int = 3600

    # Security
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Blob storage, one directory per asset category
    STORAGE_ROOT: str = "."
    TRACKS_DIR: str = "filemp3"
    COVERS_DIR: str = "uploads/covers"
    AVATARS_DIR: str = "images"
    SERVE_STATIC: bool = True

    # Upload limits
    MAX_TRACK_FILES: int = 10
    MAX_TRACK_BYTES: int = 50 * 1024 * 1024
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # Sentinel assets that are never deleted
    DEFAULT_AVATAR: str = "default_avatar.png"
    DEFAULT_COVER: str = "default_cover.png"

    # Listening history
    HISTORY_LIMIT: int = 20
    HISTORY_MAX_LIMIT: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
