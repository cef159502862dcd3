"""
Application configuration settings.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "UMak eBallot"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    WORKERS: int = 4

    # Database (unset means every store call fails as unconfigured)
    DATABASE_URL: Optional[str] = None
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_CONNECT_TIMEOUT: float = 10.0
    DATABASE_COMMAND_TIMEOUT: float = 30.0

    # Redis (unset disables caching)
    REDIS_URL: Optional[str] = None
    REDIS_SOCKET_TIMEOUT: float = 2.0

    # JWT Authentication
    APP_JWT_SECRET: str = Field(..., min_length=16)
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "umak-eballot"
    JWT_EXPIRE_HOURS: int = 12

    # One-time passcodes
    ALLOWED_EMAIL_DOMAIN: str = "umak.edu.ph"
    OTP_TTL_SECONDS: int = 300

    # SMTP
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    SMTP_TIMEOUT: float = 15.0
    EMAIL_FROM: str = '"UMak eBallot" <noreply@umak.edu.ph>'

    # Cache TTLs (seconds)
    LEADERBOARD_CACHE_TTL: int = 10
    CANDIDATES_CACHE_TTL: int = 120
    ELECTIONS_CACHE_TTL: int = 60

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
