from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

GIB = 1024 * 1024 * 1024

class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = "sqlite:///./gradebook.db"

    # JWT settings
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # API settings
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Gradebook API"
    CORS_ORIGINS: list = ["*"]

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # Rate limiting (only active when Redis is configured)
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_PER_MINUTE: int = 100

    # Storage quota, in bytes
    STORAGE_LIMIT_FREE: int = 1 * GIB
    STORAGE_LIMIT_PREMIUM: int = 50 * GIB
    ENFORCE_STORAGE_QUOTA: bool = False

    # AI credits
    AI_FREE_MONTHLY_CREDITS: int = 10
    AI_PRO_DAILY_CREDITS: int = 50
    AI_RUBRIC_COST: int = 3

    # Gemini
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    GEMINI_TIMEOUT_SECONDS: float = 30.0

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

@lru_cache()
def get_settings() -> Settings:
    """
    Get settings instance with caching
    Returns:
        Settings instance
    """
    return Settings()
