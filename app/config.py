from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    # Application
    APP_NAME: str = "Katalogin"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./katalogin.db"

    # Redis cache
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL: int = 300  # 5 minutes

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # Object storage (product images)
    STORAGE_DIR: str = "./media/product-images"
    PUBLIC_STORAGE_URL: str = "/media"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5 MB

    # Admin authentication
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "change-me"
    SESSION_TTL_MINUTES: int = 60

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
