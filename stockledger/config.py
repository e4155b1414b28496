from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Stock Ledger"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./stockledger.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Security
    # ==============================
    API_KEYS: Optional[str] = None
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    JWT_ISSUER: Optional[str] = None

    # ==============================
    # Catalog API
    # ==============================
    CATALOG_API_URL: Optional[str] = None
    CATALOG_API_TOKEN: Optional[str] = None
    CATALOG_PAGE_SIZE: int = 100
    CATALOG_MAX_PAGES: int = 50
    CATALOG_TIMEOUT_SECONDS: int = 30

    # ==============================
    # Stock statistics
    # ==============================
    LOW_STOCK_THRESHOLD: int = 80

    # ==============================
    # Scheduler
    # ==============================
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_RUN_AFTER: str = "06:00"
    SCHEDULER_POLL_SECONDS: int = 30
    SCHEDULER_HEARTBEAT_SECONDS: int = 30
    SCHEDULER_STALE_SECONDS: int = 900
    SCHEDULER_RETRY_SECONDS: int = 300
    SCHEDULER_MAX_RETRIES: int = 3
    SCHEDULER_TZ: str = "utc"


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
