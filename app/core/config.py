"""
Application configuration management using Pydantic Settings
Handles all environment variables and application settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    """Main application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application Settings
    APP_NAME: str = "Storefront API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_ECHO: bool = False
    SQLITE_BUSY_TIMEOUT: int = 30  # seconds a writer waits for the lock

    # Session / Security Settings
    SECRET_KEY: str = "change-me-in-production"
    SESSION_COOKIE_NAME: str = "sessionId"
    SESSION_MAX_AGE: int = 24 * 60 * 60
    SESSION_HTTPS_ONLY: bool = False
    PASSWORD_MIN_LENGTH: int = 6

    # CORS Configuration
    ALLOWED_HOSTS: List[str] = ["*"]
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Catalog
    FEATURED_PRODUCTS_LIMIT: int = 8

    @property
    def database_url_async(self) -> str:
        """Convert sync database URL to async"""
        if self.DATABASE_URL.startswith("postgresql://"):
            return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")
        elif self.DATABASE_URL.startswith("sqlite://"):
            return self.DATABASE_URL.replace("sqlite://", "sqlite+aiosqlite://")
        return self.DATABASE_URL

@lru_cache()
def get_settings() -> Settings:
    """
    Create cached settings instance
    This ensures settings are loaded only once
    """
    return Settings()

# Global settings instance
settings = get_settings()
