"""
BOM Service configuration using shared patterns
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the bom service directory path
BOM_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = BOM_SERVICE_DIR / ".env"


class BomServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "BOM Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Service specific
    SERVICE_NAME: str = "bom-service"

    # Database
    BOM_DATABASE_URL: str
    TEST_DATABASE_URL: str = "sqlite+aiosqlite:///test.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Sessions
    SESSION_COOKIE_NAME: str = "auth-session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_TTL_DAYS: int = 30
    SESSION_RENEW_WITHIN_DAYS: int = 15

    # Category maintenance
    DUPLICATE_CATEGORY_SUFFIX: str = " (duplicate)"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    CORS_HEADERS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    ENABLE_ACCESS_LOGS: bool = False


# Create a singleton instance
_settings_instance = None


def get_settings() -> BomServiceSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = BomServiceSettings()
    return _settings_instance
