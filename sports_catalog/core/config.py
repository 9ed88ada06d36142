"""
Application configuration with environment-specific secrets management.

Supported environment files (loaded in order of precedence):
1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
2. .env (fallback)

Required secrets for production:
- SPORTSDATA_API_KEY
"""
import os
import logging
from pathlib import Path
from typing import Dict, Literal
from pydantic_settings import BaseSettings
from pydantic import ConfigDict

# Get the project root directory (3 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = logging.getLogger(__name__)

# Canonical sport key -> provider feed code.
# Sports missing from this mapping are never reachable through the coordinator.
DEFAULT_PROVIDER_CODES: Dict[str, str] = {
    "NFL": "NFL",
    "NBA": "NBA",
    "MLB": "MLB",
    "NHL": "NHL",
}


class Settings(BaseSettings):
    """Application settings with environment-specific configuration."""

    # Environment
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    model_config = ConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Allow extra fields from .env
    )

    # Application
    APP_NAME: str = "Sports Catalog API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{PROJECT_ROOT / 'sports_catalog.db'}")
    SQL_ECHO: bool = False

    # SportsDataIO provider feed
    SPORTSDATA_API_KEY: str = ""
    SPORTSDATA_BASE_URL: str = "https://api.sportsdata.io/v3"
    PROVIDER_TIMEOUT: float = 30.0
    PROVIDER_CODES: Dict[str, str] = dict(DEFAULT_PROVIDER_CODES)

    # Sync
    BULK_UPSERT_CHUNK_SIZE: int = 2000  # IDs per existence-check round trip
    SYNC_CRON: str = "0 2 1 * *"  # 2 AM on the 1st of each month
    SYNC_TIMEZONE: str = "UTC"
    SCHEDULER_ENABLED: bool = False  # start the monthly sync inside the API process

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    def validate_required_secrets(self) -> list[str]:
        """
        Validate that required secrets are set for the current environment.

        Returns:
            List of missing secret names (empty if all present)
        """
        missing = []

        if self.is_production() and not self.SPORTSDATA_API_KEY:
            missing.append("SPORTSDATA_API_KEY")

        if self.BULK_UPSERT_CHUNK_SIZE <= 0:
            missing.append("BULK_UPSERT_CHUNK_SIZE")

        return missing


def _load_env_file() -> Path:
    """
    Load the appropriate environment file based on ENVIRONMENT variable.

    Loads in order of precedence:
    1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
    2. .env (fallback)
    """
    environment = os.getenv("ENVIRONMENT", "development")

    env_file = PROJECT_ROOT / f".env.{environment}"
    if env_file.exists():
        logger.info(f"Loading environment from {env_file.name}")
        return env_file

    default_env = PROJECT_ROOT / ".env"
    if default_env.exists():
        logger.info(f"Loading environment from .env (environment: {environment})")
        return default_env

    logger.debug(f"No environment file found for '{environment}' (checked .env.{environment}, .env)")
    return default_env


# Auto-detect and load environment file
_env_file = _load_env_file()


class _SettingsWithEnvFile(Settings):
    model_config = ConfigDict(
        env_file=str(_env_file),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


settings = _SettingsWithEnvFile()

# Validate secrets on startup
missing_secrets = settings.validate_required_secrets()
if missing_secrets:
    logger.warning(f"Missing required settings for {settings.ENVIRONMENT}: {', '.join(missing_secrets)}")
    if settings.is_production():
        raise ValueError(
            f"Cannot start in production with missing settings: {', '.join(missing_secrets)}. "
            f"Please set these environment variables in .env.production"
        )
