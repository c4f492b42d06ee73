import os
from enum import StrEnum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"
    STAGING = "staging"


ENVIRONMENT = os.getenv("CAMPUS_MARKET_ENV", Environment.DEVELOPMENT)


class Settings(BaseSettings):
    app_name: str = "Campus Market API"
    environment: str = ENVIRONMENT

    # database, either the pieces or a full url (used by sqlite setups)
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "campus_market"
    db_host: str = "localhost"
    db_port: int = 5432
    database_url: str | None = None
    db_echo: bool = False

    # firebase (identity provider + object store)
    firebase_credentials: str = "campus-market-service-account.json"
    storage_bucket: str | None = None

    # registration is restricted to the institutional mail domain
    campus_email_domain: str = "@iiitrkvalley.ac.in"

    # listing images
    max_listing_images: int = 5
    max_image_bytes: int = 5 * 1024 * 1024
    staging_dir: Path = Path("/tmp/campus-market-staging")
    staging_max_age_minutes: int = 30

    # search as you type
    search_debounce_seconds: float = 0.3
    search_min_chars: int = 3
    search_suggestion_limit: int = 5

    default_phone_region: str = "IN"
    log_level: str = "INFO"
    testing: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env" if ENVIRONMENT != Environment.PRODUCTION else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_testing(self) -> bool:
        return self.testing == "1" or self.environment == Environment.TESTING


config = Settings()
