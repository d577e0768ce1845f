# fitstudy/core/config.py

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come straight from the process environment; there is no env file.
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Database URLs ---
    DATABASE_URL_LOCAL: str = "sqlite:///./fitstudy.db"
    DATABASE_URL_PROD: Optional[str] = None

    # How long a booking transaction may wait on a row lock before giving up.
    DB_LOCK_TIMEOUT_MS: int = 5000

    # Bookings can only be cancelled this many hours before the event starts.
    CANCELLATION_CUTOFF_HOURS: int = 24

    LOG_LEVEL: str = "INFO"

    @property
    def DATABASE_URL(self) -> str:
        if self.ENV == "local" or not self.DATABASE_URL_PROD:
            return self.DATABASE_URL_LOCAL
        return self.DATABASE_URL_PROD


# Create a single instance of the settings
settings = Settings()
