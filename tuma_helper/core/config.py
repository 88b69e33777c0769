# tuma_helper/core/config.py
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

INSECURE_DEV_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Tuma Helper API"
    environment: str = "development"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./tuma_helper.db"

    # Auth
    secret_key: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Payments
    stripe_secret_key: str = ""
    payment_currency: str = "usd"

    # Store retry policy (fixed 1s delay when backoff factor is 1)
    retry_max_attempts: int = 3
    retry_delay_seconds: float = 1.0
    retry_backoff_factor: float = 1.0

    # Bookings
    require_future_bookings: bool = True
    max_booking_hours: int = 24

    featured_services_limit: int = 6
    default_language: str = "en"
    supported_languages: list[str] = ["en", "af", "de", "osh"]

    sse_heartbeat_seconds: float = 15.0

    def signing_key(self) -> str:
        if self.secret_key:
            return self.secret_key
        if self.environment not in ("development", "test"):
            logger.warning("SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION")
        return INSECURE_DEV_KEY


settings = Settings()
