"""
Runtime configuration.
Everything comes from environment variables (or a .env file loaded at startup).
"""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel


REQUIRED_SETTINGS = {
    "stripe_secret_key": "STRIPE_SECRET_KEY",
    "stripe_webhook_secret": "STRIPE_WEBHOOK_SECRET",
    "google_sheet_id": "GOOGLE_SHEET_ID",
    "google_service_account_email": "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "google_private_key": "GOOGLE_PRIVATE_KEY",
}


class Settings(BaseModel):
    """Secrets and identifiers for Stripe and the tracked Google Sheet."""
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    google_sheet_id: Optional[str] = None
    google_sheet_name: str = "Sheet1"
    google_service_account_email: Optional[str] = None
    google_private_key: Optional[str] = None
    log_level: str = "INFO"
    app_env: str = "production"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            stripe_secret_key=os.environ.get("STRIPE_SECRET_KEY"),
            stripe_webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET"),
            google_sheet_id=os.environ.get("GOOGLE_SHEET_ID"),
            google_sheet_name=os.environ.get("GOOGLE_SHEET_NAME") or "Sheet1",
            google_service_account_email=os.environ.get("GOOGLE_SERVICE_ACCOUNT_EMAIL"),
            google_private_key=os.environ.get("GOOGLE_PRIVATE_KEY"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            app_env=os.environ.get("APP_ENV", "production"),
        )

    def missing(self) -> List[str]:
        """Names of required environment variables that are unset or empty."""
        return [
            env_name
            for field, env_name in REQUIRED_SETTINGS.items()
            if not getattr(self, field)
        ]


@lru_cache()
def get_settings() -> Settings:
    """
    Settings for this process.
    Cached; call get_settings.cache_clear() after changing the environment.
    """
    return Settings.from_env()
