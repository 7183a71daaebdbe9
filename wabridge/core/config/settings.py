"""
Environment configuration for wabridge.

Values are read from the process environment (plus a local ``.env`` file) when
``Settings`` is instantiated. Nothing is required up front: the dispatcher and
the transport client each check the variables they depend on.
"""

import os
from importlib.metadata import PackageNotFoundError, version

from dotenv import load_dotenv

from wabridge.core.errors import ConfigurationError

load_dotenv(".env")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
ENVIRONMENTS = ("DEV", "PROD")


def _package_version() -> str:
    try:
        return version("wabridge")
    except PackageNotFoundError:
        return "0.1.0"


def _missing(**values: str | None) -> list[str]:
    return [name for name, value in values.items() if not value]


class Settings:
    """Snapshot of the wabridge environment variables."""

    def __init__(self):
        self.version: str = _package_version()

        # Runtime
        self.environment: str = os.getenv("ENVIRONMENT", "DEV").upper()
        if self.environment not in ENVIRONMENTS:
            self.environment = "DEV"

        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        if self.log_level not in LOG_LEVELS:
            self.log_level = "INFO"
        self.log_dir: str = os.getenv("LOG_DIR", "./logs")

        # Graph API transport
        self.api_version: str = os.getenv("API_VERSION", "v23.0")
        self.base_url: str = os.getenv("BASE_URL", "https://graph.facebook.com/")
        self.request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "30"))

        # WhatsApp Business account
        self.wp_access_token: str | None = os.getenv("WP_ACCESS_TOKEN")
        self.wp_phone_id: str | None = os.getenv("WP_PHONE_ID")
        self.wp_bid: str | None = os.getenv("WP_BID")
        self.whatsapp_webhook_verify_token: str | None = os.getenv(
            "WHATSAPP_WEBHOOK_VERIFY_TOKEN"
        )

    def require_webhook_settings(self) -> None:
        """
        Raises:
            ConfigurationError: When WHATSAPP_WEBHOOK_VERIFY_TOKEN is unset
        """
        missing = _missing(
            WHATSAPP_WEBHOOK_VERIFY_TOKEN=self.whatsapp_webhook_verify_token
        )
        if missing:
            raise ConfigurationError("Webhook configuration incomplete", missing)

    def require_client_settings(self) -> None:
        """
        Raises:
            ConfigurationError: Naming every missing client credential
        """
        missing = _missing(
            WP_ACCESS_TOKEN=self.wp_access_token, WP_PHONE_ID=self.wp_phone_id
        )
        if missing:
            raise ConfigurationError("Client configuration incomplete", missing)

    @property
    def is_development(self) -> bool:
        return self.environment == "DEV"

    @property
    def is_production(self) -> bool:
        return self.environment == "PROD"


settings = Settings()
