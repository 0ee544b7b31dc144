import logging

from croniter import croniter
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    yle_api_base_url: str = "https://external.api.yle.fi/v1"
    yle_app_id: str = ""
    yle_app_key: str = ""
    yle_secret: str = ""
    service_type: str = "TVChannel"
    stream_protocol: str = "HLS"
    primary_locale: str = "fi"
    secondary_locale: str = "sv"
    fetch_timeout_sec: float = 10.0
    catalog_refresh_cron: str = "*/5 * * * *"  # Every 5 minutes
    catalog_refresh_misfire_grace_sec: int = 60
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("yle_api_base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Validate API base URL is HTTP/HTTPS."""
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"YLE API base URL must be HTTP/HTTPS: {value}")
        return value.rstrip("/")

    @field_validator("yle_secret")
    @classmethod
    def validate_secret(cls, value: str) -> str:
        """Validate the secret can be used as an AES key."""
        if value and len(value.encode("utf-8")) not in (16, 24, 32):
            raise ValueError("yle_secret must be 16, 24 or 32 bytes of UTF-8")
        return value

    @field_validator("fetch_timeout_sec")
    @classmethod
    def validate_fetch_timeout(cls, value: float) -> float:
        """Validate remote fetch timeout (seconds)."""
        if value <= 0:
            raise ValueError("fetch_timeout_sec must be > 0")
        return value

    @field_validator("catalog_refresh_misfire_grace_sec")
    @classmethod
    def validate_misfire_grace(cls, value: int) -> int:
        """Validate scheduler misfire grace period (seconds)."""
        if value < 0:
            raise ValueError("catalog_refresh_misfire_grace_sec must be >= 0")
        return value

    @field_validator("primary_locale", "secondary_locale")
    @classmethod
    def validate_locale(cls, value: str, info) -> str:
        """Validate locale codes are non-empty."""
        if not value.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @field_validator("catalog_refresh_cron")
    @classmethod
    def validate_cron_expression(cls, value: str) -> str:
        """Validate cron expression is valid."""
        try:
            croniter(value)
            return value
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Invalid cron expression '{value}': {exc}") from exc

    @model_validator(mode="after")
    def validate_api_configuration(self):
        """Validate cross-field configuration."""
        if not self.yle_app_id or not self.yle_app_key:
            logger.warning(
                "YLE_APP_ID/YLE_APP_KEY not configured - API requests will be rejected"
            )

        if not self.yle_secret:
            logger.warning(
                "YLE_SECRET not configured - stream URLs cannot be decrypted"
            )

        if self.primary_locale == self.secondary_locale:
            raise ValueError("primary_locale and secondary_locale must differ")

        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  YLE API: %s", self.yle_api_base_url)
        logger.info("  App ID: %s", "configured" if self.yle_app_id else "missing")
        logger.info("  Secret: %s", "configured" if self.yle_secret else "missing")
        logger.info("  Service Type: %s", self.service_type)
        logger.info("  Stream Protocol: %s", self.stream_protocol)
        logger.info("  Locales: %s, fallback %s", self.primary_locale, self.secondary_locale)
        logger.info("  Fetch Timeout: %ss", self.fetch_timeout_sec)
        logger.info("  Refresh Schedule: %s", self.catalog_refresh_cron)
        logger.info("  Refresh Misfire Grace: %ss", self.catalog_refresh_misfire_grace_sec)


settings = CustomSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
