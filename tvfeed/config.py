from typing import Annotated
import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


logger = logging.getLogger(__name__)

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    feed_sources: Annotated[list[str] | None, NoDecode] = None
    feed_fetch_concurrency: int = 4
    feed_parse_timeout_sec: int = 120  # 0 disables timeout
    feed_read_chunk_size: int = 64 * 1024
    keep_thumbnails_between_fetches: bool = False

    download_timeout_sec: float = 60.0
    download_max_retries: int = 3
    download_backoff_factor: float = 2.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("feed_sources", mode="before")
    @classmethod
    def parse_feed_sources(cls, value):
        """Parse comma-separated URLs or list."""
        if value is None:
            return []
        if isinstance(value, str):
            if not value.strip():
                return []
            return [url.strip() for url in value.split(",") if url.strip()]
        if isinstance(value, list):
            return value
        return []

    @field_validator("feed_sources", mode="after")
    @classmethod
    def validate_feed_sources(cls, value):
        """Validate feed source URLs are HTTP/HTTPS."""
        if not value:
            return value

        for url in value:
            if not url.lower().startswith(("http://", "https://")):
                raise ValueError(f"Feed source URL must be HTTP/HTTPS: {url}")
        return value

    @field_validator("feed_fetch_concurrency", "feed_read_chunk_size", "download_max_retries")
    @classmethod
    def validate_positive_ints(cls, value: int, info) -> int:
        """Ensure integer settings are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("feed_parse_timeout_sec")
    @classmethod
    def validate_parse_timeout(cls, value: int) -> int:
        """Validate feed parsing timeout (seconds)."""
        if value < 0:
            raise ValueError("feed_parse_timeout_sec must be >= 0")
        return value

    @field_validator("download_timeout_sec")
    @classmethod
    def validate_download_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("download_timeout_sec must be > 0")
        return value

    @field_validator("download_backoff_factor")
    @classmethod
    def validate_backoff_factor(cls, value: float) -> float:
        """Ensure the backoff multiplier is at least 1."""
        if value < 1:
            raise ValueError("download_backoff_factor must be >= 1")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}")
        return normalized

    @model_validator(mode="after")
    def validate_feed_configuration(self):
        """Validate cross-field configuration."""
        if not self.feed_sources:
            logger.warning(
                "No feed sources configured - feed fetch will not retrieve any data"
            )
        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Feed Sources: %s configured", len(self.feed_sources or []))
        logger.info("  Fetch Concurrency: %s", self.feed_fetch_concurrency)
        logger.info(
            "  Parse Timeout: %s seconds",
            self.feed_parse_timeout_sec or "disabled",
        )
        logger.info("  Read Chunk Size: %s bytes", self.feed_read_chunk_size)
        logger.info("  Keep Thumbnails Between Fetches: %s", self.keep_thumbnails_between_fetches)
        logger.info(
            "  Download: timeout=%.1fs retries=%s backoff=%.1f",
            self.download_timeout_sec,
            self.download_max_retries,
            self.download_backoff_factor,
        )
        logger.info("  Log Level: %s", self.log_level)


settings = CustomSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
