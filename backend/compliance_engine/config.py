"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache

from compliance_engine.validators.models import ValidationConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"
    CORS_ORIGINS: list[str] = ["*"]

    # Engine defaults
    VALIDATION_ENABLED: bool = True
    DEFAULT_VALIDATORS: list[str] = ["gdpr", "nsm", "wcag", "norwegian"]
    VALIDATION_MODE: str = "parallel"
    VALIDATION_TIMEOUT_MS: int = 30_000
    VALIDATION_RETRIES: int = 2
    RETRY_BASE_DELAY_SECONDS: float = 1.0
    HISTORY_LIMIT: int = 50

    # Cache
    CACHE_STRATEGY: str = "memory"
    CACHE_TTL_SECONDS: float = 3600
    CACHE_MAX_SIZE: int = 100

    # Notifications
    NOTIFICATIONS_ENABLED: bool = False
    NOTIFICATION_CHANNELS: list[str] = []
    NOTIFY_ERROR_THRESHOLD: int = 1
    NOTIFY_WARNING_THRESHOLD: int = 5

    # Scheduling
    SCHEDULING_ENABLED: bool = False
    SCHEDULING_INTERVAL_MS: int = 86_400_000
    SCHEDULING_IMMEDIATE: bool = True

    # Reporting
    REPORT_FORMATS: list[str] = ["json"]
    REPORT_OUTPUT_PATH: str = ""
    REPORT_INCLUDE_METRICS: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def to_validation_config(self) -> ValidationConfig:
        """Base ValidationConfig for engines built from these settings."""
        return ValidationConfig.model_validate({
            "enabled": self.VALIDATION_ENABLED,
            "validators": self.DEFAULT_VALIDATORS,
            "mode": self.VALIDATION_MODE,
            "timeout_ms": self.VALIDATION_TIMEOUT_MS,
            "retries": self.VALIDATION_RETRIES,
            "cache": {
                "strategy": self.CACHE_STRATEGY,
                "ttl": self.CACHE_TTL_SECONDS,
                "max_size": self.CACHE_MAX_SIZE,
            },
            "notifications": {
                "enabled": self.NOTIFICATIONS_ENABLED,
                "channels": self.NOTIFICATION_CHANNELS,
                "thresholds": {
                    "error": self.NOTIFY_ERROR_THRESHOLD,
                    "warning": self.NOTIFY_WARNING_THRESHOLD,
                },
            },
            "scheduling": {
                "enabled": self.SCHEDULING_ENABLED,
                "interval": self.SCHEDULING_INTERVAL_MS,
                "immediate": self.SCHEDULING_IMMEDIATE,
            },
            "reporting": {
                "formats": self.REPORT_FORMATS,
                "output_path": self.REPORT_OUTPUT_PATH or None,
                "include_metrics": self.REPORT_INCLUDE_METRICS,
            },
        })


@lru_cache
def get_settings() -> Settings:
    return Settings()
