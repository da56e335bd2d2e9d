"""Process settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the scheduled-mailer handler process.

    Everything here is about *where* the handler finds its mail settings and
    how it logs. The mail settings themselves live in the monitoring
    pipeline's JSON settings documents (see ``config.loader``).

    All settings can be overridden via ``SCHEDULED_MAILER_*`` environment
    variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULED_MAILER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "production"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    # Settings documents
    config_files: list[str] = Field(default=["/etc/sensu/config.json"])
    config_dirs: list[str] = Field(default=["/etc/sensu/conf.d"])
    json_config: str = "scheduled_mailer"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
