"""
Shared configuration management for the dispensary specials service.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DUTCHIE_API_URL = "https://plus.dutchie.com/plus/2021-07/graphql"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias="SPECIALS_ENV")
    log_level: str = Field(default="info", validation_alias="SPECIALS_LOG_LEVEL")


class SpecialsSettings(BaseConfig):
    """Settings for the inventory API client and the specials cache."""

    # Upstream inventory API
    dutchie_api_url: str = Field(default=DEFAULT_DUTCHIE_API_URL, validation_alias="DUTCHIE_API_URL")
    dutchie_api_key: str = Field(default="", validation_alias="DUTCHIE_API_KEY")
    request_timeout_seconds: float = Field(default=10.0, gt=0, validation_alias="DUTCHIE_REQUEST_TIMEOUT")

    # Cache
    cache_backend: str = Field(default="redis", validation_alias="SPECIALS_CACHE_BACKEND")
    redis_url: str = Field(default="", validation_alias="SPECIALS_REDIS_URL")
    cache_ttl_seconds: int = Field(default=900, gt=0, validation_alias="SPECIALS_CACHE_TTL")

    # Fan-out
    batch_size: int = Field(default=10, ge=1, validation_alias="SPECIALS_BATCH_SIZE")


def get_settings(**overrides) -> SpecialsSettings:
    """Build settings from the environment, then apply explicit overrides by field name."""
    settings = SpecialsSettings()
    if overrides:
        # Re-validate so overrides honour the same constraints as the environment
        settings = SpecialsSettings.model_validate({**settings.model_dump(), **overrides})
    return settings
