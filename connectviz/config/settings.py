"""Library settings using Pydantic BaseSettings."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from connectviz.config.constants import DEFAULT_COLOR_PALETTE

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefix ``CONNECTVIZ_``)."""

    model_config = SettingsConfigDict(
        env_prefix="CONNECTVIZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Charts
    chart_color_palette: list[str] = list(DEFAULT_COLOR_PALETTE)
    transition_duration_ms: int = 300

    # Tables
    default_interval_label: str = "Interval"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_VALID_LOG_LEVELS}, got '{v}'")
        return upper

    @field_validator("chart_color_palette")
    @classmethod
    def validate_palette(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("chart_color_palette must contain at least one color")
        return v

    @field_validator("transition_duration_ms")
    @classmethod
    def validate_transition_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"transition_duration_ms must be positive, got {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
