"""Configuration management for eumgrid."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .logging_utils import configure_logging


class Settings(BaseSettings):
    """Client settings."""

    model_config = SettingsConfigDict(
        env_prefix="EUMGRID_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_base_url: str = Field(default="http://localhost:8081/api", description="Base URL of the backend API")
    timeout_seconds: float = Field(default=10.0, description="Deadline for every network call in seconds")

    # Endpoints
    login_path: str = Field(default="/auth/login", description="Credential login endpoint")
    refresh_path: str = Field(default="/auth/refresh", description="Credential renewal endpoint")
    logout_path: str = Field(default="/auth/logout", description="Server-side logout endpoint")
    grid_data_path: str = Field(default="/eum/stp/getGridData", description="Grid data endpoint")

    # Request identity
    anonymous_user_id: str = Field(default="null", description="userId sent when no user is signed in")
    default_grid_user_id: str = Field(default="admin", description="userId for grid metadata without a user")
    grid_source: str = Field(default="web", description="Source tag sent in grid request metadata")

    # Grid
    default_page_size: int = Field(default=50, description="Initial take for grid query state")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: Literal["default", "console"] = Field(default="default", description="Log output profile")

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be positive")
        return value

    @field_validator("default_page_size")
    @classmethod
    def _positive_page_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("default_page_size must be positive")
        return value

    @property
    def no_refresh_paths(self) -> frozenset[str]:
        """Paths whose 401 answers never trigger credential renewal."""
        return frozenset({self.refresh_path, self.login_path})


def get_settings(**overrides: object) -> Settings:
    """Load settings from the environment and `.env`, then configure logging.

    Args:
        **overrides: Explicit values that win over the environment

    Returns:
        Settings instance
    """
    try:
        settings = Settings(**overrides)  # type: ignore[arg-type]
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    configure_logging(profile=settings.log_profile, level=settings.log_level)

    return settings
