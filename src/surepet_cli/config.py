"""Application settings loaded from the environment.

Settings are read once per invocation by the CLI layer and handed down
to the infrastructure adapters.  ``core`` never imports this module.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from surepet_cli.exceptions import ConfigurationError

DEFAULT_TOKEN_FILENAME: str = ".surepet_token"


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "surepet-cli"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "surepet-cli"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "surepet-cli"
    return Path.home() / ".config" / "surepet-cli"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def default_token_file() -> Path:
    return Path.home() / DEFAULT_TOKEN_FILENAME


class Settings(BaseSettings):
    """Central configuration contract for the CLI and its adapters."""

    model_config = SettingsConfigDict(
        env_prefix="SUREPET_",
        extra="ignore",
        case_sensitive=False,
        env_file=(str(get_user_env_file()),),
        env_file_encoding="utf-8",
    )

    api_url: str = Field(
        default="https://app.api.surehub.io/api",
        min_length=8,
        description="Base URL of the SureHub REST API (no trailing slash).",
    )
    dashboard_url: str = Field(
        default="https://app-api.production.surehub.io/api/dashboard/pet",
        min_length=8,
        description="Pet dashboard endpoint serving daily history aggregates.",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to every request (seconds).",
    )
    token_file: Path = Field(
        default_factory=default_token_file,
        description="Where the bearer token is persisted between runs.",
    )
    client_device_id: str = Field(
        default="a1b96664-399d-4c2f-8eaa-b6b5e47c6f31",
        min_length=1,
        description="Client UUID sent with the login exchange.",
    )
    user_agent: str = Field(
        default="surepet-cli",
        min_length=1,
        description="User-Agent header for API requests.",
    )

    @property
    def base_url(self) -> str:
        return self.api_url.rstrip("/")


def load_settings() -> Settings:
    """Build :class:`Settings`, mapping validation failures to a domain error.

    Raises
    ------
    ConfigurationError
        When a ``SUREPET_*`` variable or ``.env`` entry is invalid.
    """
    try:
        return Settings()
    except ValidationError as exc:
        fields = ", ".join(
            "SUREPET_" + str(error["loc"][0]).upper() for error in exc.errors() if error.get("loc")
        )
        raise ConfigurationError(
            f"Invalid configuration: {fields or exc}",
            hint=f"Check your environment variables and {get_user_env_file()}.",
        ) from exc
