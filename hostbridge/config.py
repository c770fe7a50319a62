"""Bridge Configuration — settings file + environment overrides via pydantic-settings.

Invariants:
    - Loaded once at process start; components receive Settings explicitly
    - Environment variables (HOSTBRIDGE_*) beat values from the settings file, which beat defaults
    - request_timeout_seconds is never below REQUEST_TIMEOUT_MINIMUM
    - A missing or malformed settings file never prevents startup (defaults are used)
    - An invalid value for one field (file or environment) is logged and that field falls
      back to its default; the other fields keep their configured values

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, prefix handling
    - Settings file values passed as init kwargs; source order puts env ahead of init
"""

import json
import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hostbridge.core.domain_types import DEFAULT_PORT, REQUEST_TIMEOUT_MINIMUM

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "hostbridge.settings.json"
SETTINGS_FILE_ENV = "HOSTBRIDGE_SETTINGS_FILE"


class Settings(BaseSettings):
    """Per-process bridge settings."""

    model_config = SettingsConfigDict(
        env_prefix="HOSTBRIDGE_", case_sensitive=False, extra="ignore", frozen=True,
    )

    # Listener
    host: str = "127.0.0.1"
    port: int = Field(DEFAULT_PORT, ge=0, le=65535)
    endpoint_path: str = "/hostbridge"
    startup_timeout_seconds: float = 5.0

    # Forwarded to the companion worker; the bridge itself never times out a handler
    request_timeout_seconds: int = REQUEST_TIMEOUT_MINIMUM

    auto_start_server: bool = True

    # Companion worker
    worker_path_override: str = ""
    auto_build_worker: bool = True
    install_command: list[str] = ["npm", "install"]
    build_command: list[str] = ["npm", "run", "build"]
    command_timeout_seconds: float | None = 600

    # Observability
    enable_info_logs: bool = True
    log_format: str = "text"

    @field_validator("*", mode="wrap")
    @classmethod
    def default_on_invalid(cls, value, handler, info: ValidationInfo):
        try:
            return handler(value)
        except ValidationError as e:
            default = cls.model_fields[info.field_name].get_default(call_default_factory=True)
            logger.error(
                f"Ignoring invalid setting {info.field_name}={value!r} "
                f"({e.errors()[0]['msg']}); using default {default!r}",
            )
            return default

    @field_validator("request_timeout_seconds")
    @classmethod
    def clamp_request_timeout(cls, v: int) -> int:
        return max(v, REQUEST_TIMEOUT_MINIMUM)

    @field_validator("endpoint_path")
    @classmethod
    def leading_slash(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings,
    ):
        return env_settings, init_settings

    def companion_environment(self) -> dict[str, str]:
        """Variables the companion worker reads to find the bridge."""
        return {
            "HOSTBRIDGE_PORT": str(self.port),
            "HOSTBRIDGE_REQUEST_TIMEOUT_SECONDS": str(self.request_timeout_seconds),
        }


def _read_settings_file(path: Path) -> dict:
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load settings from {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.error(f"Ignoring settings file {path}: top level must be a JSON object")
        return {}
    return data


def load_settings(path: str | Path | None = None) -> Settings:
    """Build a Settings snapshot from the settings file and the environment."""
    path = Path(path or os.environ.get(SETTINGS_FILE_ENV) or DEFAULT_SETTINGS_FILE)
    return Settings(**_read_settings_file(path))


@lru_cache
def get_settings() -> Settings:
    return load_settings()
