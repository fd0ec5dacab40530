"""
Environment configuration for Prompt Registry.

All settings are read from ``PR_*`` environment variables.
"""

import os
from dataclasses import dataclass, field

from prompt_registry.core.exceptions import ConfigurationError

DEFAULT_DATABASE_PATH = "./data/prompts.db"
LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("text", "json")
_DB_URL_PREFIXES = ("sqlite3://", "sqlite://")


def normalize_database_path(raw: str) -> str:
    """Strip a ``sqlite3://`` or ``sqlite://`` prefix from a database location."""
    for prefix in _DB_URL_PREFIXES:
        if raw.startswith(prefix):
            return raw[len(prefix):]
    return raw


def _int_env(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer", env_var=name, value=raw) from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}", env_var=name, value=raw)
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number", env_var=name, value=raw) from None
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative", env_var=name, value=raw)
    return value


def _choice_env(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = os.getenv(name, default).strip().lower()
    if value == "warn":
        value = "warning"
    if value not in choices:
        raise ConfigurationError(
            f"{name} must be one of: {', '.join(choices)}", env_var=name, value=value
        )
    return value


@dataclass
class RegistrySettings:
    """Runtime settings for the store, the API server and logging."""

    database_path: str = DEFAULT_DATABASE_PATH
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"
    log_format: str = "text"
    busy_timeout: float = 30.0
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "RegistrySettings":
        """
        Build settings from the environment.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        origins_raw = os.getenv("PR_CORS_ORIGINS", "*")
        origins = [o.strip() for o in origins_raw.split(",") if o.strip()] or ["*"]

        return cls(
            database_path=normalize_database_path(
                os.getenv("PR_DATABASE_PATH", DEFAULT_DATABASE_PATH)
            ),
            host=os.getenv("PR_HOST", "127.0.0.1"),
            port=_int_env("PR_PORT", 8080, minimum=1),
            log_level=_choice_env("PR_LOG_LEVEL", "info", LOG_LEVELS),
            log_format=_choice_env("PR_LOG_FORMAT", "text", LOG_FORMATS),
            busy_timeout=_float_env("PR_BUSY_TIMEOUT", 30.0),
            cors_origins=origins,
        )
