"""Configuration loading for coursereg.

Every setting can be overridden with a ``COURSEREG_*`` environment variable.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_DB_PATH = "coursereg.db"
DEFAULT_MAX_IMAGE_BYTES = 300 * 1024
DEFAULT_AUTO_CLOSE_SECONDS = 5.0
DEFAULT_IDLE_TIMEOUT_SECONDS = 30 * 60.0

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off", ""}


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass
class Settings:
    """Application settings.

    Attributes:
        db_path: SQLite database file, or ":memory:".
        max_image_bytes: Largest accepted image attachment.
        auto_close_seconds: Delay before a finished workflow closes itself.
        idle_timeout_seconds: Inactivity after which an open workflow is
                              closed. 0 disables expiry.
        seed_demo: Load the demo course catalog on startup.
        email_enabled: Deliver confirmation documents by e-mail.
        smtp_host: SMTP server host.
        smtp_port: SMTP server port (465 means implicit TLS).
        smtp_username: SMTP login, empty for unauthenticated relays.
        smtp_password: SMTP password.
        smtp_from: Sender address for confirmation mails.
        host: Interface the API server binds to.
        port: Port the API server listens on.
    """

    db_path: str = DEFAULT_DB_PATH
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    auto_close_seconds: float = DEFAULT_AUTO_CLOSE_SECONDS
    idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS
    seed_demo: bool = False
    email_enabled: bool = False
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_from: str = "registration@localhost"
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self) -> None:
        if self.max_image_bytes < 0:
            raise ConfigError("max_image_bytes cannot be negative")
        if self.auto_close_seconds < 0:
            raise ConfigError("auto_close_seconds cannot be negative")
        if self.idle_timeout_seconds < 0:
            raise ConfigError("idle_timeout_seconds cannot be negative")
        if not 0 < self.smtp_port < 65536:
            raise ConfigError(f"Invalid SMTP port: {self.smtp_port}")
        if not 0 < self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``COURSEREG_*`` environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Parsed settings; unset variables keep their defaults.

        Raises:
            ConfigError: If a variable holds a value of the wrong type.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            return env.get(f"COURSEREG_{name}")

        values: dict[str, object] = {}
        if (raw := get("DB_PATH")) is not None:
            values["db_path"] = raw
        if (raw := get("MAX_IMAGE_BYTES")) is not None:
            values["max_image_bytes"] = _parse_int("MAX_IMAGE_BYTES", raw)
        if (raw := get("AUTO_CLOSE_SECONDS")) is not None:
            values["auto_close_seconds"] = _parse_float("AUTO_CLOSE_SECONDS", raw)
        if (raw := get("IDLE_TIMEOUT_SECONDS")) is not None:
            values["idle_timeout_seconds"] = _parse_float("IDLE_TIMEOUT_SECONDS", raw)
        if (raw := get("SEED_DEMO")) is not None:
            values["seed_demo"] = _parse_bool("SEED_DEMO", raw)
        if (raw := get("EMAIL_ENABLED")) is not None:
            values["email_enabled"] = _parse_bool("EMAIL_ENABLED", raw)
        if (raw := get("SMTP_HOST")) is not None:
            values["smtp_host"] = raw
        if (raw := get("SMTP_PORT")) is not None:
            values["smtp_port"] = _parse_int("SMTP_PORT", raw)
        if (raw := get("SMTP_USERNAME")) is not None:
            values["smtp_username"] = raw
        if (raw := get("SMTP_PASSWORD")) is not None:
            values["smtp_password"] = raw
        if (raw := get("SMTP_FROM")) is not None:
            values["smtp_from"] = raw
        if (raw := get("HOST")) is not None:
            values["host"] = raw
        if (raw := get("PORT")) is not None:
            values["port"] = _parse_int("PORT", raw)

        return cls(**values)  # type: ignore[arg-type]


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"COURSEREG_{name} must be an integer, got {raw!r}") from e


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw.strip())
    except ValueError as e:
        raise ConfigError(f"COURSEREG_{name} must be a number, got {raw!r}") from e


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"COURSEREG_{name} must be a boolean, got {raw!r}")
