"""
Application configuration.

Responsibilities:
- Read environment variables
- Load the legacy JSON config file, if one is configured
- Provide typed, immutable config objects
- Resolve the analysis dispatcher URL from its two ordered sources

Non-responsibilities:
- No orchestration logic
- No runtime mutation
"""

from __future__ import annotations

import json
import os
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from constants import (
    DISPATCHER_URL_CONFIG_KEY,
    ENV_TO_CONFIG_KEY,
    LEGACY_DISPATCHER_URL_KEY,
    WEBHOOK_IO_MAX_WORKERS,
    WEBHOOK_REQUEST_TIMEOUT_S,
)
from errors import ConfigError


# ------------------------------------------------------------------
# Configuration sources
# ------------------------------------------------------------------

@dataclass(frozen=True)
class LegacyConfigSource:
    """
    Values read from the legacy JSON config file.

    Only the fields the control plane consumes are kept.
    """

    dispatcher_url: str | None = None

    @staticmethod
    def load(path: str | None) -> LegacyConfigSource:
        """
        Load the legacy config file.

        A missing path yields an empty source. A path that points at a
        missing or malformed file is a ConfigError.
        """
        if not path:
            return LegacyConfigSource()

        file_path = Path(path)
        if not file_path.exists():
            raise ConfigError(f"Legacy config file not found: {file_path}")

        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in legacy config file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Legacy config file must contain a JSON object")

        return LegacyConfigSource(
            dispatcher_url=raw.get(LEGACY_DISPATCHER_URL_KEY) or None,
        )


@dataclass(frozen=True)
class ConfigSource:
    """
    Current configuration, addressed by dotted keys
    (e.g. "jibri.analysis.dispatcher").
    """

    values: Mapping[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        value = self.values.get(key)
        return value or None

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> ConfigSource:
        env = os.environ if environ is None else environ
        return ConfigSource(
            values={
                key: env[var]
                for var, key in ENV_TO_CONFIG_KEY.items()
                if env.get(var)
            }
        )


def resolve_dispatcher_url(
    legacy: LegacyConfigSource,
    current: ConfigSource,
) -> str:
    """
    Resolve the analysis dispatcher URL.

    Precedence:
    1. Legacy config file value, if set
    2. Current config key "jibri.analysis.dispatcher"

    Raises:
        ConfigError if neither source holds a value (there is no default).
    """
    if legacy.dispatcher_url:
        return legacy.dispatcher_url

    value = current.get(DISPATCHER_URL_CONFIG_KEY)
    if value:
        return value

    raise ConfigError(
        f"No dispatcher url configured: set '{LEGACY_DISPATCHER_URL_KEY}' in the "
        f"legacy config file or '{DISPATCHER_URL_CONFIG_KEY}'"
    )


# ------------------------------------------------------------------
# Application config
# ------------------------------------------------------------------

def _split_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup and passed downward.
    """

    # ------------------------------------------------------------------
    # Identity / environment
    # ------------------------------------------------------------------

    jibri_id: str
    log_level: str

    # ------------------------------------------------------------------
    # Dispatcher URL sources (resolved per recording service)
    # ------------------------------------------------------------------

    legacy: LegacyConfigSource
    current: ConfigSource

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    webhook_subscribers: tuple[str, ...]
    webhook_timeout_s: float
    webhook_io_workers: int

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ConfigError if the legacy config file is set but unreadable.
        """
        return AppConfig(
            jibri_id=os.environ.get("JIBRI_ID") or socket.gethostname(),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),

            legacy=LegacyConfigSource.load(os.environ.get("JIBRI_LEGACY_CONFIG")),
            current=ConfigSource.from_env(),

            webhook_subscribers=_split_list(os.environ.get("JIBRI_WEBHOOK_SUBSCRIBERS")),
            webhook_timeout_s=float(
                os.environ.get("JIBRI_WEBHOOK_TIMEOUT_S", WEBHOOK_REQUEST_TIMEOUT_S)
            ),
            webhook_io_workers=int(
                os.environ.get("JIBRI_WEBHOOK_IO_WORKERS", WEBHOOK_IO_MAX_WORKERS)
            ),
        )
