"""Persistent provider settings.

Settings live in a JSON file in the platform-specific config directory
(see :data:`paths.SETTINGS_FILE`)::

    {"scheme": "Bearer", "refresh_command": "/usr/local/bin/get-token", "timeout": 10}

Writes go through :func:`atomic_write` to avoid corrupted files on crash.
"""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, field_validator

from .models.scheme import AuthScheme
from .paths import SETTINGS_FILE, atomic_write


class ProviderSettings(BaseModel):
    """Everything needed to build a :class:`~cmdauth.provider.CredentialProvider`."""

    scheme: str = "Bearer"
    refresh_command: str = ""
    timeout: float | None = None

    @field_validator("scheme")
    @classmethod
    def _known_scheme(cls, v: str) -> str:
        return AuthScheme.parse(v).display_name

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v


def load_settings(path: Path | None = None) -> ProviderSettings:
    """Load settings from *path* (default :data:`SETTINGS_FILE`).

    Returns defaults if the file does not exist or cannot be parsed.
    """
    path = path or SETTINGS_FILE
    if not path.exists():
        return ProviderSettings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ProviderSettings(**data)
    except Exception as exc:
        logger.warning(f"Failed to load settings from {path}: {exc}")
        return ProviderSettings()


def save_settings(settings: ProviderSettings, path: Path | None = None) -> None:
    """Persist *settings* to disk atomically."""
    path = path or SETTINGS_FILE
    atomic_write(path, settings.model_dump_json(indent=2))
    logger.debug(f"Settings saved to {path}")
