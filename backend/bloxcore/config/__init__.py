"""Centralised configuration helper.

All environment lookups happen here; the rest of the package receives a
:class:`Settings` instance (via :func:`get_settings` or explicit injection)
instead of reading ``os.environ`` on its own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from bloxcore.constants import DEFAULT_LOG_LIMIT

# ``_REPO_ROOT`` points to the top-level repository directory (one level
# **above** the "backend" package).  ``parents[3]`` because this file lives at
# ``backend/bloxcore/config/__init__.py``.

_REPO_ROOT = Path(__file__).resolve().parents[3]


def _truthy(value: str | None) -> bool:  # noqa: D401 – small helper
    """Return *True* when *value* looks like an affirmative string."""

    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class Settings:  # noqa: D401 – simple data container
    """Lightweight settings container populated from environment variables."""

    # Runtime flags -----------------------------------------------------
    testing: bool
    environment: Any
    validate_state: bool

    # Storage -----------------------------------------------------------
    storage_dir: Path
    database_url: str

    # Logging -----------------------------------------------------------
    log_level: str
    max_log_entries: int

    # Helper for tests to override values at runtime -------------------
    def override(self, **kwargs: Any) -> None:
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no attribute '{key}'")
            setattr(self, key, value)


# ---------------------------------------------------------------------------
# Accessor – reads the environment on every call so tests can tweak it
# ---------------------------------------------------------------------------


def _load_settings() -> Settings:  # noqa: D401 – helper
    """Populate :class:`Settings` from environment variables."""

    env_path = _REPO_ROOT / ".env"
    if env_path.exists():
        # Explicit process environment wins over the project file.
        load_dotenv(env_path, override=False)

    testing = _truthy(os.getenv("TESTING"))
    environment = os.getenv("ENVIRONMENT")

    validate_raw = os.getenv("BLOX_VALIDATE_STATE")
    if validate_raw is None:
        validate_state = (environment or "").lower() != "production"
    else:
        validate_state = _truthy(validate_raw)

    storage_dir = Path(os.getenv("BLOX_STORAGE_DIR", "~/.bloxcore")).expanduser()

    return Settings(
        testing=testing,
        environment=environment,
        validate_state=validate_state,
        storage_dir=storage_dir,
        database_url=os.getenv("BLOX_DATABASE_URL", "sqlite:///./bloxcore.db"),
        log_level=os.getenv("BLOX_LOG_LEVEL", "INFO"),
        max_log_entries=max(1, _int(os.getenv("BLOX_MAX_LOG_ENTRIES"), DEFAULT_LOG_LIMIT)),
    )


def get_settings() -> Settings:  # noqa: D401 – public accessor
    """Return :class:`Settings` instance loaded from environment."""

    return _load_settings()


__all__ = [
    "Settings",
    "get_settings",
]
