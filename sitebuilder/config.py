"""
Sitebuilder configuration — all environment variables in one place.

Read from environment at import time.
"""

from __future__ import annotations

import os

_TIERS = ("free", "premium", "enterprise")
_BREAKPOINTS = ("mobile", "tablet", "desktop")


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings from environment variables."""

    # Entitlements
    DEFAULT_TIER: str = os.environ.get("SITEBUILDER_DEFAULT_TIER", "free").strip().lower()

    # Editing
    DEFAULT_BREAKPOINT: str = os.environ.get("SITEBUILDER_DEFAULT_BREAKPOINT", "desktop").strip().lower()
    ENSURE_PAGE_CHROME: bool = _env_bool("SITEBUILDER_ENSURE_PAGE_CHROME", "true")
    DEFAULT_SITE_NAME: str = os.environ.get("SITEBUILDER_DEFAULT_SITE_NAME", "Your Website")

    # API
    MAX_SESSIONS: int = int(os.environ.get("SITEBUILDER_MAX_SESSIONS", "100"))

    # Application
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")


# Singleton instance
settings = Settings()

if settings.DEFAULT_TIER not in _TIERS:
    raise RuntimeError(f"SITEBUILDER_DEFAULT_TIER must be one of {_TIERS}, got {settings.DEFAULT_TIER!r}")
if settings.DEFAULT_BREAKPOINT not in _BREAKPOINTS:
    raise RuntimeError(
        f"SITEBUILDER_DEFAULT_BREAKPOINT must be one of {_BREAKPOINTS}, got {settings.DEFAULT_BREAKPOINT!r}"
    )
if settings.MAX_SESSIONS < 1:
    raise RuntimeError("SITEBUILDER_MAX_SESSIONS must be a positive integer")
