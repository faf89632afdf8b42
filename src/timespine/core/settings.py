"""Runtime settings for timespine.

The engines are pure functions of their inputs; the only knobs are how much
checking they do, which join algorithm they pick, and how they log.
``TimespineSettings`` holds those knobs and reads ``TIMESPINE_*`` environment
variables (and an optional ``.env``) so a test run or a debug session can turn
on validation without touching call sites.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** a bad ratio or log level fails at load time
    - **Release by default:** no per-operation ordering checks unless asked
    - **Scoped overrides:** ``override_settings()`` for tests and debugging

Examples:
    >>> from timespine.core.settings import get_settings, override_settings
    >>> get_settings().validate_inputs
    False
    >>> with override_settings(validate_inputs=True):
    ...     get_settings().validate_inputs
    True

Tags:
    settings, configuration, pydantic, environment, timespine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimespineSettings(BaseSettings):
    """Timespine configuration.

    Fields
    ──────
    validate_inputs        : Check key order of every engine input and raise
                             ``UnorderedInputError`` / ``DuplicateKeyError``
    default_join_strategy  : Strategy used when a join is called with AUTO
    hash_join_ratio        : AUTO picks the hash join once the larger input is
                             at least this many times the smaller one
    hash_precompare        : Let joins detect identical key indexes through a
                             content fingerprint and skip the cursor walk
    log_level              : Structlog level applied by ``configure_logging``
                             when it is called without an explicit level
    log_format             : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="TIMESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Validation ───────────────────────────────────────────────
    validate_inputs: bool = Field(default=False)

    # ── Joins ────────────────────────────────────────────────────
    default_join_strategy: Literal["auto", "merge", "hash"] = Field(default="auto")
    hash_join_ratio: float = Field(default=8.0, gt=1.0)
    hash_precompare: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: Literal["console", "json"] = Field(default="console")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, TimespineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TimespineSettings:
    """Load, validate, and cache a :class:`TimespineSettings` instance."""
    if not _force_reload and "active" in _settings_cache:
        return _settings_cache["active"]
    settings = TimespineSettings()
    _settings_cache["active"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


@contextmanager
def override_settings(**overrides: Any) -> Iterator[TimespineSettings]:
    """Temporarily replace the active settings.

    Overrides are validated the same way environment values are.

    Example:
        with override_settings(validate_inputs=True):
            series.cross_apply_inner(other, pair)  # checks both inputs
    """
    previous = _settings_cache.get("active")
    base = (previous or get_settings()).model_dump()
    base.update(overrides)
    _settings_cache["active"] = TimespineSettings.model_validate(base)
    try:
        yield _settings_cache["active"]
    finally:
        if previous is None:
            _settings_cache.pop("active", None)
        else:
            _settings_cache["active"] = previous


__all__ = [
    "TimespineSettings",
    "get_settings",
    "clear_settings_cache",
    "override_settings",
]
