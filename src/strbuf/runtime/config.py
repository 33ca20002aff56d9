"""Environment-driven settings shared by the heap and telemetry layers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "STRBUF_"
LOG_PRESETS = ("development", "production", "quiet")


def _env(
    name: str, default: Optional[str] = None, *, environ: Mapping[str, str] | None = None
) -> Optional[str]:
    source = os.environ if environ is None else environ
    return source.get(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool, *, environ: Mapping[str, str] | None = None) -> bool:
    raw = _env(name, environ=environ)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, fallback: int, *, environ: Mapping[str, str] | None = None) -> int:
    value = _env(name, environ=environ)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


@dataclass(frozen=True, slots=True)
class Settings:
    """Snapshot of the ``STRBUF_*`` environment."""

    logger_name: str = "strbuf"
    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False
    disable_console: bool = False
    no_color: bool = False
    log_buffered: bool = False
    log_buffer_size: int = 2048
    log_preset: str = ""
    heap_limit: Optional[int] = None
    trace_lifetime: bool = False


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read settings from ``environ`` (defaults to ``os.environ``)."""

    limit = _env_int("HEAP_LIMIT", 0, environ=environ)
    preset = (_env("LOG_PRESET", environ=environ) or "").lower()
    return Settings(
        logger_name=_env("LOGGER", "strbuf", environ=environ) or "strbuf",
        log_level=(_env("LOG_LEVEL", environ=environ) or "INFO").upper(),
        log_file=_env("LOG_FILE", "", environ=environ) or "",
        log_json=_env_flag("LOG_JSON", False, environ=environ),
        disable_console=_env_flag("DISABLE_CONSOLE", False, environ=environ),
        no_color=_env_flag("NO_COLOR", False, environ=environ),
        log_buffered=_env_flag("LOG_BUFFERED", False, environ=environ),
        log_buffer_size=_env_int("LOG_BUFFER_SIZE", 2048, environ=environ),
        log_preset=preset if preset in LOG_PRESETS else "",
        heap_limit=limit if limit > 0 else None,
        trace_lifetime=_env_flag("TRACE_LIFETIME", False, environ=environ),
    )


__all__ = ["ENV_PREFIX", "LOG_PRESETS", "Settings", "load_settings"]
