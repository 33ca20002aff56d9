"""Opt-in lifetime tracing for buffers (construct, copy, move, release)."""

from __future__ import annotations

from typing import Any

from strbuf.runtime import telemetry

_enabled = telemetry.current_settings().trace_lifetime


def set_tracing(enabled: bool) -> None:
    global _enabled
    _enabled = bool(enabled)


def is_tracing() -> bool:
    return _enabled


def trace(event: str, buffer: Any, **data: Any) -> None:
    if not _enabled:
        return
    payload = {
        "id": f"0x{id(buffer):x}",
        "length": buffer._length,
        "capacity": buffer._capacity,
        **data,
    }
    telemetry.record_event(f"buffer.{event}", data=payload, logger_name="strbuf.lifetime")


__all__ = ["is_tracing", "set_tracing", "trace"]
