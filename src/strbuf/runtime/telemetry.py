"""Structured logging for strbuf, backed by telelog.

Heap events, reallocation spans and lifetime traces all go through
:func:`record_event` and :func:`span`. The active telelog config is built
from :class:`~strbuf.runtime.config.Settings`, either field by field or from
one of the named :data:`~strbuf.runtime.config.LOG_PRESETS`.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

from .config import LOG_PRESETS, Settings, load_settings

tl = cast(Any, telelog)

_LOGGERS: MutableMapping[str, Any] = {}
_CONFIG: Optional[Any] = None
_SETTINGS: Settings = load_settings()


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return repr(bytes(value))
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _pairs(data: Dict[str, Any]) -> list[tuple[str, str]]:
    return [(str(key), _text(value)) for key, value in data.items()]


def _development(config: Any, settings: Settings) -> None:
    config.with_min_level("DEBUG")
    config.with_console_output(True)
    config.with_colored_output(not settings.no_color)
    config.with_json_format(False)


def _production(config: Any, settings: Settings) -> None:
    config.with_min_level("INFO")
    config.with_console_output(False)
    config.with_file_output(settings.log_file or "strbuf.log")
    config.with_json_format(True)
    config.with_buffering(True)
    config.with_buffer_size(settings.log_buffer_size)


def _quiet(config: Any, settings: Settings) -> None:
    config.with_min_level("ERROR")
    config.with_console_output(False)


_PRESETS: Dict[str, Callable[[Any, Settings], None]] = {
    "development": _development,
    "production": _production,
    "quiet": _quiet,
}


def _from_settings(config: Any, settings: Settings) -> None:
    config.with_min_level(settings.log_level)
    config.with_console_output(not settings.disable_console)
    if not settings.disable_console:
        config.with_colored_output(not settings.no_color)
    if settings.log_json:
        config.with_json_format(True)
    if settings.log_file:
        config.with_file_output(settings.log_file)
    if settings.log_buffered:
        config.with_buffering(True)
        config.with_buffer_size(settings.log_buffer_size)


def build_config(settings: Settings, preset: Optional[str] = None) -> Any:
    """Build a ``telelog.Config``; ``preset`` falls back to the settings'."""

    name = (preset or settings.log_preset).lower()
    if name and name not in _PRESETS:
        raise ValueError(
            f"Unknown log preset '{preset}'; expected one of {', '.join(LOG_PRESETS)}."
        )
    config = tl.Config()
    (_PRESETS[name] if name else _from_settings)(config, settings)
    return config


def configure(
    *,
    config: Optional[Any] = None,
    preset: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Swap the active telelog config and drop cached loggers.

    ``config`` is adopted as is; otherwise one is built from ``settings``
    (re-read from the environment when omitted) and ``preset``.
    """

    global _CONFIG, _SETTINGS
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    resolved = settings or load_settings()
    _CONFIG = config if config is not None else build_config(resolved, preset)
    _SETTINGS = resolved
    _LOGGERS.clear()


def current_settings() -> Settings:
    return _SETTINGS


def get_logger(name: Optional[str] = None) -> Any:
    """Cached ``telelog.Logger`` bound to the active config."""

    key = name or _SETTINGS.logger_name
    log = _LOGGERS.get(key)
    if log is None:
        if _CONFIG is None:
            configure(settings=_SETTINGS)
        log = _LOGGERS[key] = tl.Logger.with_config(key, _CONFIG)
    return log


def _emit(log: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    name = str(level).lower()
    structured = getattr(log, f"{name}_with", None)
    if structured is not None:
        structured(message, _pairs(payload))
        return
    plain = getattr(log, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>`` with ``data`` attached as key/value pairs."""

    _emit(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by :func:`span`; metadata added here is reported when it ends."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def _report(self, level: str, message: str, **extra: Any) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        payload.update(extra)
        _emit(self.logger, level, message, payload)

    def done(self) -> None:
        self._report("debug", "span::done")

    def fail(self, reason: str) -> None:
        self._report("error", "span::fail", reason=reason)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block, optionally tracking it as a telelog component.

    ``component=True`` reuses ``name`` as the component id. ``metadata`` is
    pushed as logger context for the duration of the block.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    handle = SpanHandle(log, name, component_name, dict(context))

    with ExitStack() as stack:
        for key, value in context.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))

        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise
        handle.done()


configure()

__all__ = [
    "SpanHandle",
    "build_config",
    "configure",
    "current_settings",
    "get_logger",
    "record_event",
    "span",
]
