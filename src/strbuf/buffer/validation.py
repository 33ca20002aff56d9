"""Argument checks shared by the buffer and the C-string primitives."""

from __future__ import annotations

from .errors import InvalidArgument, OutOfRange


def coerce_bytes(source: object, *, operation: str) -> bytes:
    """Return ``source`` as ``bytes``; ``None`` and text are rejected."""

    if source is None:
        raise InvalidArgument(f"{operation}: null", argument=source)
    if isinstance(source, bytes):
        return source
    if isinstance(source, str):
        raise InvalidArgument(
            f"{operation}: expected a bytes-like object, got str", argument=source
        )
    try:
        with memoryview(source) as view:  # type: ignore[arg-type]
            return view.tobytes()
    except TypeError as exc:
        raise InvalidArgument(
            f"{operation}: expected a bytes-like object, got {type(source).__name__}",
            argument=source,
        ) from exc


def ensure_byte(value: object, *, operation: str) -> int:
    if isinstance(value, bool):
        raise InvalidArgument(f"{operation}: expected a byte, got bool", argument=value)
    if isinstance(value, int):
        if not 0 <= value <= 0xFF:
            raise InvalidArgument(
                f"{operation}: byte value {value} out of range", argument=value
            )
        return value
    if isinstance(value, (bytes, bytearray)) and len(value) == 1:
        return value[0]
    raise InvalidArgument(
        f"{operation}: expected an int in 0..255 or a single byte", argument=value
    )


def ensure_index(index: int, length: int, *, operation: str = "at") -> int:
    if index < 0 or index >= length:
        raise OutOfRange(
            f"{operation}: index {index} out of range for length {length}",
            index=index,
            length=length,
        )
    return index


def ensure_capacity_request(capacity: object, *, operation: str) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise InvalidArgument(
            f"{operation}: capacity must be an int", argument=capacity
        )
    if capacity < 0:
        raise InvalidArgument(
            f"{operation}: capacity must not be negative", argument=capacity
        )
    return capacity


__all__ = [
    "coerce_bytes",
    "ensure_byte",
    "ensure_capacity_request",
    "ensure_index",
]
