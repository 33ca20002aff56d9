"""Primitives over NUL-terminated byte sequences.

These mirror the classic ``strlen``/``strcpy``/``strcat``/``strdup`` family.
Sources are any bytes-like object and are read up to their first NUL byte.
Destinations are writable raw memory: an :class:`Allocation`, a
``bytearray`` or a ``ctypes`` array.
"""

from __future__ import annotations

import ctypes
from typing import Any, Tuple, TypeVar, Union

from . import allocator
from .allocator import Allocation
from .errors import InvalidArgument, OutOfRange
from .validation import coerce_bytes

TERMINATOR = 0

Writable = Union[Allocation, bytearray, ctypes.Array]
W = TypeVar("W", Allocation, bytearray, ctypes.Array)


def string_length(src: object) -> int:
    """Number of bytes before the first NUL (the whole object if none)."""

    data = coerce_bytes(src, operation="string_length")
    end = data.find(b"\0")
    return len(data) if end < 0 else end


def _terminated(src: object, operation: str) -> bytes:
    data = coerce_bytes(src, operation=operation)
    end = data.find(b"\0")
    return data if end < 0 else data[:end]


def _target(dst: object, operation: str) -> Tuple[Any, int, int]:
    """Return ``(owner, address, size)`` for a writable destination."""

    if dst is None:
        raise InvalidArgument(f"{operation}: null destination", argument=dst)
    if isinstance(dst, Allocation):
        if dst.static:
            raise InvalidArgument(
                f"{operation}: the shared empty block is read-only", argument=dst
            )
        return dst, dst.address, dst.size
    if isinstance(dst, bytearray):
        if not dst:
            raise OutOfRange(f"{operation}: destination has no room", length=0)
        overlay = (ctypes.c_char * len(dst)).from_buffer(dst)
        return overlay, ctypes.addressof(overlay), len(dst)
    if isinstance(dst, ctypes.Array):
        return dst, ctypes.addressof(dst), ctypes.sizeof(dst)
    raise InvalidArgument(
        f"{operation}: destination must be writable raw memory, "
        f"got {type(dst).__name__}",
        argument=dst,
    )


def copy_bytes(
    dst: Allocation, offset: int, src: Union[bytes, Allocation], count: int
) -> None:
    """Copy ``count`` raw bytes from ``src`` into ``dst`` at ``offset``."""

    if count == 0:
        return
    if dst.static:
        dst._read_only(offset)
    if offset < 0 or offset + count > dst.size:
        raise OutOfRange(
            f"copy_bytes: {count} bytes at offset {offset} overflow a "
            f"{dst.size}-byte block",
            index=offset + count,
            length=dst.size,
        )
    if isinstance(src, Allocation):
        source: Union[bytes, int] = src.address
        available = src.size
    else:
        source = src
        available = len(src)
    if count > available:
        raise OutOfRange(
            f"copy_bytes: source holds {available} bytes, {count} requested",
            index=count,
            length=available,
        )
    ctypes.memmove(dst.address + offset, source, count)


def string_copy(dst: W, src: object) -> W:
    """Copy ``src`` and its terminator into ``dst``; return ``dst``."""

    data = _terminated(src, "string_copy")
    _owner, address, size = _target(dst, "string_copy")
    if len(data) + 1 > size:
        raise OutOfRange(
            f"string_copy: {len(data) + 1} bytes do not fit in {size}",
            index=len(data),
            length=size,
        )
    ctypes.memmove(address, data + b"\0", len(data) + 1)
    return dst


def string_cat(dst: W, src: object) -> W:
    """Append ``src`` at the terminator already present in ``dst``."""

    data = _terminated(src, "string_cat")
    _owner, address, size = _target(dst, "string_cat")
    current = ctypes.string_at(address, size)
    end = current.find(b"\0")
    if end < 0:
        raise OutOfRange("string_cat: destination is not terminated", length=size)
    if end + len(data) + 1 > size:
        raise OutOfRange(
            f"string_cat: {end + len(data) + 1} bytes do not fit in {size}",
            index=end + len(data),
            length=size,
        )
    ctypes.memmove(address + end, data + b"\0", len(data) + 1)
    return dst


def string_duplicate(src: object) -> Allocation:
    """Return a fresh heap block holding a terminated copy of ``src``.

    The caller owns the block and hands it back with ``allocator.release``.
    """

    data = _terminated(src, "string_duplicate")
    block = allocator.allocate(len(data) + 1)
    copy_bytes(block, 0, data, len(data))
    block[len(data)] = TERMINATOR
    return block


__all__ = [
    "TERMINATOR",
    "Writable",
    "copy_bytes",
    "string_cat",
    "string_copy",
    "string_duplicate",
    "string_length",
]
