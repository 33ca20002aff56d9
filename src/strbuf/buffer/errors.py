"""Error kinds raised by the buffer layer."""

from __future__ import annotations

from typing import Optional


class StrbufError(Exception):
    """Base class for every error raised by strbuf."""


class InvalidArgument(StrbufError, ValueError):
    """Raised when a byte sequence is absent or not bytes-like."""

    def __init__(self, message: str, *, argument: object = None) -> None:
        super().__init__(message)
        self.argument = argument


class OutOfRange(StrbufError, IndexError):
    """Raised by checked access when an index is not below the length."""

    def __init__(
        self, message: str, *, index: Optional[int] = None, length: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.index = index
        self.length = length


class AllocationFailure(StrbufError, MemoryError):
    """Raised when the heap cannot provide ``requested`` bytes."""

    def __init__(self, message: str, *, requested: Optional[int] = None) -> None:
        super().__init__(message)
        self.requested = requested


class BufferReleasedError(StrbufError, RuntimeError):
    """Raised when a buffer is used after ``release()``."""


__all__ = [
    "StrbufError",
    "InvalidArgument",
    "OutOfRange",
    "AllocationFailure",
    "BufferReleasedError",
]
