"""Hand-rolled, NUL-terminated byte buffers with value semantics."""

from .buffer import (
    AllocationFailure,
    Buffer,
    BufferReleasedError,
    InvalidArgument,
    OutOfRange,
    StrbufError,
    concat,
)

__all__ = [
    "buffer",
    "cli",
    "runtime",
    "Buffer",
    "concat",
    "StrbufError",
    "InvalidArgument",
    "OutOfRange",
    "AllocationFailure",
    "BufferReleasedError",
]

__version__ = "0.1.0"
