"""Owned byte buffers, the raw heap behind them, and C-string primitives."""

from .allocator import Allocation, Heap, HeapStats, get_heap
from .buffer import Buffer, concat
from .cstr import (
    copy_bytes,
    string_cat,
    string_copy,
    string_duplicate,
    string_length,
)
from .errors import (
    AllocationFailure,
    BufferReleasedError,
    InvalidArgument,
    OutOfRange,
    StrbufError,
)
from .growth import GROWTH_OFFSET, MAX_CAPACITY, grow_capacity
from .lifetime import is_tracing, set_tracing

__all__ = [
    "Allocation",
    "Heap",
    "HeapStats",
    "get_heap",
    "Buffer",
    "concat",
    "copy_bytes",
    "string_cat",
    "string_copy",
    "string_duplicate",
    "string_length",
    "StrbufError",
    "InvalidArgument",
    "OutOfRange",
    "AllocationFailure",
    "BufferReleasedError",
    "GROWTH_OFFSET",
    "MAX_CAPACITY",
    "grow_capacity",
    "is_tracing",
    "set_tracing",
]
