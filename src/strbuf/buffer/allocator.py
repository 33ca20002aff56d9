"""Global raw-memory heap backing every buffer allocation.

Blocks are zero-filled ``bytearray`` objects pinned behind a ``ctypes``
array so that they have a stable address for foreign C-string consumers.
"""

from __future__ import annotations

import ctypes
import sys
import weakref
from dataclasses import dataclass
from typing import NoReturn, Optional

from strbuf.runtime import telemetry

from .errors import AllocationFailure, BufferReleasedError, OutOfRange

MAX_ALLOCATION = sys.maxsize


@dataclass(slots=True)
class HeapStats:
    """Counters describing heap activity since creation."""

    allocations: int
    releases: int
    live_blocks: int
    live_bytes: int
    peak_bytes: int


class Allocation:
    """A fixed-size block of raw bytes with a stable address."""

    def __init__(self, size: int, *, static: bool = False) -> None:
        self.size = size
        self.static = static
        self._storage: Optional[bytearray] = bytearray(size)
        self._cdata = (ctypes.c_char * size).from_buffer(self._storage)
        self._finalizer: Optional[weakref.finalize] = None

    def _attach(self, heap: "Heap") -> None:
        self._finalizer = weakref.finalize(self, heap._reclaim, self.size)
        self._finalizer.atexit = False

    @property
    def released(self) -> bool:
        return self._storage is None

    def _storage_or_raise(self) -> bytearray:
        if self._storage is None:
            raise BufferReleasedError("allocation has been released")
        return self._storage

    @property
    def address(self) -> int:
        self._storage_or_raise()
        return ctypes.addressof(self._cdata)

    @property
    def cdata(self) -> ctypes.Array:
        """The ``c_char`` array overlaying the block."""

        self._storage_or_raise()
        return self._cdata

    def __getitem__(self, index: int) -> int:
        return self._storage_or_raise()[index]

    def __setitem__(self, index: int, value: int) -> None:
        storage = self._storage_or_raise()
        if self.static and value != 0:
            self._read_only(index)
        storage[index] = value

    def _read_only(self, index: int) -> NoReturn:
        raise OutOfRange(
            "the shared empty block only ever holds its terminator",
            index=index,
            length=0,
        )

    def read(self, count: int, offset: int = 0) -> bytes:
        view = memoryview(self._storage_or_raise())
        return view[offset : offset + count].tobytes()

    def view(self, count: int) -> memoryview:
        return memoryview(self._storage_or_raise())[:count].toreadonly()

    def _drop(self) -> None:
        if self._finalizer is not None:
            self._finalizer()
        self._cdata = None
        self._storage = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"0x{self.address:x}"
        return f"Allocation(size={self.size}, {state})"


class Heap:
    """Single global heap; tracks live blocks and enforces an optional limit."""

    def __init__(
        self, *, limit: Optional[int] = None, logger_name: str | None = None
    ) -> None:
        self.limit = limit
        self._logger_name = logger_name
        self._allocations = 0
        self._releases = 0
        self._live_blocks = 0
        self._live_bytes = 0
        self._peak_bytes = 0
        self.empty = Allocation(1, static=True)

    def allocate(self, size: int) -> Allocation:
        if size < 1 or size > MAX_ALLOCATION:
            self._fail(size, "size outside the representable range")
        if self.limit is not None and self._live_bytes + size > self.limit:
            self._fail(size, f"heap limit of {self.limit} bytes reached")
        try:
            block = Allocation(size)
        except (MemoryError, OverflowError) as exc:
            self._fail(size, str(exc) or type(exc).__name__, cause=exc)

        block._attach(self)
        self._allocations += 1
        self._live_blocks += 1
        self._live_bytes += size
        self._peak_bytes = max(self._peak_bytes, self._live_bytes)
        telemetry.record_event(
            "heap.allocate",
            level="debug",
            data={"size": size, "live_bytes": self._live_bytes},
            logger_name=self._logger_name,
        )
        return block

    def release(self, block: Allocation) -> None:
        """Return ``block`` to the heap; releasing twice is a no-op."""

        if block.static or block.released:
            return
        block._drop()

    def _reclaim(self, size: int) -> None:
        self._releases += 1
        self._live_blocks -= 1
        self._live_bytes -= size
        telemetry.record_event(
            "heap.release",
            level="debug",
            data={"size": size, "live_bytes": self._live_bytes},
            logger_name=self._logger_name,
        )

    def _fail(
        self, size: int, reason: str, *, cause: BaseException | None = None
    ) -> NoReturn:
        telemetry.record_event(
            "heap.allocation_failed",
            level="warning",
            data={"size": size, "reason": reason},
            logger_name=self._logger_name,
        )
        raise AllocationFailure(
            f"cannot allocate {size} bytes: {reason}", requested=size
        ) from cause

    def stats(self) -> HeapStats:
        return HeapStats(
            allocations=self._allocations,
            releases=self._releases,
            live_blocks=self._live_blocks,
            live_bytes=self._live_bytes,
            peak_bytes=self._peak_bytes,
        )


_HEAP = Heap(
    limit=telemetry.current_settings().heap_limit, logger_name="strbuf.heap"
)


def get_heap() -> Heap:
    return _HEAP


def allocate(size: int) -> Allocation:
    return _HEAP.allocate(size)


def release(block: Allocation) -> None:
    _HEAP.release(block)


def empty_allocation() -> Allocation:
    """The shared 1-byte block that moved-from buffers point at."""

    return _HEAP.empty


__all__ = [
    "MAX_ALLOCATION",
    "Allocation",
    "Heap",
    "HeapStats",
    "allocate",
    "empty_allocation",
    "get_heap",
    "release",
]
