"""Owned, growable, NUL-terminated byte buffer with value semantics."""

from __future__ import annotations

import ctypes
from typing import Iterator, Optional

from strbuf.runtime import telemetry

from . import allocator, lifetime
from .allocator import Allocation
from .cstr import TERMINATOR, copy_bytes, string_length
from .errors import BufferReleasedError
from .growth import grow_capacity
from .validation import (
    coerce_bytes,
    ensure_byte,
    ensure_capacity_request,
    ensure_index,
)

_NO_SOURCE = object()
_LOGGER_NAME = "strbuf.buffer"


def _foreign_bytes(source: object, operation: str) -> bytes:
    """Content of ``source`` as read by a C-string consumer."""

    if isinstance(source, Buffer):
        data = source.to_bytes()
    else:
        data = coerce_bytes(source, operation=operation)
    return data[: string_length(data)]


class Buffer:
    """Single-owner byte buffer whose content is always followed by a NUL.

    The buffer owns one heap :class:`Allocation` of ``capacity + 1`` bytes.
    ``length`` bytes are content and ``data[length]`` is always the
    terminator. Copies are explicit (:meth:`copy`), moves hand the allocation
    over (:meth:`move`) and leave the source as an empty, usable buffer.
    """

    __slots__ = ("_block", "_length", "_capacity", "__weakref__")

    def __init__(self, source: object = _NO_SOURCE) -> None:
        if source is _NO_SOURCE:
            data = b""
        elif isinstance(source, Buffer):
            self._copy_from(source)
            return
        else:
            data = _foreign_bytes(source, "Buffer")

        n = len(data)
        block = allocator.allocate(n + 1)
        copy_bytes(block, 0, data, n)
        block[n] = TERMINATOR
        self._block: Optional[Allocation] = block
        self._length = n
        self._capacity = n
        lifetime.trace("construct", self)

    def _copy_from(self, other: "Buffer") -> None:
        source = other._live()
        n = other._length
        block = allocator.allocate(n + 1)
        copy_bytes(block, 0, source, n + 1)
        self._block = block
        self._length = n
        self._capacity = n
        lifetime.trace("copy", self, source=f"0x{id(other):x}")

    @classmethod
    def _adopt(cls, block: Allocation, length: int, capacity: int) -> "Buffer":
        adopted = cls.__new__(cls)
        adopted._block = block
        adopted._length = length
        adopted._capacity = capacity
        return adopted

    @classmethod
    def copy_of(cls, other: "Buffer") -> "Buffer":
        """Deep copy sized to ``other.length`` rather than its capacity."""

        duplicate = cls.__new__(cls)
        duplicate._copy_from(other)
        return duplicate

    @classmethod
    def take(cls, other: "Buffer") -> "Buffer":
        """Take over ``other``'s allocation; ``other`` is left empty."""

        moved = cls._adopt(other._live(), other._length, other._capacity)
        other._reset()
        lifetime.trace("move", moved, source=f"0x{id(other):x}")
        return moved

    def copy(self) -> "Buffer":
        return Buffer.copy_of(self)

    def move(self) -> "Buffer":
        return Buffer.take(self)

    __copy__ = copy

    def __deepcopy__(self, memo: dict) -> "Buffer":
        return self.copy()

    def _reset(self) -> None:
        self._block = allocator.empty_allocation()
        self._length = 0
        self._capacity = 0

    def _live(self) -> Allocation:
        if self._block is None:
            raise BufferReleasedError("buffer has been released")
        return self._block

    def release(self) -> None:
        """Give the allocation back to the heap. Safe to call repeatedly."""

        block = self._block
        if block is None:
            return
        lifetime.trace("release", self)
        self._block = None
        self._length = 0
        self._capacity = 0
        allocator.release(block)

    @property
    def released(self) -> bool:
        return self._block is None

    def __enter__(self) -> "Buffer":
        self._live()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    def swap(self, other: "Buffer") -> None:
        self._live()
        other._live()
        self._block, other._block = other._block, self._block
        self._length, other._length = other._length, self._length
        self._capacity, other._capacity = other._capacity, self._capacity
        lifetime.trace("swap", self, other=f"0x{id(other):x}")

    def copy_assign(self, other: "Buffer") -> "Buffer":
        """Replace the content with a copy of ``other`` (all or nothing)."""

        self._live()
        with Buffer.copy_of(other) as scratch:
            self.swap(scratch)
        return self

    def move_assign(self, other: "Buffer") -> "Buffer":
        self._live()
        with Buffer.take(other) as scratch:
            self.swap(scratch)
        return self

    @property
    def length(self) -> int:
        self._live()
        return self._length

    @property
    def capacity(self) -> int:
        self._live()
        return self._capacity

    def is_empty(self) -> bool:
        return self.length == 0

    def to_bytes(self) -> bytes:
        """Content without the terminator; embedded NUL bytes included."""

        return self._live().read(self._length)

    def c_str(self) -> bytes:
        """Content followed by its terminator."""

        return self._live().read(self._length + 1)

    def view(self) -> memoryview:
        """Read-only view of content plus terminator.

        Only valid until the next mutating call.
        """

        return self._live().view(self._length + 1)

    @property
    def address(self) -> int:
        return self._live().address

    @property
    def _as_parameter_(self) -> ctypes.c_char_p:
        return ctypes.cast(self._live().cdata, ctypes.c_char_p)

    def __len__(self) -> int:
        return self.length

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __iter__(self) -> Iterator[int]:
        return iter(self.to_bytes())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return self.to_bytes() == other.to_bytes()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.to_bytes() == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._block is None:
            return "Buffer(<released>)"
        return (
            f"Buffer({self.to_bytes()!r}, length={self._length}, "
            f"capacity={self._capacity})"
        )

    def __getitem__(self, index: int) -> int:
        # Unchecked: only the allocation's own bounds apply.
        return self._live()[index]

    def __setitem__(self, index: int, value: int) -> None:
        self._live()[index] = value

    def at(self, index: int) -> int:
        block = self._live()
        return block[ensure_index(index, self._length, operation="Buffer.at")]

    def set_at(self, index: int, value: object) -> None:
        block = self._live()
        position = ensure_index(index, self._length, operation="Buffer.set_at")
        block[position] = ensure_byte(value, operation="Buffer.set_at")

    def clear(self) -> None:
        block = self._live()
        self._length = 0
        block[0] = TERMINATOR

    def assign(self, source: object) -> None:
        """Replace the content, reusing the allocation when it is big enough."""

        block = self._live()
        data = _foreign_bytes(source, "assign")
        n = len(data)
        if n > self._capacity:
            with telemetry.span(
                "buffer::assign",
                logger_name=_LOGGER_NAME,
                component="buffer",
                metadata={"length": n, "capacity": self._capacity},
            ):
                with Buffer(data) as scratch:
                    self.swap(scratch)
            return

        copy_bytes(block, 0, data, n)
        block[n] = TERMINATOR
        self._length = n

    def push(self, value: object) -> None:
        byte = ensure_byte(value, operation="push")
        self._ensure_capacity_for(self._length + 1)
        block = self._live()
        block[self._length] = byte
        self._length += 1
        block[self._length] = TERMINATOR

    def append(self, source: object) -> None:
        self._live()
        data = _foreign_bytes(source, "append")
        n = len(data)
        self._ensure_capacity_for(self._length + n)
        block = self._live()
        copy_bytes(block, self._length, data, n)
        self._length += n
        block[self._length] = TERMINATOR

    def __iadd__(self, other: object) -> "Buffer":
        self.append(other)
        return self

    def __add__(self, other: object) -> "Buffer":
        return concat(self, other)

    def reserve(self, new_capacity: int) -> None:
        """Grow the allocation to hold ``new_capacity`` bytes of content."""

        old = self._live()
        requested = ensure_capacity_request(new_capacity, operation="reserve")
        if requested <= self._capacity:
            return
        with telemetry.span(
            "buffer::reserve",
            logger_name=_LOGGER_NAME,
            component="buffer",
            metadata={"from": self._capacity, "to": requested},
        ) as handle:
            block = allocator.allocate(requested + 1)
            copy_bytes(block, 0, old, self._length + 1)
            self._block = block
            self._capacity = requested
            allocator.release(old)
            handle.add_metadata("released", old.size)

    def shrink_to_fit(self) -> None:
        old = self._live()
        if self._capacity == self._length:
            return

        with telemetry.span(
            "buffer::shrink_to_fit",
            logger_name=_LOGGER_NAME,
            component="buffer",
            metadata={"from": self._capacity, "to": self._length},
        ) as handle:
            block = allocator.allocate(self._length + 1)
            copy_bytes(block, 0, old, self._length + 1)
            self._block = block
            self._capacity = self._length
            allocator.release(old)
            handle.add_metadata("released", old.size)

    def _ensure_capacity_for(self, desired: int) -> None:
        self._live()
        if desired <= self._capacity:
            return
        self.reserve(grow_capacity(self._capacity, desired))


def concat(lhs: Buffer, rhs: object) -> Buffer:
    """New buffer holding ``lhs`` followed by ``rhs``; ``lhs`` is untouched."""

    out = Buffer.copy_of(lhs)
    try:
        out.append(rhs)
    except Exception:
        out.release()
        raise
    return out


__all__ = ["Buffer", "concat"]
