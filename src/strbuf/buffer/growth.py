"""Amortised capacity growth for push/append."""

from __future__ import annotations

from .allocator import MAX_ALLOCATION
from .errors import AllocationFailure

# One slot of every allocation belongs to the terminator.
MAX_CAPACITY = MAX_ALLOCATION - 1
GROWTH_OFFSET = 8


def grow_capacity(current: int, desired: int) -> int:
    """Return the capacity to reserve so that ``desired`` bytes fit.

    A first allocation gets exactly ``desired``; afterwards capacity grows
    to ``current * 3 // 2 + GROWTH_OFFSET``, or to ``desired`` when that is
    still not enough.
    """

    if desired <= current:
        return current
    if desired > MAX_CAPACITY:
        raise AllocationFailure(
            f"capacity {desired} exceeds the maximum of {MAX_CAPACITY}",
            requested=desired,
        )
    if current == 0:
        candidate = desired
    else:
        candidate = current * 3 // 2 + GROWTH_OFFSET
    return min(max(candidate, desired), MAX_CAPACITY)


__all__ = ["GROWTH_OFFSET", "MAX_CAPACITY", "grow_capacity"]
