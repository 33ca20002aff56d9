"""Demo programs for the hand-rolled buffer and the C-string primitives."""

from __future__ import annotations

from typing import Optional, Sequence

from strbuf.buffer import (
    Buffer,
    get_heap,
    string_cat,
    string_copy,
    string_duplicate,
    string_length,
)

from .runner import Demo, hr, run_cli

SECTION = "Hand-rolled String & C-string utils"


def demo_basics() -> None:
    hr("C-string basics")
    s = bytearray(b"Hello\0")
    print(f"{s[: string_length(s)].decode('ascii')} (len={string_length(s)})")


def demo_rule_of_five() -> None:
    hr("Rule of Five sanity")

    a = Buffer(b"hello")
    b = a.copy()
    c = a.move()

    d = Buffer()
    d.copy_assign(b)

    e = Buffer()
    e.move_assign(b)

    for name, value in (("a", a), ("b", b), ("c", c), ("d", d), ("e", e)):
        print(f"{name}: {value.to_bytes().decode('ascii')!r} (len={value.length})")


def demo_append_and_capacity() -> None:
    hr("append & capacity")

    s = Buffer(b"ab")
    s.reserve(8)
    s.append(b"cd")
    s.push(b"e")
    print(f"{s.to_bytes().decode('ascii')} (size={s.length}, cap={s.capacity})")

    s.shrink_to_fit()
    print(f"after shrink cap={s.capacity}")


def demo_cstr_utils() -> None:
    hr("cstr utils")

    dup = string_duplicate(b"World")
    try:
        buf = bytearray(32)
        string_copy(buf, b"Hello ")
        string_cat(buf, dup.cdata)
        text = bytes(buf[: string_length(buf)]).decode("ascii")
        print(f"{text} (len={string_length(buf)})")
    finally:
        get_heap().release(dup)


def demo_growth(count: int = 100) -> None:
    hr("growth")

    s = Buffer()
    before = get_heap().stats().allocations
    capacities = [s.capacity]
    for i in range(count):
        s.push(ord("a") + i % 26)
        if s.capacity != capacities[-1]:
            capacities.append(s.capacity)
    reallocations = get_heap().stats().allocations - before
    print(f"pushed {s.length} bytes with {reallocations} reallocations")
    print("capacities: " + " -> ".join(str(c) for c in capacities))


DEMOS: tuple[Demo, ...] = (
    Demo("basics", "C-string basics", demo_basics),
    Demo("rule_of_five", "Copy/move/assign correctness", demo_rule_of_five),
    Demo(
        "append_capacity",
        "append/push/reserve/shrink_to_fit",
        demo_append_and_capacity,
    ),
    Demo(
        "cstr_utils",
        "string_copy/string_cat/string_length/string_duplicate",
        demo_cstr_utils,
    ),
    Demo("growth", "Capacity growth under repeated push", demo_growth),
)


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run_cli(SECTION, DEMOS, argv)


if __name__ == "__main__":  # pragma: no cover - manual demo
    raise SystemExit(main())
