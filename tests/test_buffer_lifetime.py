from __future__ import annotations

import pytest

from strbuf.buffer import (
    AllocationFailure,
    Buffer,
    BufferReleasedError,
    OutOfRange,
    allocator,
    get_heap,
)


def fail_allocation(size: int) -> allocator.Allocation:
    raise AllocationFailure("simulated allocation failure", requested=size)


def snapshot(buf: Buffer) -> tuple[bytes, int, int, int]:
    return buf.to_bytes(), buf.length, buf.capacity, buf.address


def test_release_happens_exactly_once() -> None:
    heap = get_heap()
    before = heap.stats()

    buf = Buffer(b"abc")
    buf.release()
    buf.release()

    after = heap.stats()
    assert after.allocations - before.allocations == 1
    assert after.releases - before.releases == 1
    assert after.live_bytes == before.live_bytes
    assert buf.released


def test_context_manager_releases_on_exit() -> None:
    heap = get_heap()
    before = heap.stats().live_blocks

    with Buffer(b"scoped") as buf:
        assert heap.stats().live_blocks == before + 1
        buf.append(b" more")

    assert heap.stats().live_blocks == before
    assert buf.released


def test_garbage_collected_buffer_releases_its_allocation() -> None:
    heap = get_heap()
    before = heap.stats()

    buf = Buffer(b"dropped")
    del buf

    after = heap.stats()
    assert after.releases - before.releases == 1
    assert after.live_blocks == before.live_blocks


def test_released_buffer_rejects_use() -> None:
    buf = Buffer(b"gone")
    buf.release()

    with pytest.raises(BufferReleasedError):
        buf.append(b"x")
    with pytest.raises(BufferReleasedError):
        buf.to_bytes()
    with pytest.raises(BufferReleasedError):
        len(buf)
    assert repr(buf) == "Buffer(<released>)"


def test_releasing_a_moved_from_buffer_leaves_the_shared_empty_block() -> None:
    heap = get_heap()
    a = Buffer(b"x")
    b = a.move()
    before = heap.stats()

    a.release()

    assert heap.stats() == before
    assert not heap.empty.released
    assert b == b"x"


def test_moved_from_buffers_cannot_corrupt_each_other() -> None:
    a = Buffer(b"x")
    a.move()
    c = Buffer(b"y")
    c.move()

    with pytest.raises(OutOfRange):
        a[0] = 65

    for buf in (a, c):
        assert buf[buf.length] == 0
        assert bytes(buf.view()) == b"\0"
        assert buf.c_str() == b"\0"


def test_moved_from_buffer_still_clears_and_assigns() -> None:
    heap = get_heap()
    a = Buffer(b"x")
    a.move()
    before = heap.stats().allocations

    a.clear()
    a.assign(b"")
    a.append(b"")
    a[0] = 0

    assert heap.stats().allocations == before
    assert a.length == 0
    a.assign(b"grown")
    assert a == b"grown"
    assert a.address != heap.empty.address


def test_swap_exchanges_state_without_allocating() -> None:
    heap = get_heap()
    a = Buffer(b"first")
    a.reserve(16)
    b = Buffer(b"second")
    state_a, state_b = snapshot(a), snapshot(b)
    before = heap.stats().allocations

    a.swap(b)

    assert heap.stats().allocations == before
    assert snapshot(a) == state_b
    assert snapshot(b) == state_a


def test_copy_assign_replaces_content_and_releases_old_block() -> None:
    heap = get_heap()
    target = Buffer(b"old content")
    source = Buffer(b"new")
    before = heap.stats()

    target.copy_assign(source)

    after = heap.stats()
    assert target == b"new"
    assert target.capacity == 3
    assert source == b"new"
    assert after.allocations - before.allocations == 1
    assert after.releases - before.releases == 1


def test_copy_assign_to_self_keeps_content() -> None:
    buf = Buffer(b"self")
    buf.copy_assign(buf)
    assert buf == b"self"


def test_move_assign_takes_source_state() -> None:
    heap = get_heap()
    target = Buffer(b"old")
    source = Buffer(b"moved in")
    address = source.address
    before = heap.stats()

    target.move_assign(source)

    after = heap.stats()
    assert target == b"moved in"
    assert target.address == address
    assert source.length == 0
    assert source.capacity == 0
    assert after.allocations == before.allocations
    assert after.releases - before.releases == 1

    source.append(b"reuse")
    assert source == b"reuse"


def test_move_assign_to_self_keeps_content() -> None:
    buf = Buffer(b"self")
    buf.reserve(10)

    buf.move_assign(buf)

    assert buf == b"self"
    assert buf.capacity == 10


def test_failed_copy_assign_leaves_target_unchanged(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    target = Buffer(b"keep me")
    target.reserve(32)
    source = Buffer(b"replacement")
    state = snapshot(target)
    monkeypatch.setattr(allocator, "allocate", fail_allocation)

    with pytest.raises(AllocationFailure):
        target.copy_assign(source)

    assert snapshot(target) == state
    assert source == b"replacement"


@pytest.mark.parametrize(
    "operation",
    [
        lambda buf: buf.reserve(100),
        lambda buf: buf.shrink_to_fit(),
        lambda buf: buf.append(b"x" * 50),
        lambda buf: buf.assign(b"y" * 50),
    ],
    ids=["reserve", "shrink_to_fit", "append", "assign"],
)
def test_failed_reallocation_leaves_buffer_unchanged(
    monkeypatch: pytest.MonkeyPatch, operation
) -> None:
    buf = Buffer(b"abcdef")
    buf.reserve(10)
    state = snapshot(buf)
    monkeypatch.setattr(allocator, "allocate", fail_allocation)

    with pytest.raises(AllocationFailure):
        operation(buf)

    assert snapshot(buf) == state
    assert buf[buf.length] == 0


def test_failed_push_growth_leaves_buffer_unchanged(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    buf = Buffer(b"full")
    state = snapshot(buf)
    monkeypatch.setattr(allocator, "allocate", fail_allocation)

    with pytest.raises(AllocationFailure):
        buf.push(b"!")

    assert snapshot(buf) == state


def test_heap_limit_rejects_oversized_allocations(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    heap = get_heap()
    monkeypatch.setattr(heap, "limit", heap.stats().live_bytes + 16)

    small = Buffer(b"fits")
    with pytest.raises(AllocationFailure) as excinfo:
        Buffer(b"x" * 32)

    assert excinfo.value.requested == 33
    assert small == b"fits"


def test_move_does_not_allocate_even_when_heap_is_exhausted(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    a = Buffer(b"precious")
    monkeypatch.setattr(allocator, "allocate", fail_allocation)

    b = a.move()
    a.move_assign(b)

    assert a == b"precious"
    assert b.length == 0
