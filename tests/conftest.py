from __future__ import annotations

import gc
from typing import Iterator

import pytest


@pytest.fixture(autouse=True)
def collect_garbage() -> Iterator[None]:
    # Heap counters are compared before/after; flush blocks kept alive by
    # reference cycles from earlier tests first.
    gc.collect()
    yield
