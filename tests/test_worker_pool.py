"""
tests/test_worker_pool.py

Claim cursor coverage and politeness delays of the worker pool.
"""

from __future__ import annotations

import random
import threading
import time
from collections import Counter

import pytest

from harvester.scraping.scheduler import ClaimCursor, WorkerPool


def _no_sleep(seconds: float) -> None:
    return None


@pytest.mark.parametrize("concurrency", [1, 2, 5, 16])
@pytest.mark.parametrize("total", [0, 1, 7, 50])
def test_every_index_claimed_exactly_once(concurrency: int, total: int) -> None:
    claimed: list[int] = []
    lock = threading.Lock()

    def handler(item: int) -> int:
        time.sleep(0.0005)
        with lock:
            claimed.append(item)
        return item * 10

    pool: WorkerPool[int, int] = WorkerPool(
        concurrency=concurrency,
        delay_ms_min=0,
        delay_ms_max=0,
        sleep=_no_sleep,
    )
    results = pool.run(list(range(total)), handler)

    assert Counter(claimed) == Counter(range(total))
    assert results == [item * 10 for item in range(total)]


def test_on_result_receives_index_and_result() -> None:
    seen: dict[int, str] = {}
    lock = threading.Lock()

    def on_result(index: int, result: str) -> None:
        with lock:
            seen[index] = result

    pool: WorkerPool[str, str] = WorkerPool(concurrency=3, delay_ms_min=0, delay_ms_max=0)
    pool.run(["a", "b", "c", "d"], str.upper, on_result=on_result)

    assert seen == {0: "A", 1: "B", 2: "C", 3: "D"}


def test_politeness_delay_within_bounds_after_each_item() -> None:
    sleeps: list[float] = []
    lock = threading.Lock()

    def record_sleep(seconds: float) -> None:
        with lock:
            sleeps.append(seconds)

    pool: WorkerPool[int, int] = WorkerPool(
        concurrency=2,
        delay_ms_min=250,
        delay_ms_max=750,
        sleep=record_sleep,
        rng=random.Random(7),
    )
    pool.run(list(range(6)), lambda item: item)

    assert len(sleeps) == 6
    assert all(0.25 <= seconds <= 0.75 for seconds in sleeps)


def test_handler_exception_propagates() -> None:
    def handler(item: int) -> int:
        if item == 2:
            raise RuntimeError("bad item")
        return item

    pool: WorkerPool[int, int] = WorkerPool(concurrency=2, delay_ms_min=0, delay_ms_max=0)

    with pytest.raises(RuntimeError):
        pool.run([0, 1, 2, 3], handler)


@pytest.mark.parametrize(
    ("kwargs"),
    [
        {"concurrency": 0},
        {"delay_ms_min": -1},
        {"delay_ms_min": 500, "delay_ms_max": 100},
    ],
)
def test_invalid_pool_configuration(kwargs: dict[str, int]) -> None:
    with pytest.raises(ValueError):
        WorkerPool(**kwargs)


def test_claim_cursor_exhausts() -> None:
    cursor = ClaimCursor(3)

    assert [cursor.claim() for _ in range(5)] == [0, 1, 2, None, None]


def test_claim_cursor_under_contention() -> None:
    cursor = ClaimCursor(1000)
    claimed: list[int] = []
    lock = threading.Lock()

    def drain() -> None:
        while True:
            index = cursor.claim()
            if index is None:
                return
            with lock:
                claimed.append(index)

    threads = [threading.Thread(target=drain) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(claimed) == list(range(1000))
