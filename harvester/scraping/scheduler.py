"""
Bounded-concurrency worker pool draining a shared work list.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Generic, TypeVar

from harvester.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


class ClaimCursor:
    """
    Lock-guarded increment-and-fetch over `[0, total)`.
    """

    def __init__(self, total: int) -> None:
        self._total = max(0, total)
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> int | None:
        with self._lock:
            if self._next >= self._total:
                return None
            index = self._next
            self._next += 1
            return index


class WorkerPool(Generic[ItemT, ResultT]):
    """
    Runs `concurrency` workers, each looping claim -> handle -> delay until
    the cursor is exhausted.

    `run` returns results in input order once every worker has finished its
    last in-flight item.
    """

    def __init__(
        self,
        *,
        concurrency: int = 5,
        delay_ms_min: int = 250,
        delay_ms_max: int = 750,
        sleep: Callable[[float], None] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1.")
        if delay_ms_min < 0 or delay_ms_max < delay_ms_min:
            raise ValueError("Politeness delay bounds must satisfy 0 <= min <= max.")
        self._concurrency = concurrency
        self._delay_ms_min = delay_ms_min
        self._delay_ms_max = delay_ms_max
        self._sleep = sleep or time.sleep
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()

    def run(
        self,
        items: Sequence[ItemT],
        handler: Callable[[ItemT], ResultT],
        *,
        on_result: Callable[[int, ResultT], None] | None = None,
    ) -> list[ResultT]:
        cursor = ClaimCursor(len(items))
        results: list[ResultT | None] = [None] * len(items)
        worker_count = min(self._concurrency, len(items)) or 1

        def worker(worker_id: int) -> int:
            processed = 0
            while True:
                index = cursor.claim()
                if index is None:
                    break
                result = handler(items[index])
                results[index] = result
                if on_result is not None:
                    on_result(index, result)
                processed += 1
                self._politeness_delay()
            log_event(
                logger,
                logging.DEBUG,
                "worker_finished",
                worker_id=worker_id,
                processed=processed,
            )
            return processed

        with ThreadPoolExecutor(
            max_workers=worker_count,
            thread_name_prefix="harvest-worker",
        ) as executor:
            futures = [executor.submit(worker, worker_id) for worker_id in range(worker_count)]
            for future in futures:
                future.result()

        return [result for result in results if result is not None]

    def _politeness_delay(self) -> None:
        with self._rng_lock:
            delay_ms = self._rng.uniform(self._delay_ms_min, self._delay_ms_max)
        if delay_ms > 0:
            self._sleep(delay_ms / 1000.0)
