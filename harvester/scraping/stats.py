"""
Run-level success/failure tallies.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from harvester.domain.structured_data import ExtractionResult, RunStats


class RunAggregator:
    """
    Thread-safe counters fed by workers as each result completes.
    """

    def __init__(self, *, total_urls: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._total_urls = total_urls
        self._clock = clock
        self._started_at = clock()
        self._success_count = 0
        self._failure_count = 0
        self._lock = threading.Lock()

    def record(self, result: ExtractionResult) -> None:
        with self._lock:
            if result.succeeded:
                self._success_count += 1
            else:
                self._failure_count += 1

    def finish(self) -> RunStats:
        with self._lock:
            return RunStats(
                total_urls=self._total_urls,
                success_count=self._success_count,
                failure_count=self._failure_count,
                duration_seconds=round(self._clock() - self._started_at, 3),
            )
