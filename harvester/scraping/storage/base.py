"""
Storage layer interfaces for harvest results.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from harvester.domain.structured_data import ExtractionResult, RunStats


class ResultStorage(ABC):
    """
    Sink for per-URL results and the final run summary.

    Implementations are called from concurrent workers and must serialize
    their own writes.
    """

    @abstractmethod
    def store_result(self, result: ExtractionResult) -> None:
        """
        Persist one per-URL result.
        """

    @abstractmethod
    def store_run_stats(self, stats: RunStats) -> None:
        """
        Persist the run summary; called once, after every result.
        """


class MemoryResultStorage(ResultStorage):
    def __init__(self) -> None:
        self.results: list[ExtractionResult] = []
        self.run_stats: RunStats | None = None
        self._lock = threading.Lock()

    def store_result(self, result: ExtractionResult) -> None:
        with self._lock:
            self.results.append(result)

    def store_run_stats(self, stats: RunStats) -> None:
        with self._lock:
            self.run_stats = stats


class FanOutResultStorage(ResultStorage):
    """
    Forwards every write to each wrapped storage in order.
    """

    def __init__(self, storages: list[ResultStorage]) -> None:
        self._storages = list(storages)

    def store_result(self, result: ExtractionResult) -> None:
        for storage in self._storages:
            storage.store_result(result)

    def store_run_stats(self, stats: RunStats) -> None:
        for storage in self._storages:
            storage.store_run_stats(stats)
