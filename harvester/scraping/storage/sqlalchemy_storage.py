"""
SQLAlchemy-backed storage implementation for harvest results.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from harvester.domain.structured_data import ExtractionResult, RunStats
from harvester.repositories.scrape_result_repository import ScrapeResultRepository
from harvester.scraping.storage.base import ResultStorage


class SQLAlchemyResultStorage(ResultStorage):
    """
    Buffers results and writes them in batches through the repository.

    Each flush opens its own session from `session_factory`, so workers never
    share a live `Session`.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        batch_size: int = 100,
        run_id: uuid.UUID | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._batch_size = max(1, batch_size)
        self.run_id = run_id or uuid.uuid4()
        self._pending: list[ExtractionResult] = []
        self._lock = threading.Lock()

    def store_result(self, result: ExtractionResult) -> None:
        with self._lock:
            self._pending.append(result)
            if len(self._pending) >= self._batch_size:
                self._flush_locked()

    def store_run_stats(self, stats: RunStats) -> None:
        with self._lock:
            self._flush_locked()
            with self._session_factory() as session:
                try:
                    ScrapeResultRepository(session).insert_run(run_id=self.run_id, stats=stats)
                    session.commit()
                except SQLAlchemyError:
                    session.rollback()
                    raise

    def flush(self) -> int:
        with self._lock:
            return self._flush_locked()

    def _flush_locked(self) -> int:
        if not self._pending:
            return 0
        rows = list(self._pending)
        with self._session_factory() as session:
            try:
                inserted = ScrapeResultRepository(session).bulk_insert(rows, run_id=self.run_id)
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise
        self._pending.clear()
        return inserted
