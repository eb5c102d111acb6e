"""
harvester/repositories/scrape_result_repository.py

Persistence layer for harvest results and run summaries.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from db.models.harvest_run import HarvestRunRecord
from db.models.scrape_result import ScrapeResultRecord
from harvester.domain.structured_data import ExtractionResult, RunStats
from harvester.scraping.parsing.lodging import entity_name, summarize_lodging


class ScrapeResultRepository:
    """
    Repository for batch persistence of harvest results.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def bulk_insert(self, rows: Sequence[ExtractionResult], *, run_id: uuid.UUID) -> int:
        """
        Insert result rows in one executemany round-trip.
        """

        if not rows:
            return 0

        payloads: list[dict[str, Any]] = [
            {
                "id": uuid.uuid4(),
                "run_id": run_id,
                "url": row.original_url,
                "final_url": row.final_url,
                "scraped_at": row.timestamp,
                "jsonld_data": list(row.structured_blocks),
                "entity": row.selected_entity,
                "entity_name": entity_name(row.selected_entity),
                "entity_summary": summarize_lodging(row.selected_entity),
                "error": row.error,
                "error_kind": row.error_kind.value if row.error_kind else None,
                "attempts": row.attempts,
            }
            for row in rows
        ]
        self._session.execute(insert(ScrapeResultRecord), payloads)
        return len(payloads)

    def insert_run(self, *, run_id: uuid.UUID, stats: RunStats) -> HarvestRunRecord:
        record = HarvestRunRecord(
            id=run_id,
            total_urls=stats.total_urls,
            successes=stats.success_count,
            failures=stats.failure_count,
            run_duration_seconds=stats.duration_seconds,
        )
        self._session.add(record)
        self._session.flush()
        return record

    def list_for_run(self, run_id: uuid.UUID) -> list[ScrapeResultRecord]:
        stmt = (
            select(ScrapeResultRecord)
            .where(ScrapeResultRecord.run_id == run_id)
            .order_by(ScrapeResultRecord.scraped_at)
        )
        return list(self._session.scalars(stmt).all())
