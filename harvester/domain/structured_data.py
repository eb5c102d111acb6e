"""
harvester/domain/structured_data.py

Domain models for structured-data harvesting runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from harvester.scraping.errors import ErrorKind, ParseFailure


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WorkItem:
    """
    One input URL, claimed and processed exactly once.
    """

    index: int
    original_url: str


@dataclass(frozen=True)
class ExtractionResult:
    """
    Outcome for one input URL.

    `error` is None only when an entity was selected. A fetched page without
    any structured blocks keeps `structured_blocks` empty, while a page whose
    blocks did not match keeps them populated with `selected_entity` None.
    """

    original_url: str
    final_url: str
    timestamp: datetime = field(default_factory=_utcnow)
    structured_blocks: tuple[Any, ...] = ()
    selected_entity: dict[str, Any] | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    attempts: int = 0
    session_ids: tuple[int, ...] = ()
    parse_failures: tuple[ParseFailure, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.selected_entity is not None

    @property
    def fetched(self) -> bool:
        """
        Whether the final attempt retrieved a document at all.
        """

        return self.error_kind not in {ErrorKind.FETCH_FAILURE, ErrorKind.INTERNAL_ERROR}

    def to_record(self) -> dict[str, Any]:
        """
        Output record shape persisted per input URL.
        """

        return {
            "url": self.original_url,
            "finalUrl": self.final_url,
            "scrapedAt": self.timestamp.isoformat(),
            "jsonLdData": list(self.structured_blocks),
            "hotelInfo": self.selected_entity,
            "error": self.error,
        }


@dataclass(frozen=True)
class RunStats:
    """
    Aggregate statistics computed once the worker pool drains.
    """

    total_urls: int
    success_count: int
    failure_count: int
    duration_seconds: float

    def to_record(self) -> dict[str, Any]:
        return {
            "type": "run-stats",
            "total_urls": self.total_urls,
            "successes": self.success_count,
            "failures": self.failure_count,
            "run_duration_seconds": self.duration_seconds,
        }
