"""
Shared harvest runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from harvester.scraping.errors import ErrorKind, ParseFailure


@dataclass(frozen=True)
class FetchAttemptResult:
    """
    Outcome of exactly one retrieval attempt.

    `status` is 0 when no response was received.
    """

    succeeded: bool
    status: int
    final_url: str
    body: str | None = None
    error_message: str | None = None
    error_kind: ErrorKind | None = None


@dataclass(frozen=True)
class ExtractionOutcome:
    """
    Structured blocks parsed from one document plus the selected entity.
    """

    blocks: tuple[Any, ...] = ()
    selected: dict[str, Any] | None = None
    parse_failures: tuple[ParseFailure, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AttemptOutcome:
    """
    One fetch + extract pass made by the item processor.
    """

    session_id: int
    fetch: FetchAttemptResult
    extraction: ExtractionOutcome | None = None

    @property
    def entity(self) -> dict[str, Any] | None:
        if self.extraction is None:
            return None
        return self.extraction.selected

    @property
    def error(self) -> str:
        if self.fetch.error_message:
            return self.fetch.error_message
        return f"status:{self.fetch.status}"

    @property
    def error_kind(self) -> ErrorKind:
        # a retrieved page with an empty body still counts as fetched
        if self.fetch.succeeded:
            return ErrorKind.NO_ENTITY_FOUND
        return self.fetch.error_kind or ErrorKind.FETCH_FAILURE
