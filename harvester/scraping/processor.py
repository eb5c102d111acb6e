"""
Per-URL orchestration: canonicalize, fetch, extract, escalate once.
"""

from __future__ import annotations

import logging

from harvester.domain.structured_data import ExtractionResult, WorkItem
from harvester.scraping.canonicalizer import UrlCanonicalizer
from harvester.scraping.errors import ErrorKind
from harvester.scraping.fetcher import FetchExecutor
from harvester.scraping.logging_utils import log_event
from harvester.scraping.parsing.jsonld import StructuredDataExtractor
from harvester.scraping.sessions import SessionManager
from harvester.scraping.types import AttemptOutcome

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


class ItemProcessor:
    """
    Two-state retry machine for one work item.

    Attempt 1 reuses the current sticky session. Anything short of a matched
    entity escalates to attempt 2 on a freshly rotated session, whose outcome
    is final. No item is fetched more than `MAX_ATTEMPTS` times.
    """

    def __init__(
        self,
        *,
        canonicalizer: UrlCanonicalizer,
        session_manager: SessionManager,
        fetcher: FetchExecutor,
        extractor: StructuredDataExtractor,
    ) -> None:
        self._canonicalizer = canonicalizer
        self._session_manager = session_manager
        self._fetcher = fetcher
        self._extractor = extractor

    def process(self, item: WorkItem) -> ExtractionResult:
        try:
            return self._process(item)
        except Exception as exc:
            message = f"{type(exc).__name__}: {exc}"
            log_event(
                logger,
                logging.ERROR,
                "item_processing_failed",
                index=item.index,
                url=item.original_url,
                error=message,
            )
            return ExtractionResult(
                original_url=item.original_url,
                final_url=item.original_url,
                error=message,
                error_kind=ErrorKind.INTERNAL_ERROR,
            )

    def _process(self, item: WorkItem) -> ExtractionResult:
        target_url = self._canonicalizer.canonicalize(item.original_url)

        attempts = [self._attempt(target_url, force_new=False)]
        if attempts[0].entity is None:
            log_event(
                logger,
                logging.INFO,
                "item_escalated",
                index=item.index,
                url=target_url,
                session_id=attempts[0].session_id,
                reason=attempts[0].error,
            )
            attempts.append(self._attempt(target_url, force_new=True))

        result = self._build_result(item=item, attempts=attempts)
        log_event(
            logger,
            logging.INFO,
            "item_completed",
            index=item.index,
            url=item.original_url,
            final_url=result.final_url,
            attempts=result.attempts,
            session_ids=list(result.session_ids),
            blocks=len(result.structured_blocks),
            succeeded=result.succeeded,
            error=result.error,
        )
        return result

    def _attempt(self, url: str, *, force_new: bool) -> AttemptOutcome:
        session = self._session_manager.acquire(force_new=force_new)
        fetch = self._fetcher.fetch(url=url, session=session)
        if not fetch.succeeded or not fetch.body:
            return AttemptOutcome(session_id=session.id, fetch=fetch)
        extraction = self._extractor.extract(fetch.body, source_url=fetch.final_url)
        return AttemptOutcome(session_id=session.id, fetch=fetch, extraction=extraction)

    @staticmethod
    def _build_result(*, item: WorkItem, attempts: list[AttemptOutcome]) -> ExtractionResult:
        final = attempts[-1]
        extraction = final.extraction
        found = final.entity is not None
        return ExtractionResult(
            original_url=item.original_url,
            final_url=final.fetch.final_url,
            structured_blocks=extraction.blocks if extraction else (),
            selected_entity=final.entity,
            error=None if found else final.error,
            error_kind=None if found else final.error_kind,
            attempts=len(attempts),
            session_ids=tuple(attempt.session_id for attempt in attempts),
            parse_failures=extraction.parse_failures if extraction else (),
        )
