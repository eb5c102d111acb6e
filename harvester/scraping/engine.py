"""
Structured-data harvesting engine.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import requests

from harvester.domain.structured_data import ExtractionResult, RunStats, WorkItem
from harvester.scraping.canonicalizer import UrlCanonicalizer
from harvester.scraping.config.models import HarvestSettings
from harvester.scraping.errors import ConfigurationError
from harvester.scraping.fetcher import FetchExecutor
from harvester.scraping.logging_utils import log_event
from harvester.scraping.parsing.jsonld import StructuredDataExtractor
from harvester.scraping.processor import ItemProcessor
from harvester.scraping.proxy import ProxyProvider, build_proxy_provider
from harvester.scraping.scheduler import WorkerPool
from harvester.scraping.sessions import SessionManager
from harvester.scraping.stats import RunAggregator
from harvester.scraping.storage import MemoryResultStorage, ResultStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HarvestRunReport:
    """
    Results in input order plus the run summary.
    """

    results: list[ExtractionResult]
    stats: RunStats


class StructuredDataHarvestEngine:
    """
    Wires canonicalizer, sessions, fetcher and extractor into a worker pool
    and records one result per input URL.
    """

    def __init__(
        self,
        *,
        settings: HarvestSettings,
        storage: ResultStorage | None = None,
        proxy_provider: ProxyProvider | None = None,
        canonicalizer: UrlCanonicalizer | None = None,
        fetcher: FetchExecutor | None = None,
        extractor: StructuredDataExtractor | None = None,
        http_session_factory: Callable[[], requests.Session] = requests.Session,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self._settings = settings
        self._storage = storage or MemoryResultStorage()
        self._proxy_provider = proxy_provider or build_proxy_provider(settings)
        self._canonicalizer = canonicalizer or UrlCanonicalizer(
            budget_seconds=settings.resolve_timeout_seconds,
            session_factory=http_session_factory,
        )
        self._fetcher = fetcher or FetchExecutor(
            timeout_seconds=settings.timeout_seconds,
            user_agent=settings.user_agent,
            session_factory=http_session_factory,
        )
        self._extractor = extractor or StructuredDataExtractor(target_types=settings.target_types)
        self._sleep = sleep

    def run(self, urls: Sequence[str]) -> HarvestRunReport:
        items = self._build_work_items(urls)

        session_manager = SessionManager(
            session_page_limit=self._settings.session_page_limit,
            proxy_provider=self._proxy_provider,
        )
        processor = ItemProcessor(
            canonicalizer=self._canonicalizer,
            session_manager=session_manager,
            fetcher=self._fetcher,
            extractor=self._extractor,
        )
        pool: WorkerPool[WorkItem, ExtractionResult] = WorkerPool(
            concurrency=self._settings.concurrency,
            delay_ms_min=self._settings.delay_ms_min,
            delay_ms_max=self._settings.delay_ms_max,
            sleep=self._sleep,
        )
        aggregator = RunAggregator(total_urls=len(items))

        def on_result(index: int, result: ExtractionResult) -> None:
            aggregator.record(result)
            try:
                self._storage.store_result(result)
            except Exception as exc:
                log_event(
                    logger,
                    logging.ERROR,
                    "result_store_failed",
                    index=index,
                    url=result.original_url,
                    error=f"{type(exc).__name__}: {exc}",
                )

        log_event(
            logger,
            logging.INFO,
            "run_started",
            total_urls=len(items),
            concurrency=self._settings.concurrency,
            session_page_limit=self._settings.session_page_limit,
        )
        try:
            results = pool.run(items, processor.process, on_result=on_result)
        finally:
            self._fetcher.close()

        stats = aggregator.finish()
        self._storage.store_run_stats(stats)
        log_event(
            logger,
            logging.INFO,
            "run_completed",
            sessions_created=session_manager.sessions_created,
            **stats.to_record(),
        )
        return HarvestRunReport(results=results, stats=stats)

    @staticmethod
    def _build_work_items(urls: Sequence[str]) -> list[WorkItem]:
        cleaned = [url.strip() for url in urls if isinstance(url, str) and url.strip()]
        if not cleaned:
            raise ConfigurationError("No URLs to harvest: provide startUrls or url.")
        return [WorkItem(index=index, original_url=url) for index, url in enumerate(cleaned)]
