"""
harvester/services/harvest_service.py

Service orchestration for structured-data harvest runs.
"""

from __future__ import annotations

from harvester.schemas.run_input import RunInput
from harvester.scraping.config import HarvestSettings, apply_overrides, get_harvest_settings
from harvester.scraping.engine import HarvestRunReport, StructuredDataHarvestEngine
from harvester.scraping.errors import ConfigurationError
from harvester.scraping.storage import ResultStorage


class HarvestService:
    """
    Merges run input over environment settings and runs the engine.
    """

    def __init__(self, settings: HarvestSettings | None = None) -> None:
        self._settings = settings or get_harvest_settings()

    def settings_for(self, run_input: RunInput) -> HarvestSettings:
        return apply_overrides(
            self._settings,
            concurrency=run_input.concurrency,
            session_page_limit=run_input.session_pages,
            timeout_seconds=run_input.timeout_secs,
            delay_ms_min=run_input.delay_ms_min,
            delay_ms_max=run_input.delay_ms_max,
        )

    def run(
        self,
        run_input: RunInput,
        *,
        storage: ResultStorage | None = None,
    ) -> HarvestRunReport:
        urls = run_input.resolved_urls()
        if not urls:
            raise ConfigurationError("No URLs to harvest: provide startUrls or url.")

        engine = StructuredDataHarvestEngine(
            settings=self.settings_for(run_input),
            storage=storage,
        )
        return engine.run(urls)
