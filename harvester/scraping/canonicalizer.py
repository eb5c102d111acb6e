"""
Redirect resolution for short or redirecting input URLs.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import requests

from harvester.scraping.errors import ErrorKind
from harvester.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionStrategy:
    """
    One way of asking the origin where a URL ends up.
    """

    name: str
    resolve: Callable[[requests.Session, str, float], str | None]


def _resolve_with_head(http: requests.Session, url: str, timeout: float) -> str | None:
    response = http.head(url, allow_redirects=True, timeout=timeout)
    try:
        return response.url or None
    finally:
        response.close()


def _resolve_with_get(http: requests.Session, url: str, timeout: float) -> str | None:
    # Body is never read; streaming keeps the download to the headers.
    response = http.get(url, allow_redirects=True, timeout=timeout, stream=True)
    try:
        return response.url or None
    finally:
        response.close()


DEFAULT_STRATEGIES: tuple[ResolutionStrategy, ...] = (
    ResolutionStrategy(name="head", resolve=_resolve_with_head),
    ResolutionStrategy(name="get", resolve=_resolve_with_get),
)


class UrlCanonicalizer:
    """
    Resolves a URL to its final destination within one shared time budget.

    Strategies are tried in order and the first resolved location wins. If
    every strategy fails, or the budget runs out, the input URL is returned
    unchanged. `canonicalize` never raises.
    """

    def __init__(
        self,
        *,
        budget_seconds: float = 8.0,
        strategies: Sequence[ResolutionStrategy] = DEFAULT_STRATEGIES,
        session_factory: Callable[[], requests.Session] = requests.Session,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._budget_seconds = budget_seconds
        self._strategies = tuple(strategies)
        self._session_factory = session_factory
        self._clock = clock

    def canonicalize(self, url: str) -> str:
        deadline = self._clock() + self._budget_seconds
        http = self._session_factory()
        try:
            for strategy in self._strategies:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    log_event(
                        logger,
                        logging.WARNING,
                        "url_resolution_timeout",
                        url=url,
                        strategy=strategy.name,
                        budget_seconds=self._budget_seconds,
                        error_kind=ErrorKind.RESOLUTION_TIMEOUT.value,
                    )
                    break
                try:
                    resolved = strategy.resolve(http, url, remaining)
                except requests.Timeout as exc:
                    log_event(
                        logger,
                        logging.WARNING,
                        "url_resolution_timeout",
                        url=url,
                        strategy=strategy.name,
                        error=str(exc),
                        error_kind=ErrorKind.RESOLUTION_TIMEOUT.value,
                    )
                    continue
                except requests.RequestException as exc:
                    log_event(
                        logger,
                        logging.WARNING,
                        "url_resolution_failed",
                        url=url,
                        strategy=strategy.name,
                        error=str(exc),
                    )
                    continue

                if resolved:
                    if resolved != url:
                        log_event(
                            logger,
                            logging.INFO,
                            "url_resolved",
                            url=url,
                            resolved_url=resolved,
                            strategy=strategy.name,
                        )
                    return resolved
        finally:
            http.close()
        return url
