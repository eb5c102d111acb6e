"""
Single-attempt page retrieval through a proxy session.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping

import requests

from harvester.scraping.config.models import DEFAULT_USER_AGENT
from harvester.scraping.errors import ErrorKind
from harvester.scraping.logging_utils import log_event
from harvester.scraping.sessions import ProxySession
from harvester.scraping.types import FetchAttemptResult

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.8",
    "Connection": "keep-alive",
}


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 400


class FetchExecutor:
    """
    Performs exactly one GET per call and reports every outcome as a
    `FetchAttemptResult`. Nothing is retried here and no exception escapes.

    One pooled `requests.Session` is kept per proxy session, bound to that
    session's cookie jar and proxies, so consecutive pages on the same
    identity reuse connections. `close()` releases them.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        headers: Mapping[str, str] | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._session_factory = session_factory
        self.request_headers = {"User-Agent": user_agent, **DEFAULT_HEADERS, **(headers or {})}
        self._http_sessions: dict[int, requests.Session] = {}
        self._lock = threading.Lock()

    def fetch(self, *, url: str, session: ProxySession) -> FetchAttemptResult:
        """
        Retrieve `url` through `session`, following redirects.

        Cookies set by the server, including along the redirect chain, land in
        the session's cookie jar.
        """

        http = self._http_for(session)
        started = time.monotonic()
        try:
            response = http.get(
                url,
                headers=self.request_headers,
                timeout=self._timeout_seconds,
                allow_redirects=True,
            )
        except requests.Timeout as exc:
            return self._failure(
                url=url,
                session=session,
                message=f"timeout after {self._timeout_seconds}s: {exc}",
                started=started,
            )
        except requests.RequestException as exc:
            return self._failure(url=url, session=session, message=str(exc), started=started)

        elapsed = time.monotonic() - started
        status = response.status_code
        final_url = response.url or url
        if not is_success_status(status):
            log_event(
                logger,
                logging.WARNING,
                "fetch_failed",
                url=url,
                final_url=final_url,
                session_id=session.id,
                status_code=status,
                elapsed_seconds=round(elapsed, 3),
            )
            return FetchAttemptResult(
                succeeded=False,
                status=status,
                final_url=final_url,
                error_message=f"status:{status}",
                error_kind=ErrorKind.FETCH_FAILURE,
            )

        log_event(
            logger,
            logging.INFO,
            "fetch_completed",
            url=url,
            final_url=final_url,
            session_id=session.id,
            status_code=status,
            elapsed_seconds=round(elapsed, 3),
        )
        return FetchAttemptResult(
            succeeded=True,
            status=status,
            final_url=final_url,
            body=response.text or None,
        )

    def close(self) -> None:
        with self._lock:
            http_sessions = list(self._http_sessions.values())
            self._http_sessions.clear()
        for http in http_sessions:
            http.close()

    def _http_for(self, session: ProxySession) -> requests.Session:
        with self._lock:
            http = self._http_sessions.get(session.id)
            if http is None:
                http = self._session_factory()
                http.cookies = session.cookies
                http.proxies.update(session.proxies)
                self._http_sessions[session.id] = http
            return http

    @staticmethod
    def _failure(
        *,
        url: str,
        session: ProxySession,
        message: str,
        started: float,
    ) -> FetchAttemptResult:
        elapsed = time.monotonic() - started
        log_event(
            logger,
            logging.WARNING,
            "fetch_failed",
            url=url,
            session_id=session.id,
            error=message,
            elapsed_seconds=round(elapsed, 3),
        )
        return FetchAttemptResult(
            succeeded=False,
            status=0,
            final_url=url,
            error_message=message,
            error_kind=ErrorKind.FETCH_FAILURE,
        )
