"""
Sticky proxy sessions with cookie continuity.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from requests.cookies import RequestsCookieJar

from harvester.scraping.logging_utils import log_event
from harvester.scraping.proxy import DirectProxyProvider, ProxyProvider, ProxyRoute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProxySession:
    """
    Handle for one egress identity.

    The handle itself is immutable. `cookies` is shared by every request made
    through the session; `http.cookiejar` guards its reads and writes with an
    internal lock, so workers holding the same session may use it
    concurrently.
    """

    id: int
    key: str
    route: ProxyRoute | None
    cookies: RequestsCookieJar = field(default_factory=RequestsCookieJar, compare=False, repr=False)

    @property
    def proxies(self) -> dict[str, str]:
        if self.route is None:
            return {}
        return self.route.as_requests_proxies()


class SessionManager:
    """
    Issues sticky sessions and rotates them on a page-count or forced trigger.

    All workers share one current session. It is replaced once it has served
    `session_page_limit` pages or when a caller asks for a fresh identity.
    Sessions are never evicted during a run.
    """

    def __init__(
        self,
        *,
        session_page_limit: int = 10,
        proxy_provider: ProxyProvider | None = None,
    ) -> None:
        if session_page_limit < 1:
            raise ValueError("session_page_limit must be at least 1.")
        self._session_page_limit = session_page_limit
        self._proxy_provider = proxy_provider or DirectProxyProvider()
        self._counter = 0
        self._current_id: int | None = None
        self._sessions: dict[int, ProxySession] = {}
        self._pages_served: dict[int, int] = {}
        self._lock = threading.Lock()

    @property
    def session_page_limit(self) -> int:
        return self._session_page_limit

    @property
    def sessions_created(self) -> int:
        with self._lock:
            return self._counter

    def pages_served(self, session_id: int) -> int:
        with self._lock:
            return self._pages_served.get(session_id, 0)

    def acquire(self, *, force_new: bool = False) -> ProxySession:
        """
        Return the session to use for the next page and count the page.
        """

        with self._lock:
            current_id = self._current_id
            exhausted = (
                current_id is not None
                and self._pages_served[current_id] >= self._session_page_limit
            )
            if current_id is None or force_new or exhausted:
                session = self._open_session()
                reason = "forced" if force_new else ("page_limit" if exhausted else "initial")
                log_event(
                    logger,
                    logging.INFO,
                    "session_rotated",
                    session_id=session.id,
                    previous_session_id=current_id,
                    reason=reason,
                    proxied=session.route is not None,
                )
            else:
                session = self._sessions[current_id]
            self._pages_served[session.id] += 1
            return session

    def _open_session(self) -> ProxySession:
        self._counter += 1
        session_id = self._counter
        key = f"session_{session_id}"
        session = ProxySession(
            id=session_id,
            key=key,
            route=self._proxy_provider.route_for(key),
        )
        self._sessions[session_id] = session
        self._pages_served[session_id] = 0
        self._current_id = session_id
        return session
