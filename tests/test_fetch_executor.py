from __future__ import annotations

import unittest

import requests

from harvester.scraping.errors import ErrorKind
from harvester.scraping.fetcher import FetchExecutor, is_success_status
from harvester.scraping.proxy import TemplateProxyProvider
from harvester.scraping.sessions import SessionManager
from tests.http_fakes import FakeHttp, FakeResponse


class TestFetchExecutor(unittest.TestCase):
    def setUp(self) -> None:
        self.manager = SessionManager(
            session_page_limit=10,
            proxy_provider=TemplateProxyProvider("http://u-{session}:pw@proxy.test:8000"),
        )

    def _executor(self, http: FakeHttp) -> FetchExecutor:
        return FetchExecutor(timeout_seconds=3.0, session_factory=http)

    def test_success_returns_body_and_final_url(self) -> None:
        http = FakeHttp(
            lambda method, url, n: FakeResponse(
                status_code=200,
                url="https://hotel.test/final",
                text="<html>ok</html>",
            )
        )

        result = self._executor(http).fetch(url="https://hotel.test/h", session=self.manager.acquire())

        self.assertTrue(result.succeeded)
        self.assertEqual(result.status, 200)
        self.assertEqual(result.final_url, "https://hotel.test/final")
        self.assertEqual(result.body, "<html>ok</html>")
        self.assertIsNone(result.error_message)
        self.assertEqual(http.sessions_opened, 1)

    def test_sends_fixed_headers_proxy_and_timeout(self) -> None:
        http = FakeHttp(lambda method, url, n: FakeResponse(text="x"))

        self._executor(http).fetch(url="https://hotel.test/h", session=self.manager.acquire())

        call = http.calls[0]
        headers = call.kwargs["headers"]
        self.assertIn("Chrome/124.0.0.0", headers["User-Agent"])
        self.assertEqual(headers["Accept-Language"], "en-US,en;q=0.8")
        self.assertEqual(headers["Connection"], "keep-alive")
        self.assertEqual(call.kwargs["timeout"], 3.0)
        self.assertTrue(call.kwargs["allow_redirects"])
        self.assertEqual(call.proxies["https"], "http://u-session_1:pw@proxy.test:8000")

    def test_redirect_status_counts_as_success(self) -> None:
        http = FakeHttp(lambda method, url, n: FakeResponse(status_code=304, text=""))

        result = self._executor(http).fetch(url="https://hotel.test/h", session=self.manager.acquire())

        self.assertTrue(result.succeeded)
        self.assertIsNone(result.body)

    def test_error_status_is_reported_not_raised(self) -> None:
        http = FakeHttp(lambda method, url, n: FakeResponse(status_code=403, text="denied"))

        result = self._executor(http).fetch(url="https://hotel.test/h", session=self.manager.acquire())

        self.assertFalse(result.succeeded)
        self.assertEqual(result.status, 403)
        self.assertEqual(result.error_message, "status:403")
        self.assertEqual(result.error_kind, ErrorKind.FETCH_FAILURE)
        self.assertIsNone(result.body)

    def test_timeout_is_reported_not_raised(self) -> None:
        http = FakeHttp(lambda method, url, n: requests.Timeout("read timed out"))

        result = self._executor(http).fetch(url="https://hotel.test/h", session=self.manager.acquire())

        self.assertFalse(result.succeeded)
        self.assertEqual(result.status, 0)
        self.assertEqual(result.final_url, "https://hotel.test/h")
        self.assertIn("timeout", result.error_message)

    def test_connection_error_is_reported_not_raised(self) -> None:
        http = FakeHttp(lambda method, url, n: requests.ConnectionError("refused"))

        result = self._executor(http).fetch(url="https://hotel.test/h", session=self.manager.acquire())

        self.assertFalse(result.succeeded)
        self.assertEqual(result.error_message, "refused")

    def test_server_cookies_persist_in_session_jar(self) -> None:
        http = FakeHttp(
            lambda method, url, n: FakeResponse(text="x", set_cookies={"bm_sv": f"token{n}"})
        )
        executor = self._executor(http)
        session = self.manager.acquire()

        executor.fetch(url="https://hotel.test/h", session=session)
        executor.fetch(url="https://hotel.test/h", session=self.manager.acquire())

        self.assertEqual(session.cookies.get("bm_sv"), "token1")
        self.assertEqual(http.calls[0].cookies, {})
        self.assertEqual(http.calls[1].cookies, {"bm_sv": "token0"})

    def test_pools_one_http_session_per_proxy_session(self) -> None:
        http = FakeHttp(lambda method, url, n: FakeResponse(text="x"))
        executor = self._executor(http)
        first = self.manager.acquire()

        executor.fetch(url="https://hotel.test/a", session=first)
        executor.fetch(url="https://hotel.test/b", session=first)
        executor.fetch(url="https://hotel.test/c", session=self.manager.acquire(force_new=True))

        self.assertEqual(http.sessions_opened, 2)
        self.assertEqual(http.sessions_closed, 0)
        self.assertEqual(http.calls[2].proxies["https"], "http://u-session_2:pw@proxy.test:8000")

        executor.close()

        self.assertEqual(http.sessions_closed, 2)


def test_success_status_range() -> None:
    assert is_success_status(200)
    assert is_success_status(399)
    assert not is_success_status(199)
    assert not is_success_status(400)
    assert not is_success_status(503)
