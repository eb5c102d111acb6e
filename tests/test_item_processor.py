"""
tests/test_item_processor.py

Two-attempt escalation policy of the item processor.
"""

from __future__ import annotations

import pytest
import requests

from harvester.domain.structured_data import WorkItem
from harvester.scraping.errors import ErrorKind
from harvester.scraping.fetcher import FetchExecutor
from harvester.scraping.parsing.jsonld import StructuredDataExtractor
from harvester.scraping.processor import MAX_ATTEMPTS, ItemProcessor
from harvester.scraping.sessions import SessionManager
from tests.http_fakes import FakeHttp, FakeResponse, page_with_jsonld

URL = "https://hotels.example/grand"
HOTEL_PAGE = page_with_jsonld('{"@type": "Hotel", "name": "Grand Example"}')
ORG_PAGE = page_with_jsonld('{"@type": "Organization", "name": "Chain"}')


class PassThroughCanonicalizer:
    def __init__(self, target: str | None = None) -> None:
        self.target = target
        self.seen: list[str] = []

    def canonicalize(self, url: str) -> str:
        self.seen.append(url)
        return self.target or url


def _processor(http: FakeHttp, *, manager: SessionManager | None = None, canonicalizer=None) -> ItemProcessor:
    return ItemProcessor(
        canonicalizer=canonicalizer or PassThroughCanonicalizer(),
        session_manager=manager or SessionManager(session_page_limit=10),
        fetcher=FetchExecutor(timeout_seconds=1.0, session_factory=http),
        extractor=StructuredDataExtractor(),
    )


def test_first_attempt_success_stops_there() -> None:
    http = FakeHttp(lambda method, url, n: FakeResponse(text=HOTEL_PAGE))

    result = _processor(http).process(WorkItem(index=0, original_url=URL))

    assert result.error is None
    assert result.error_kind is None
    assert result.selected_entity["name"] == "Grand Example"
    assert result.attempts == 1
    assert result.session_ids == (1,)
    assert len(http.calls) == 1


def test_escalates_to_fresh_session_after_failure() -> None:
    def router(method: str, url: str, n: int):
        if n == 0:
            return requests.Timeout("attempt one timed out")
        return FakeResponse(text=HOTEL_PAGE)

    http = FakeHttp(router)
    result = _processor(http).process(WorkItem(index=0, original_url=URL))

    assert result.succeeded
    assert result.error is None
    assert result.attempts == 2
    first, second = result.session_ids
    assert second != first


def test_both_attempts_failing_keeps_second_error() -> None:
    def router(method: str, url: str, n: int):
        if n == 0:
            return requests.ConnectionError("first refused")
        return FakeResponse(status_code=503, text="busy")

    http = FakeHttp(router)
    result = _processor(http).process(WorkItem(index=0, original_url=URL))

    assert not result.succeeded
    assert result.error == "status:503"
    assert result.error_kind == ErrorKind.FETCH_FAILURE
    assert not result.fetched
    assert result.structured_blocks == ()
    assert len(http.calls) == MAX_ATTEMPTS


def test_no_matching_entity_is_distinct_from_fetch_failure() -> None:
    http = FakeHttp(lambda method, url, n: FakeResponse(status_code=200, text=ORG_PAGE))

    result = _processor(http).process(WorkItem(index=0, original_url=URL))

    assert result.error == "status:200"
    assert result.error_kind == ErrorKind.NO_ENTITY_FOUND
    assert result.fetched
    assert result.structured_blocks == ({"@type": "Organization", "name": "Chain"},)
    assert result.selected_entity is None
    assert result.attempts == 2


def test_empty_body_escalates() -> None:
    def router(method: str, url: str, n: int):
        return FakeResponse(text="" if n == 0 else HOTEL_PAGE)

    http = FakeHttp(router)
    result = _processor(http).process(WorkItem(index=0, original_url=URL))

    assert result.succeeded
    assert result.attempts == 2


def test_empty_bodies_on_both_attempts_count_as_fetched() -> None:
    http = FakeHttp(lambda method, url, n: FakeResponse(status_code=200, text=""))

    result = _processor(http).process(WorkItem(index=0, original_url=URL))

    assert result.error == "status:200"
    assert result.error_kind == ErrorKind.NO_ENTITY_FOUND
    assert result.fetched
    assert result.structured_blocks == ()
    assert result.attempts == 2


def test_deeply_nested_block_does_not_hide_hotel() -> None:
    page = page_with_jsonld("[" * 200000 + "]" * 200000, '{"@type": "Hotel", "name": "Grand Example"}')
    http = FakeHttp(lambda method, url, n: FakeResponse(text=page))

    result = _processor(http).process(WorkItem(index=0, original_url=URL))

    assert result.error is None
    assert result.selected_entity["name"] == "Grand Example"
    assert result.attempts == 1
    assert len(result.parse_failures) == 1


@pytest.mark.parametrize("responses", [["fail", "fail"], ["none", "none"], ["none", "fail"]])
def test_never_more_than_two_fetches(responses: list[str]) -> None:
    def router(method: str, url: str, n: int):
        kind = responses[min(n, len(responses) - 1)]
        if kind == "fail":
            return requests.ConnectionError("down")
        return FakeResponse(text=ORG_PAGE)

    http = FakeHttp(router)
    manager = SessionManager(session_page_limit=10)
    processor = _processor(http, manager=manager)

    for index in range(3):
        result = processor.process(WorkItem(index=index, original_url=URL))
        assert result.attempts == 2
        assert result.session_ids[0] != result.session_ids[1]

    assert len(http.calls) == 6


def test_fetches_canonical_url_but_records_original() -> None:
    canonicalizer = PassThroughCanonicalizer(target="https://hotels.example/resolved")
    http = FakeHttp(lambda method, url, n: FakeResponse(text=HOTEL_PAGE))

    result = _processor(http, canonicalizer=canonicalizer).process(
        WorkItem(index=0, original_url="http://short.example/h1")
    )

    assert canonicalizer.seen == ["http://short.example/h1"]
    assert http.calls[0].url == "https://hotels.example/resolved"
    assert result.original_url == "http://short.example/h1"
    assert result.final_url == "https://hotels.example/resolved"


def test_unexpected_exception_becomes_item_error() -> None:
    class ExplodingCanonicalizer:
        def canonicalize(self, url: str) -> str:
            raise RuntimeError("boom")

    http = FakeHttp(lambda method, url, n: FakeResponse(text=HOTEL_PAGE))
    result = _processor(http, canonicalizer=ExplodingCanonicalizer()).process(
        WorkItem(index=0, original_url=URL)
    )

    assert result.error == "RuntimeError: boom"
    assert result.error_kind == ErrorKind.INTERNAL_ERROR
    assert http.calls == []
