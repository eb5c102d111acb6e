from __future__ import annotations

import pytest

from harvester.scraping.config import apply_overrides, get_harvest_settings
from harvester.scraping.config.models import DEFAULT_TARGET_TYPES, HarvestSettings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_harvest_settings.cache_clear()
    yield
    get_harvest_settings.cache_clear()


def test_defaults_without_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "HARVEST_CONCURRENCY",
        "HARVEST_SESSION_PAGES",
        "HARVEST_TIMEOUT_SECONDS",
        "HARVEST_DELAY_MS_MIN",
        "HARVEST_DELAY_MS_MAX",
        "HARVEST_TARGET_TYPES",
        "HARVEST_PROXY_URL_TEMPLATE",
        "HARVEST_PROXY_URLS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_harvest_settings()

    assert settings.concurrency == 5
    assert settings.session_page_limit == 10
    assert settings.timeout_seconds == 15.0
    assert settings.resolve_timeout_seconds == 8.0
    assert (settings.delay_ms_min, settings.delay_ms_max) == (250, 750)
    assert settings.target_types == DEFAULT_TARGET_TYPES
    assert settings.proxy_url_template is None
    assert settings.proxy_urls == ()


def test_environment_values_are_parsed_and_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HARVEST_CONCURRENCY", "0")
    monkeypatch.setenv("HARVEST_SESSION_PAGES", "not-a-number")
    monkeypatch.setenv("HARVEST_DELAY_MS_MIN", "500")
    monkeypatch.setenv("HARVEST_DELAY_MS_MAX", "100")
    monkeypatch.setenv("HARVEST_TARGET_TYPES", "Hotel, Resort ,")
    monkeypatch.setenv("HARVEST_PROXY_URLS", "http://a:1,http://b:2")

    settings = get_harvest_settings()

    assert settings.concurrency == 1
    assert settings.session_page_limit == 10
    assert (settings.delay_ms_min, settings.delay_ms_max) == (500, 500)
    assert settings.target_types == ("Hotel", "Resort")
    assert settings.proxy_urls == ("http://a:1", "http://b:2")


def test_apply_overrides_ignores_none() -> None:
    base = HarvestSettings()

    merged = apply_overrides(base, concurrency=None, timeout_seconds=30.0)

    assert merged.concurrency == base.concurrency
    assert merged.timeout_seconds == 30.0
