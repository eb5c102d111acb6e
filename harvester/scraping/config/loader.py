"""
Environment config loader for harvest runs.
"""

from __future__ import annotations

import os
from dataclasses import replace
from functools import lru_cache

from db.config import load_env_files

from harvester.scraping.config.models import (
    DEFAULT_TARGET_TYPES,
    DEFAULT_USER_AGENT,
    HarvestSettings,
)


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


def _get_list_env(name: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


@lru_cache(maxsize=1)
def get_harvest_settings() -> HarvestSettings:
    """
    Return cached harvest settings from environment variables.
    """

    load_env_files()
    delay_ms_min = max(0, _get_int_env("HARVEST_DELAY_MS_MIN", 250))
    return HarvestSettings(
        concurrency=max(1, _get_int_env("HARVEST_CONCURRENCY", 5)),
        session_page_limit=max(1, _get_int_env("HARVEST_SESSION_PAGES", 10)),
        timeout_seconds=max(1.0, _get_float_env("HARVEST_TIMEOUT_SECONDS", 15.0)),
        resolve_timeout_seconds=max(
            1.0,
            _get_float_env("HARVEST_RESOLVE_TIMEOUT_SECONDS", 8.0),
        ),
        delay_ms_min=delay_ms_min,
        delay_ms_max=max(delay_ms_min, _get_int_env("HARVEST_DELAY_MS_MAX", 750)),
        target_types=_get_list_env("HARVEST_TARGET_TYPES", DEFAULT_TARGET_TYPES),
        user_agent=_get_str_env("HARVEST_USER_AGENT", DEFAULT_USER_AGENT),
        proxy_url_template=_get_optional_str_env("HARVEST_PROXY_URL_TEMPLATE"),
        proxy_urls=_get_list_env("HARVEST_PROXY_URLS"),
        storage_batch_size=max(1, _get_int_env("HARVEST_STORAGE_BATCH_SIZE", 100)),
    )


def apply_overrides(
    settings: HarvestSettings,
    *,
    concurrency: int | None = None,
    session_page_limit: int | None = None,
    timeout_seconds: float | None = None,
    delay_ms_min: int | None = None,
    delay_ms_max: int | None = None,
) -> HarvestSettings:
    """
    Return a copy of `settings` with every non-None override applied.
    """

    overrides = {
        "concurrency": concurrency,
        "session_page_limit": session_page_limit,
        "timeout_seconds": timeout_seconds,
        "delay_ms_min": delay_ms_min,
        "delay_ms_max": delay_ms_max,
    }
    merged = replace(settings, **{key: value for key, value in overrides.items() if value is not None})
    if merged.delay_ms_max < merged.delay_ms_min:
        merged = replace(merged, delay_ms_max=merged.delay_ms_min)
    return merged
