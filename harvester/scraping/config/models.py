"""
Harvest configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_TARGET_TYPES = ("Hotel", "LodgingBusiness")


@dataclass(frozen=True)
class HarvestSettings:
    """
    Runtime settings for one harvest run.
    """

    concurrency: int = 5
    session_page_limit: int = 10
    timeout_seconds: float = 15.0
    resolve_timeout_seconds: float = 8.0
    delay_ms_min: int = 250
    delay_ms_max: int = 750
    target_types: tuple[str, ...] = DEFAULT_TARGET_TYPES
    user_agent: str = DEFAULT_USER_AGENT
    proxy_url_template: str | None = None
    proxy_urls: tuple[str, ...] = field(default_factory=tuple)
    storage_batch_size: int = 100
