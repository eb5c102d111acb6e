"""
Config helpers for structured-data harvesting.
"""

from harvester.scraping.config.loader import apply_overrides, get_harvest_settings
from harvester.scraping.config.models import HarvestSettings

__all__ = [
    "HarvestSettings",
    "apply_overrides",
    "get_harvest_settings",
]
