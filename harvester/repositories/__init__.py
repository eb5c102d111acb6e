"""
Repository exports.
"""

from harvester.repositories.scrape_result_repository import ScrapeResultRepository

__all__ = ["ScrapeResultRepository"]
