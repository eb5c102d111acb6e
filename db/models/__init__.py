"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.harvest_run import HarvestRunRecord
from db.models.scrape_result import ScrapeResultRecord

__all__ = [
    "HarvestRunRecord",
    "ScrapeResultRecord",
]
