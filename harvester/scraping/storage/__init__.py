"""
Storage layer exports.
"""

from harvester.scraping.storage.base import (
    FanOutResultStorage,
    MemoryResultStorage,
    ResultStorage,
)
from harvester.scraping.storage.jsonl_storage import JsonLinesResultStorage
from harvester.scraping.storage.sqlalchemy_storage import SQLAlchemyResultStorage

__all__ = [
    "FanOutResultStorage",
    "JsonLinesResultStorage",
    "MemoryResultStorage",
    "ResultStorage",
    "SQLAlchemyResultStorage",
]
