"""
Domain model exports.
"""

from harvester.domain.structured_data import ExtractionResult, RunStats, WorkItem

__all__ = ["ExtractionResult", "RunStats", "WorkItem"]
