"""
Service layer exports.
"""

from harvester.services.harvest_service import HarvestService

__all__ = ["HarvestService"]
