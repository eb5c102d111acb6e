"""
Error kinds and exceptions for the harvest pipeline.

Only `ConfigurationError` is raised out of a run. Every other kind is
recorded on the per-item result it belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    RESOLUTION_TIMEOUT = "resolution_timeout"
    FETCH_FAILURE = "fetch_failure"
    PARSE_FAILURE = "parse_failure"
    NO_ENTITY_FOUND = "no_entity_found"
    CONFIGURATION_ERROR = "configuration_error"
    INTERNAL_ERROR = "internal_error"


class HarvestError(Exception):
    """Base exception for harvest failures."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR


class ConfigurationError(HarvestError):
    """Raised when a run cannot start, e.g. no URLs resolvable from input."""

    kind = ErrorKind.CONFIGURATION_ERROR


@dataclass(frozen=True)
class ParseFailure:
    """
    One structured-data block that could not be decoded.

    `index` is the block's position among all candidate script tags in the
    document, counting skipped ones.
    """

    index: int
    message: str

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.PARSE_FAILURE
