"""
JSON-LD block extraction and target entity selection.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from bs4 import BeautifulSoup

from harvester.scraping.config.models import DEFAULT_TARGET_TYPES
from harvester.scraping.errors import ParseFailure
from harvester.scraping.logging_utils import log_event
from harvester.scraping.types import ExtractionOutcome

logger = logging.getLogger(__name__)

JSONLD_MIME_TYPE = "application/ld+json"


def _is_jsonld_script(type_attr: Any) -> bool:
    return isinstance(type_attr, str) and type_attr.strip().lower() == JSONLD_MIME_TYPE


def declared_types(block: Any) -> list[str]:
    """
    Return the literal `@type` values declared by a block.
    """

    if not isinstance(block, dict):
        return []
    raw = block.get("@type")
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list):
        return [item for item in raw if isinstance(item, str)]
    return []


def matches_type(block: Any, target_types: Iterable[str]) -> bool:
    """
    Case-sensitive match of a block's `@type` (scalar or list) against targets.
    """

    targets = set(target_types)
    return any(value in targets for value in declared_types(block))


class StructuredDataExtractor:
    """
    Pure, deterministic JSON-LD extraction over markup text.
    """

    def __init__(self, *, target_types: Sequence[str] = DEFAULT_TARGET_TYPES) -> None:
        self._target_types = tuple(target_types)

    @property
    def target_types(self) -> tuple[str, ...]:
        return self._target_types

    def extract(self, markup: str, *, source_url: str | None = None) -> ExtractionOutcome:
        blocks, failures = self.collect_blocks(markup, source_url=source_url)
        selected = self.select_entity(blocks)
        if selected is not None:
            log_event(
                logger,
                logging.INFO,
                "entity_extracted",
                url=source_url,
                entity_type=declared_types(selected),
                name=selected.get("name"),
            )
        return ExtractionOutcome(
            blocks=tuple(blocks),
            selected=selected,
            parse_failures=tuple(failures),
        )

    def collect_blocks(
        self,
        markup: str,
        *,
        source_url: str | None = None,
    ) -> tuple[list[Any], list[ParseFailure]]:
        """
        Parse every JSON-LD script in document order.

        Empty scripts are ignored; malformed or too deeply nested ones are
        reported as `ParseFailure` entries and skipped.
        """

        soup = BeautifulSoup(markup, "html.parser")
        blocks: list[Any] = []
        failures: list[ParseFailure] = []
        scripts = soup.find_all("script", attrs={"type": _is_jsonld_script})
        for index, script in enumerate(scripts):
            text = script.string if script.string is not None else script.get_text()
            if not text or not text.strip():
                continue
            try:
                data = json.loads(text)
            except (ValueError, RecursionError) as exc:
                failures.append(ParseFailure(index=index, message=str(exc)))
                log_event(
                    logger,
                    logging.WARNING,
                    "jsonld_parse_failed",
                    url=source_url,
                    index=index,
                    error=str(exc),
                )
                continue

            blocks.append(data)
            found_types = declared_types(data)
            if found_types:
                log_event(
                    logger,
                    logging.DEBUG,
                    "jsonld_block_found",
                    url=source_url,
                    index=index,
                    entity_type=found_types,
                )
        return blocks, failures

    def select_entity(self, blocks: Sequence[Any]) -> dict[str, Any] | None:
        """
        First block in document order whose type matches a target type.
        """

        for block in blocks:
            if matches_type(block, self._target_types):
                return block
        return None
