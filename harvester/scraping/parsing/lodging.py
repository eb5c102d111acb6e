"""
Flat projection of a matched lodging entity.
"""

from __future__ import annotations

from typing import Any

# summary key -> schema.org property
LODGING_SUMMARY_FIELDS = {
    "name": "name",
    "address": "address",
    "telephone": "telephone",
    "url": "url",
    "image": "image",
    "priceRange": "priceRange",
    "starRating": "starRating",
    "amenities": "amenityFeature",
}


def summarize_lodging(entity: dict[str, Any] | None) -> dict[str, Any] | None:
    if entity is None:
        return None
    return {key: entity.get(source) for key, source in LODGING_SUMMARY_FIELDS.items()}


def entity_name(entity: dict[str, Any] | None) -> str | None:
    if entity is None:
        return None
    name = entity.get("name")
    if isinstance(name, str):
        return name.strip()[:255] or None
    return None
