"""
harvester/schemas/run_input.py

Input schema for one harvest run.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from harvester.scraping.errors import ConfigurationError


class StartUrl(BaseModel):
    """
    One entry of `startUrls`; extra keys such as `userData` are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    url: str


class RunInput(BaseModel):
    """
    URLs to harvest plus optional per-run overrides of environment settings.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    start_urls: list[StartUrl | str] = Field(default_factory=list, alias="startUrls")
    url: str | None = None
    concurrency: int | None = Field(default=None, ge=1)
    session_pages: int | None = Field(default=None, alias="sessionPages", ge=1)
    timeout_secs: float | None = Field(default=None, alias="timeoutSecs", gt=0)
    delay_ms_min: int | None = Field(default=None, alias="delayMsMin", ge=0)
    delay_ms_max: int | None = Field(default=None, alias="delayMsMax", ge=0)

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "RunInput":
        if (
            self.delay_ms_min is not None
            and self.delay_ms_max is not None
            and self.delay_ms_min > self.delay_ms_max
        ):
            raise ValueError("delayMsMin must not exceed delayMsMax.")
        return self

    def resolved_urls(self) -> list[str]:
        """
        `startUrls` when it yields any URL, otherwise the single `url`.
        """

        urls: list[str] = []
        for entry in self.start_urls:
            raw = entry.url if isinstance(entry, StartUrl) else entry
            if raw.strip():
                urls.append(raw.strip())
        if urls:
            return urls
        if self.url and self.url.strip():
            return [self.url.strip()]
        return []


def parse_run_input(payload: dict[str, Any]) -> RunInput:
    try:
        return RunInput.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid run input: {exc}") from exc


def load_run_input(path: str | Path) -> RunInput:
    """
    Load a run input document from a JSON file.
    """

    input_path = Path(path)
    if not input_path.exists():
        raise ConfigurationError(f"Run input file not found: {input_path}")
    try:
        payload = json.loads(input_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Run input is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError("Run input must be a JSON object.")
    return parse_run_input(payload)
