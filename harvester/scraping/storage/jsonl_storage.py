"""
JSON Lines dataset storage for harvest results.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from harvester.domain.structured_data import ExtractionResult, RunStats
from harvester.scraping.storage.base import ResultStorage


class JsonLinesResultStorage(ResultStorage):
    """
    Appends one output record per line; the run-stats record comes last.

    When `stats_path` is set the run summary is also written there as a
    standalone JSON document.
    """

    def __init__(self, path: str | Path, *, stats_path: str | Path | None = None) -> None:
        self._path = Path(path)
        self._stats_path = Path(stats_path) if stats_path is not None else None
        self._lock = threading.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def store_result(self, result: ExtractionResult) -> None:
        self._append(result.to_record())

    def store_run_stats(self, stats: RunStats) -> None:
        record = stats.to_record()
        self._append(record)
        if self._stats_path is not None:
            payload = {key: value for key, value in record.items() if key != "type"}
            with self._lock:
                self._stats_path.parent.mkdir(parents=True, exist_ok=True)
                self._stats_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _append(self, record: dict[str, Any]) -> None:
        line = json.dumps(record, default=str, ensure_ascii=False)
        with self._lock:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
