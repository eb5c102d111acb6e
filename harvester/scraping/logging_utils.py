"""
Structured logging helpers for harvest workflows.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    The emitting worker thread is attached so interleaved pool output can be
    read back per worker.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, "thread": threading.current_thread().name, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
