"""
harvester/config.py

Process-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading process settings.
    """

    load_env_files()


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging once for the harvest process.

    `level` wins over `LOG_LEVEL`; unknown names fall back to INFO.
    """

    _load_env_once()
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # urllib3 logs every pooled connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(logging.INFO, logging.getLogger().level))
