"""
db/models/scrape_result.py

One harvested record per input URL.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


class ScrapeResultRecord(Base):
    __tablename__ = "scrape_results"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    run_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False, comment="Input URL as supplied")
    final_url: Mapped[str] = mapped_column(Text, nullable=False)
    scraped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    jsonld_data: Mapped[list[Any]] = mapped_column(
        JSONType,
        nullable=False,
        comment="Every parsed JSON-LD block in document order",
    )
    entity: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    entity_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    entity_summary: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    error_kind: Mapped[str | None] = mapped_column(String(32), nullable=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_scrape_results_run_id", "run_id"),
        Index("ix_scrape_results_scraped_at", "scraped_at"),
        Index("ix_scrape_results_error_kind", "error_kind"),
    )
