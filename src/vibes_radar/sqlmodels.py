"""SQLAlchemy models for persisted brand analyses.

Rows are append-only: one per analysis, never updated or deleted.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisResultRow(Base):
    """One completed brand analysis with its consensus score."""

    __tablename__ = "analysis_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_name: Mapped[str] = mapped_column(String(255), nullable=False)
    competitors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    results: Mapped[dict] = mapped_column(JSON, nullable=False)
    consensus_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_analysis_brand_created", "brand_name", "created_at"),
    )
