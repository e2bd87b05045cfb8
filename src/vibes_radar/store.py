"""Append-only store of analysis records.

Records are keyed by brand name and ordered by the creation timestamp the
store assigns. Database failures surface as StoreError; callers decide
whether that is fatal.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .core.errors import RecordNotFoundError, StoreError
from .core.models import AnalysisRecord, AnalysisResult
from .sqlmodels import AnalysisResultRow

logger = logging.getLogger(__name__)


def _to_record(row: AnalysisResultRow) -> AnalysisRecord:
    created_at = row.created_at
    # SQLite drops the offset; stored values are always UTC.
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return AnalysisRecord(
        id=row.id,
        brand_name=row.brand_name,
        competitors=list(row.competitors or []),
        results=row.results,
        consensus_score=row.consensus_score,
        created_at=created_at,
    )


class ReportStore:
    """Report store backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def append(self, result: AnalysisResult) -> AnalysisRecord:
        """Persist one analysis result and return the stored record."""
        row = AnalysisResultRow(
            brand_name=result.brand_name,
            competitors=list(result.competitors),
            results=result.model_dump(mode="json", exclude_none=True),
            consensus_score=result.consensus.overall_score,
            created_at=datetime.now(timezone.utc),
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to store analysis for '{result.brand_name}': {exc}") from exc

        logger.info("Stored analysis %d for %s (score %d)", row.id, row.brand_name, row.consensus_score)
        return _to_record(row)

    async def latest(self, brand_name: str, limit: int = 10) -> list[AnalysisRecord]:
        """Return up to ``limit`` records for a brand, most recent first."""
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        query = (
            select(AnalysisResultRow)
            .where(AnalysisResultRow.brand_name == brand_name)
            .order_by(AnalysisResultRow.created_at.desc(), AnalysisResultRow.id.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read analyses for '{brand_name}': {exc}") from exc

        return [_to_record(r) for r in rows]

    async def latest_one(self, brand_name: str) -> AnalysisRecord:
        """Return the most recent record for a brand, or raise RecordNotFoundError."""
        records = await self.latest(brand_name, limit=1)
        if not records:
            raise RecordNotFoundError(brand_name)
        return records[0]
