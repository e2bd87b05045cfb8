"""Analysis, history, and comparison flows shared by the MCP server and the HTTP API."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .config import Settings
from .core.clients import AnthropicClient, OpenAIClient, ProviderClient
from .core.errors import AnalysisError, StoreError
from .core.models import (
    AnalysisRecord,
    AnalysisRequest,
    AnalysisResult,
    BrandComparison,
    BrandReports,
    PartialComparison,
)
from .core.perception import PerceptionRequester
from .core.scoring import aggregate, decide_winner
from .store import ReportStore

logger = logging.getLogger(__name__)

DEFAULT_REPORT_LIMIT = 10


class BrandRadarService:
    """Runs brand analyses and answers history and comparison queries."""

    def __init__(self, requester: PerceptionRequester, store: ReportStore):
        self.requester = requester
        self.store = store

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Query every provider, compute the consensus, and persist the result.

        A persistence failure is logged and the computed result is still
        returned.
        """
        try:
            outcomes = await self.requester.request(request)
            result = AnalysisResult(
                brand_name=request.brand_name,
                competitors=request.competitors,
                depth=request.depth,
                timestamp=datetime.now(timezone.utc),
                models=outcomes,
                consensus=aggregate(outcomes),
            )
        except Exception as exc:
            logger.error("Analysis of %s failed: %s", request.brand_name, exc, exc_info=True)
            raise AnalysisError(f"Failed to analyze brand: {exc}") from exc

        try:
            await self.store.append(result)
        except StoreError as exc:
            logger.error("Could not store analysis for %s: %s", request.brand_name, exc, exc_info=True)

        logger.info(
            "Analyzed %s: score %d from %d/%d models",
            result.brand_name,
            result.consensus.overall_score,
            result.consensus.models_used,
            len(outcomes),
        )
        return result

    async def get_reports(self, brand_name: str, limit: int = DEFAULT_REPORT_LIMIT) -> BrandReports:
        """Most recent stored analyses for a brand."""
        records = await self.store.latest(brand_name, limit)
        return BrandReports(brand_name=brand_name, total_reports=len(records), reports=records)

    async def compare(self, brand1: str, brand2: str) -> Union[PartialComparison, BrandComparison]:
        """Compare the latest stored analyses of two brands.

        If either brand has no usable analysis the result is partial and says
        which one is available.
        """
        found = await asyncio.gather(
            self.store.latest_one(brand1),
            self.store.latest_one(brand2),
            return_exceptions=True,
        )
        for result in found:
            if isinstance(result, Exception) and not isinstance(result, StoreError):
                raise result

        record1, record2 = found
        if not isinstance(record1, AnalysisRecord) or not isinstance(record2, AnalysisRecord):
            for brand, result in ((brand1, record1), (brand2, record2)):
                if isinstance(result, StoreError):
                    logger.info("No comparable analysis for %s: %s", brand, result)
            return PartialComparison(
                available={
                    brand1: isinstance(record1, AnalysisRecord),
                    brand2: isinstance(record2, AnalysisRecord),
                },
            )

        winner = decide_winner(brand1, record1.consensus_score, brand2, record2.consensus_score)
        return BrandComparison(
            comparison={brand1: record1, brand2: record2},
            winner=winner,
        )


def build_providers(settings: Settings) -> list[ProviderClient]:
    """Create a client for every provider that has an API key configured."""
    providers: list[ProviderClient] = []
    if settings.openai_api_key:
        providers.append(OpenAIClient(
            settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.provider_timeout_seconds,
        ))
    else:
        logger.warning("OPENAI_API_KEY not set, OpenAI provider disabled")

    if settings.anthropic_api_key:
        providers.append(AnthropicClient(
            settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.provider_timeout_seconds,
        ))
    else:
        logger.warning("ANTHROPIC_API_KEY not set, Anthropic provider disabled")
    return providers


def build_service(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> BrandRadarService:
    return BrandRadarService(
        requester=PerceptionRequester(build_providers(settings)),
        store=ReportStore(session_factory),
    )
