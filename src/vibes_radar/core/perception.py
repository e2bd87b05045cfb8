"""Concurrent brand-perception requests across all configured providers.

Every provider is queried at once and each failure is isolated: a provider
that errors never cancels or fails its siblings, and the mapping returned
always has one outcome per configured provider.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from .clients.base import ProviderClient
from .errors import ParseError, ProviderCallError
from .models import AnalysisRequest, ProviderOutcome
from .prompts import build_prompt

logger = logging.getLogger(__name__)

PARSE_FAILURE = "Failed to parse response"
CALL_FAILURE = "API call failed"


class PerceptionRequester:
    """Fans one analysis request out to every configured provider."""

    def __init__(self, providers: Sequence[ProviderClient]):
        labels = [p.label for p in providers]
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            raise ValueError(f"Duplicate provider labels: {', '.join(duplicates)}")
        self.providers = list(providers)

    @property
    def labels(self) -> list[str]:
        return [p.label for p in self.providers]

    async def request(self, analysis: AnalysisRequest) -> dict[str, ProviderOutcome]:
        """Query all providers concurrently and wait for every one to settle."""
        prompt = build_prompt(analysis)
        tasks = [self._query(provider, prompt) for provider in self.providers]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: dict[str, ProviderOutcome] = {}
        for provider, result in zip(self.providers, results):
            if isinstance(result, Exception):
                logger.warning("Provider %s failed unexpectedly: %s", provider.label, result, exc_info=result)
                result = ProviderOutcome.failure(provider.label, str(result) or CALL_FAILURE, model=provider.model)
            outcomes[provider.label] = result
        return outcomes

    async def _query(self, provider: ProviderClient, prompt: str) -> ProviderOutcome:
        try:
            body = await provider.generate(prompt)
        except ProviderCallError as exc:
            logger.warning("Provider %s call failed: %s", provider.label, exc)
            return ProviderOutcome.failure(provider.label, str(exc) or CALL_FAILURE, model=provider.model)

        try:
            judgement = provider.parse_reply(body)
        except ParseError as exc:
            logger.warning("Provider %s reply could not be parsed: %s", provider.label, exc)
            return ProviderOutcome.failure(provider.label, PARSE_FAILURE, model=provider.model)

        return ProviderOutcome.success(provider.label, judgement, model=provider.model)
