"""Anthropic messages API client.

API docs: https://docs.anthropic.com/en/api/messages
Claude may wrap its JSON in prose. The first '{' to the last '}' is decoded;
if the reply has no such span at all, the raw text is kept as a successful
judgement instead of failing.
"""

from __future__ import annotations

import json
import logging
import re

from ..errors import ParseError
from ..models import BrandJudgement
from .base import ProviderClient

logger = logging.getLogger(__name__)

API_BASE = "https://api.anthropic.com/v1"
API_VERSION = "2023-06-01"

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")


class AnthropicClient(ProviderClient):
    label = "anthropic"
    default_model = "claude-3-5-sonnet-20241022"
    max_tokens = 1024

    async def generate(self, prompt: str) -> dict:
        return await self._post_json(
            f"{API_BASE}/messages",
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": API_VERSION,
            },
            payload={
                "model": self.model,
                "max_tokens": self.max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
        )

    def parse_reply(self, body: dict) -> BrandJudgement:
        try:
            text = body["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ParseError(f"Unreadable Anthropic reply: {exc}") from exc
        if not isinstance(text, str):
            raise ParseError("Anthropic reply text is not a string")

        match = _JSON_SPAN.search(text)
        if match is None:
            logger.info("Anthropic reply contained no JSON object; keeping raw text")
            return BrandJudgement(raw_response=text)

        try:
            return BrandJudgement.from_provider(json.loads(match.group(0)))
        except ValueError as exc:
            raise ParseError(f"Invalid JSON in Anthropic reply: {exc}") from exc
