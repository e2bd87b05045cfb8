"""OpenAI chat completions client.

API docs: https://platform.openai.com/docs/api-reference/chat
Replies are requested in JSON mode, so anything that is not a JSON object
is treated as a parse failure.
"""

from __future__ import annotations

import json
import logging

from ..errors import ParseError
from ..models import BrandJudgement
from .base import ProviderClient

logger = logging.getLogger(__name__)

API_BASE = "https://api.openai.com/v1"


class OpenAIClient(ProviderClient):
    label = "openai"
    default_model = "gpt-4-turbo-preview"

    async def generate(self, prompt: str) -> dict:
        return await self._post_json(
            f"{API_BASE}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            payload={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": 0.3,
                "response_format": {"type": "json_object"},
            },
        )

    def parse_reply(self, body: dict) -> BrandJudgement:
        try:
            content = body["choices"][0]["message"]["content"]
            data = json.loads(content)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ParseError(f"Unreadable OpenAI reply: {exc}") from exc

        if not isinstance(data, dict):
            raise ParseError("OpenAI reply is not a JSON object")
        try:
            return BrandJudgement.from_provider(data)
        except ValueError as exc:
            raise ParseError(f"Invalid judgement in OpenAI reply: {exc}") from exc
