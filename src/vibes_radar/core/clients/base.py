"""Common contract for language-model provider clients.

A client does two separate things so that failures can be told apart:
``generate`` talks to the provider and raises ProviderCallError, and
``parse_reply`` decodes the response body and raises ParseError.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..errors import ProviderCallError
from ..models import BrandJudgement

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class ProviderClient(ABC):
    """One configured language-model provider."""

    label: str = ""
    default_model: str = ""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        self._transport = transport

    def __repr__(self) -> str:
        return f"{type(self).__name__}(label={self.label!r}, model={self.model!r})"

    @abstractmethod
    async def generate(self, prompt: str) -> dict:
        """Send the prompt and return the provider's decoded response body."""

    @abstractmethod
    def parse_reply(self, body: dict) -> BrandJudgement:
        """Extract a judgement from a response body returned by ``generate``."""

    async def _post_json(self, url: str, headers: dict, payload: dict) -> dict:
        """POST a JSON payload and return the JSON body, raising ProviderCallError on failure."""
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                transport=self._transport,
            ) as client:
                response = await client.post(url, headers=headers, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderCallError(self.label, _error_message(exc.response) or str(exc)) from exc
        except httpx.HTTPError as exc:
            raise ProviderCallError(self.label, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise ProviderCallError(self.label, f"Invalid response body: {exc}") from exc


def _error_message(response: httpx.Response) -> Optional[str]:
    """Pull the provider's own error message out of an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"{response.status_code} {error['message']}"
    return None
