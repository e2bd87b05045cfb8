"""Model provider clients. Each one turns a prompt into a BrandJudgement."""

from .anthropic_client import AnthropicClient
from .base import ProviderClient
from .openai_client import OpenAIClient

__all__ = ["AnthropicClient", "OpenAIClient", "ProviderClient"]
