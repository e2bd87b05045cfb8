"""Environment configuration and logging setup."""

from __future__ import annotations

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

from .core.clients.base import DEFAULT_TIMEOUT_SECONDS

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


class Settings(BaseModel):
    """Runtime settings, read from the environment by ``from_env``."""

    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_model: Optional[str] = None
    anthropic_model: Optional[str] = None
    provider_timeout_seconds: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)
    database_url: Optional[str] = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_env(cls) -> Settings:
        env = os.environ
        return cls(
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
            openai_model=env.get("OPENAI_MODEL") or None,
            anthropic_model=env.get("ANTHROPIC_MODEL") or None,
            provider_timeout_seconds=float(env.get("PROVIDER_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))),
            database_url=env.get("DATABASE_URL") or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
