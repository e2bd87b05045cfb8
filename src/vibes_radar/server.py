"""AI Vibes Radar MCP server.

FastMCP server exposing brand-perception analysis, report history, and
brand comparison as tools.
Run: vibes-radar-mcp
"""

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations
from pydantic import BaseModel, ValidationError

from .config import Settings, configure_logging
from .core.errors import VibesRadarError
from .core.models import AnalysisRequest
from .db import close_db, create_engine, create_session_factory, init_db
from .service import DEFAULT_REPORT_LIMIT, BrandRadarService, build_service

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
ANALYZE = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True)


@dataclass
class AppContext:
    service: BrandRadarService


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Open the database and wire providers from the environment."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    engine = create_engine(settings.database_url)
    await init_db(engine)
    try:
        yield AppContext(service=build_service(settings, create_session_factory(engine)))
    finally:
        await close_db(engine)


mcp = FastMCP(
    "AI Vibes Radar",
    instructions="Ask how language models perceive a brand. Queries several model providers, merges their judgements into one consensus score, and keeps a history for comparisons.",
    lifespan=lifespan,
)


def _service(ctx: Context) -> BrandRadarService:
    return ctx.request_context.lifespan_context.service


def _to_text(model: BaseModel) -> str:
    return json.dumps(model.model_dump(mode="json", exclude_none=True), indent=2)


# ─── Tool 1: Analyze ─────────────────────────────────────────────────────────


@mcp.tool(annotations=ANALYZE)
async def analyze_brand_perception(
    brand_name: str,
    competitors: Optional[list[str]] = None,
    depth: str = "standard",
    ctx: Context = None,
) -> str:
    """Analyze how AI models perceive a brand and compute a consensus score.

    Args:
        brand_name: Brand to analyze.
        competitors: Optional competitor brands to position against.
        depth: Analysis depth: 'quick', 'standard', or 'deep'. Default 'standard'.
    """
    if not brand_name or not brand_name.strip():
        raise ToolError("brand_name is required")
    try:
        request = AnalysisRequest(brand_name=brand_name, competitors=competitors or [], depth=depth)
    except ValidationError as exc:
        raise ToolError(f"Invalid arguments: {exc}") from exc

    try:
        result = await _service(ctx).analyze(request)
    except VibesRadarError as exc:
        raise ToolError(str(exc)) from exc
    return _to_text(result)


# ─── Tool 2: Reports ─────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def get_brand_reports(brand_name: str, limit: int = DEFAULT_REPORT_LIMIT, ctx: Context = None) -> str:
    """Most recent stored analyses for a brand, newest first.

    Args:
        brand_name: Brand whose history to return.
        limit: Maximum number of reports. Default 10.
    """
    if not brand_name or not brand_name.strip():
        raise ToolError("brand_name is required")
    if limit < 1:
        limit = DEFAULT_REPORT_LIMIT

    try:
        reports = await _service(ctx).get_reports(brand_name, limit)
    except VibesRadarError as exc:
        raise ToolError(str(exc)) from exc
    return _to_text(reports)


# ─── Tool 3: Compare ─────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def compare_brands(brand1: str, brand2: str, ctx: Context = None) -> str:
    """Compare the latest stored analyses of two brands and pick a winner.

    Scores within 5 points of each other are a tie. If either brand has never
    been analyzed, the result says which one needs a fresh analysis.

    Args:
        brand1: First brand.
        brand2: Second brand.
    """
    if not brand1 or not brand2:
        raise ToolError("brand1 and brand2 are required")

    comparison = await _service(ctx).compare(brand1, brand2)
    return _to_text(comparison)


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
