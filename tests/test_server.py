import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from vibes_radar.core.errors import AnalysisError
from vibes_radar.core.models import BrandReports, PartialComparison
from vibes_radar.server import (
    AppContext,
    analyze_brand_perception,
    compare_brands,
    get_brand_reports,
    mcp,
)
from vibes_radar.service import BrandRadarService


@pytest.fixture
def service():
    mock = MagicMock(spec=BrandRadarService)
    mock.analyze = AsyncMock()
    mock.get_reports = AsyncMock()
    mock.compare = AsyncMock()
    return mock


@pytest.fixture
def ctx(service):
    return SimpleNamespace(request_context=SimpleNamespace(lifespan_context=AppContext(service=service)))


@pytest.mark.asyncio
async def test_tools_are_registered():
    tools = await mcp.list_tools()
    names = {t.name for t in tools}
    assert {"analyze_brand_perception", "get_brand_reports", "compare_brands"} <= names


@pytest.mark.asyncio
async def test_analyze_returns_json_text(ctx, service, make_result):
    service.analyze.return_value = make_result("Acme", 75)

    text = await analyze_brand_perception("Acme", competitors=["Globex"], depth="deep", ctx=ctx)

    payload = json.loads(text)
    assert payload["brand_name"] == "Acme"
    assert payload["consensus"]["overall_score"] == 75
    request = service.analyze.await_args.args[0]
    assert request.competitors == ["Globex"]
    assert request.depth.value == "deep"


@pytest.mark.asyncio
async def test_analyze_validation_errors(ctx, service):
    with pytest.raises(ToolError, match="brand_name is required"):
        await analyze_brand_perception("  ", ctx=ctx)
    with pytest.raises(ToolError, match="Invalid arguments"):
        await analyze_brand_perception("Acme", depth="exhaustive", ctx=ctx)
    service.analyze.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_failure_sets_error(ctx, service):
    service.analyze.side_effect = AnalysisError("Failed to analyze brand: boom")

    with pytest.raises(ToolError, match="Failed to analyze brand: boom"):
        await analyze_brand_perception("Acme", ctx=ctx)


@pytest.mark.asyncio
async def test_get_brand_reports(ctx, service):
    service.get_reports.return_value = BrandReports(brand_name="Acme", total_reports=0, reports=[])

    text = await get_brand_reports("Acme", limit=0, ctx=ctx)

    assert json.loads(text) == {"brand_name": "Acme", "total_reports": 0, "reports": []}
    service.get_reports.assert_awaited_once_with("Acme", 10)


@pytest.mark.asyncio
async def test_compare_brands(ctx, service):
    service.compare.return_value = PartialComparison(available={"Acme": False, "Globex": True})

    text = await compare_brands("Acme", "Globex", ctx=ctx)

    assert json.loads(text)["available"] == {"Acme": False, "Globex": True}

    with pytest.raises(ToolError):
        await compare_brands("Acme", "", ctx=ctx)
