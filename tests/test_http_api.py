from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from vibes_radar.core.errors import AnalysisError, StoreError
from vibes_radar.core.models import BrandComparison, BrandReports, ComparisonWinner, PartialComparison
from vibes_radar.http_api import create_app
from vibes_radar.service import BrandRadarService


@pytest.fixture
def service():
    mock = MagicMock(spec=BrandRadarService)
    mock.analyze = AsyncMock()
    mock.get_reports = AsyncMock()
    mock.compare = AsyncMock()
    return mock


@pytest.fixture
def client(service):
    return TestClient(create_app(service=service))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["service"] == "ai-vibes-radar-mcp"
    assert body["version"] == "1.0.0"
    assert "timestamp" in body


@pytest.mark.parametrize("payload", [{}, {"brand_name": ""}, {"brand_name": "   "}])
def test_analyze_requires_brand_name(client, service, payload):
    response = client.post("/analyze", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "brand_name is required"}
    service.analyze.assert_not_called()


def test_analyze_without_body_is_400(client, service):
    response = client.post("/analyze")

    assert response.status_code == 400
    assert response.json() == {"error": "brand_name is required"}
    service.analyze.assert_not_called()


@pytest.mark.parametrize("payload", [
    {"brand_name": "Acme", "depth": "exhaustive"},
    {"brand_name": 123},
    {"brand_name": "Acme", "competitors": "Globex"},
    ["Acme"],
])
def test_analyze_rejects_malformed_body(client, service, payload):
    response = client.post("/analyze", json=payload)

    assert response.status_code == 400
    assert "error" in response.json()
    service.analyze.assert_not_called()


def test_analyze_rejects_invalid_json(client, service):
    response = client.post("/analyze", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request body")
    service.analyze.assert_not_called()


def test_analyze_returns_result(client, service, make_result):
    service.analyze.return_value = make_result("Acme", 75, competitors=["Globex"])

    response = client.post("/analyze", json={"brand_name": "Acme", "competitors": ["Globex"], "depth": "quick"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["consensus"]["overall_score"] == 75
    request = service.analyze.await_args.args[0]
    assert request.brand_name == "Acme"
    assert request.competitors == ["Globex"]
    assert request.depth.value == "quick"


def test_analyze_failure_is_500(client, service):
    service.analyze.side_effect = AnalysisError("Failed to analyze brand: boom")

    response = client.post("/analyze", json={"brand_name": "Acme"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to analyze brand: boom"}


@pytest.mark.parametrize("query,expected", [("", 10), ("?limit=3", 3), ("?limit=abc", 10), ("?limit=0", 10)])
def test_reports_limit(client, service, make_record, query, expected):
    service.get_reports.return_value = BrandReports(
        brand_name="Acme", total_reports=1, reports=[make_record("Acme", 70)],
    )

    response = client.get(f"/reports/Acme{query}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["brand_name"] == "Acme"
    assert data["total_reports"] == 1
    assert data["reports"][0]["consensus_score"] == 70
    service.get_reports.assert_awaited_once_with("Acme", expected)


def test_reports_store_failure_is_500(client, service):
    service.get_reports.side_effect = StoreError("no such table: analysis_results")

    response = client.get("/reports/Acme")

    assert response.status_code == 500
    assert response.json()["success"] is False


@pytest.mark.parametrize("payload", [{}, {"brand1": "Acme"}, {"brand2": "Globex"}])
def test_compare_requires_both_brands(client, service, payload):
    response = client.post("/compare", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "brand1 and brand2 are required"}


def test_compare_without_body_is_400(client, service):
    response = client.post("/compare")

    assert response.status_code == 400
    assert response.json() == {"error": "brand1 and brand2 are required"}
    service.compare.assert_not_called()


def test_compare_rejects_non_string_brand(client, service):
    response = client.post("/compare", json={"brand1": "Acme", "brand2": ["Globex"]})

    assert response.status_code == 400
    service.compare.assert_not_called()


def test_compare_partial(client, service):
    service.compare.return_value = PartialComparison(available={"Acme": True, "Globex": False})

    response = client.post("/compare", json={"brand1": "Acme", "brand2": "Globex"})

    assert response.status_code == 200
    assert response.json()["data"] == {
        "status": "partial",
        "message": "One or both brands need fresh analysis",
        "available": {"Acme": True, "Globex": False},
    }


def test_compare_winner(client, service, make_record):
    service.compare.return_value = BrandComparison(
        comparison={"Acme": make_record("Acme", 60, 1), "Globex": make_record("Globex", 70, 2)},
        winner=ComparisonWinner(result="Globex", margin=10),
    )

    response = client.post("/compare", json={"brand1": "Acme", "brand2": "Globex"})

    data = response.json()["data"]
    assert data["winner"] == {"result": "Globex", "margin": 10}
    assert data["comparison"]["Globex"]["consensus_score"] == 70
