import asyncio
from datetime import datetime, timezone

import pytest
import pytest_asyncio

from vibes_radar.core.clients.base import ProviderClient
from vibes_radar.core.errors import ParseError
from vibes_radar.core.models import (
    AnalysisRecord,
    AnalysisResult,
    BrandJudgement,
    ConsensusResult,
    ConsensusScores,
    ProviderOutcome,
)
from vibes_radar.db import close_db, create_engine, create_session_factory, init_db
from vibes_radar.store import ReportStore


class FakeProvider(ProviderClient):
    """Provider double: returns a canned body or raises a canned error."""

    def __init__(self, label, body=None, error=None, model="fake-model"):
        super().__init__(api_key="test-key", model=model)
        self.label = label
        self.body = body
        self.error = error
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.body

    def parse_reply(self, body):
        if not isinstance(body, dict) or "judgement" not in body:
            raise ParseError("no judgement in body")
        return BrandJudgement.model_validate(body["judgement"])


@pytest.fixture
def sample_judgement():
    return {
        "sentiment": 0.5,
        "attributes": ["innovative", "premium", "reliable", "sleek", "expensive"],
        "positioning": "Premium leader",
        "innovation_score": 8,
        "trust_score": 7,
        "sustainability_score": 6,
        "value_score": 9,
    }


@pytest.fixture
def make_outcome():
    def _make(label, judgement=None, error=None):
        if error is not None:
            return ProviderOutcome.failure(label, error)
        return ProviderOutcome.success(label, BrandJudgement.model_validate(judgement))
    return _make


@pytest.fixture
def make_result():
    def _make(brand_name="Acme", overall_score=75, competitors=None):
        return AnalysisResult(
            brand_name=brand_name,
            competitors=competitors or [],
            models={},
            consensus=ConsensusResult(
                overall_score=overall_score,
                scores=ConsensusScores(sentiment=0.5, innovation=8, trust=7, sustainability=6, value=9),
                confidence=1.0,
                models_used=2,
            ),
        )
    return _make


@pytest.fixture
def make_record():
    def _make(brand_name="Acme", consensus_score=75, record_id=1):
        return AnalysisRecord(
            id=record_id,
            brand_name=brand_name,
            competitors=[],
            results={"brand_name": brand_name},
            consensus_score=consensus_score,
            created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )
    return _make


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest.fixture
def store(engine):
    return ReportStore(create_session_factory(engine))
