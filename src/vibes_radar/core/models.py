"""Pydantic data models: the shared business objects.

Both the MCP server and the HTTP API use these models as the common
interface for prompting, scoring, persistence, and comparison.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SCORE_FIELDS = (
    "sentiment",
    "innovation_score",
    "trust_score",
    "sustainability_score",
    "value_score",
)

# Set by parsing, never taken from a provider reply.
INTERNAL_FIELDS = ("raw_response", "missing_fields")


class Depth(str, Enum):
    """Requested analysis thoroughness."""

    QUICK = "quick"
    STANDARD = "standard"
    DEEP = "deep"


class OutcomeStatus(str, Enum):
    """Result of querying one provider."""

    SUCCESS = "success"
    ERROR = "error"


def coerce_score(value: Any) -> Optional[float]:
    """Return value as a finite float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class AnalysisRequest(BaseModel):
    """One incoming analysis call. Not persisted on its own."""

    brand_name: str = Field(min_length=1, description="Brand to analyze")
    competitors: list[str] = Field(default_factory=list, description="Competitors to position against")
    depth: Depth = Depth.STANDARD

    @field_validator("brand_name")
    @classmethod
    def _strip_brand_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("brand_name is required")
        return v

    @field_validator("competitors", mode="before")
    @classmethod
    def _default_competitors(cls, v: Any) -> Any:
        return [] if v is None else v


class BrandJudgement(BaseModel):
    """A provider's structured brand-perception judgement.

    Parsing is lenient: absent or malformed score fields become 0 instead of
    failing the request. Names of the score fields that had to be defaulted
    are kept in ``missing_fields``. Unknown keys returned by a provider are
    preserved.
    """

    model_config = ConfigDict(extra="allow")

    sentiment: float = Field(0.0, description="-1 (negative) to 1 (positive)")
    attributes: list[str] = Field(default_factory=list, description="Top brand attributes")
    positioning: str = ""
    innovation_score: float = Field(0.0, description="0 to 10")
    trust_score: float = Field(0.0, description="0 to 10")
    sustainability_score: float = Field(0.0, description="0 to 10")
    value_score: float = Field(0.0, description="0 to 10")
    raw_response: Optional[str] = Field(None, description="Unparsed reply when no JSON object was found")
    missing_fields: list[str] = Field(default_factory=list)

    @classmethod
    def from_provider(cls, data: dict) -> BrandJudgement:
        """Validate a provider's JSON object, ignoring keys reserved for parsing."""
        return cls.model_validate({k: v for k, v in data.items() if k not in INTERNAL_FIELDS})

    @model_validator(mode="before")
    @classmethod
    def _lenient_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        computed_missing = []
        for name in SCORE_FIELDS:
            number = coerce_score(data.get(name))
            if number is None:
                computed_missing.append(name)
                data[name] = 0.0
            else:
                data[name] = number
        if not isinstance(data.get("missing_fields"), list):
            data["missing_fields"] = computed_missing

        attributes = data.get("attributes")
        if isinstance(attributes, list):
            data["attributes"] = [str(a) for a in attributes]
        else:
            data["attributes"] = []

        if not isinstance(data.get("positioning"), str):
            data["positioning"] = ""
        return data


class ProviderOutcome(BaseModel):
    """The normalized outcome of one provider call."""

    provider_label: str
    status: OutcomeStatus
    payload: Optional[BrandJudgement] = None
    error_reason: Optional[str] = None
    model: Optional[str] = None

    @classmethod
    def success(cls, provider_label: str, payload: BrandJudgement, model: Optional[str] = None) -> ProviderOutcome:
        return cls(provider_label=provider_label, status=OutcomeStatus.SUCCESS, payload=payload, model=model)

    @classmethod
    def failure(cls, provider_label: str, reason: str, model: Optional[str] = None) -> ProviderOutcome:
        return cls(provider_label=provider_label, status=OutcomeStatus.ERROR, error_reason=reason, model=model)

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS


class ConsensusScores(BaseModel):
    """Per-field mean across successful provider judgements."""

    sentiment: float
    innovation: float
    trust: float
    sustainability: float
    value: float


class ConsensusResult(BaseModel):
    """Consensus judgement derived from all successful provider outcomes."""

    overall_score: int = Field(description="0 to 100")
    scores: Optional[ConsensusScores] = None
    confidence: float = Field(ge=0.0, le=1.0, description="Fraction of configured providers that succeeded")
    models_used: int = 0
    message: Optional[str] = None


class AnalysisResult(BaseModel):
    """Full result of one analysis: request, provider outcomes, and consensus."""

    brand_name: str
    competitors: list[str] = Field(default_factory=list)
    depth: Depth = Depth.STANDARD
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    models: dict[str, ProviderOutcome] = Field(default_factory=dict)
    consensus: ConsensusResult


class AnalysisRecord(BaseModel):
    """A persisted analysis. Immutable once written."""

    id: int
    brand_name: str
    competitors: list[str] = Field(default_factory=list)
    results: dict[str, Any] = Field(description="Serialized AnalysisResult")
    consensus_score: int
    created_at: datetime


class BrandReports(BaseModel):
    """Most recent analysis records for one brand."""

    brand_name: str
    total_reports: int
    reports: list[AnalysisRecord]


class ComparisonWinner(BaseModel):
    """Outcome of comparing two consensus scores."""

    result: str = Field(description="'tie' or the name of the winning brand")
    margin: Optional[int] = None
    message: Optional[str] = None


class PartialComparison(BaseModel):
    """Returned when at least one brand has no stored analysis."""

    status: Literal["partial"] = "partial"
    message: str = "One or both brands need fresh analysis"
    available: dict[str, bool]


class BrandComparison(BaseModel):
    """Side-by-side latest analyses of two brands with a winner."""

    comparison: dict[str, AnalysisRecord]
    winner: ComparisonWinner
