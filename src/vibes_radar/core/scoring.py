"""Multi-model consensus scoring.

Turns the per-provider outcomes of one analysis into a single consensus
judgement, and decides the winner when two stored consensus scores are
compared. Both functions are pure.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from .models import (
    BrandJudgement,
    ComparisonWinner,
    ConsensusResult,
    ConsensusScores,
    ProviderOutcome,
    coerce_score,
)

logger = logging.getLogger(__name__)

# Score differences below this are reported as a tie.
TIE_MARGIN = 5

NO_VALID_RESPONSES = "No valid model responses"


def _field(judgement: BrandJudgement | None, name: str) -> float:
    if judgement is None:
        return 0.0
    number = coerce_score(getattr(judgement, name, None))
    return 0.0 if number is None else number


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, with .5 going away from zero."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def aggregate(outcomes: Mapping[str, ProviderOutcome]) -> ConsensusResult:
    """Compute the consensus judgement across provider outcomes.

    Only successful outcomes contribute. Each of the five numeric fields is
    averaged; sentiment is rescaled from [-1, 1] to [0, 100] and each 0-10
    score is multiplied by 10, then the five [0, 100] signals are averaged
    with equal weight. Confidence is the fraction of configured providers
    that succeeded.
    """
    valid = [o for o in outcomes.values() if o.succeeded]

    if not valid:
        return ConsensusResult(
            overall_score=0,
            confidence=0.0,
            models_used=0,
            message=NO_VALID_RESPONSES,
        )

    judgements = [o.payload for o in valid]
    scores = ConsensusScores(
        sentiment=_mean([_field(j, "sentiment") for j in judgements]),
        innovation=_mean([_field(j, "innovation_score") for j in judgements]),
        trust=_mean([_field(j, "trust_score") for j in judgements]),
        sustainability=_mean([_field(j, "sustainability_score") for j in judgements]),
        value=_mean([_field(j, "value_score") for j in judgements]),
    )

    overall = (
        (scores.sentiment + 1) * 50
        + scores.innovation * 10
        + scores.trust * 10
        + scores.sustainability * 10
        + scores.value * 10
    ) / 5

    confidence = len(valid) / len(outcomes)
    logger.debug("Consensus from %d/%d providers: %.3f", len(valid), len(outcomes), overall)

    return ConsensusResult(
        overall_score=round_half_away_from_zero(overall),
        scores=scores,
        confidence=confidence,
        models_used=len(valid),
    )


def decide_winner(brand1: str, score1: int, brand2: str, score2: int) -> ComparisonWinner:
    """Pick the brand with the higher consensus score, or a tie within TIE_MARGIN."""
    margin = abs(score1 - score2)
    if margin < TIE_MARGIN:
        return ComparisonWinner(result="tie", message="Brands are evenly matched")
    return ComparisonWinner(
        result=brand1 if score1 > score2 else brand2,
        margin=margin,
    )
