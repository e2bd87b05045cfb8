"""Prompt construction for brand-perception requests."""

from __future__ import annotations

from .models import AnalysisRequest

RESPONSE_KEYS = (
    "sentiment",
    "attributes",
    "positioning",
    "innovation_score",
    "trust_score",
    "sustainability_score",
    "value_score",
)


def build_prompt(request: AnalysisRequest) -> str:
    """Build the single prompt sent to every provider for one analysis.

    Depth is accepted on the request but does not change the prompt.
    """
    subject = f'Analyze the brand perception of "{request.brand_name}"'
    if request.competitors:
        subject += f" compared to competitors: {', '.join(request.competitors)}"

    return (
        f"{subject}.\n"
        "\n"
        "Provide a detailed analysis including:\n"
        "1. Overall sentiment score (-1 to 1)\n"
        "2. Key brand attributes (top 5)\n"
        "3. Competitive positioning\n"
        "4. Innovation score (0-10)\n"
        "5. Trust score (0-10)\n"
        "6. Sustainability score (0-10)\n"
        "7. Value perception score (0-10)\n"
        "\n"
        f"Format as JSON with these exact keys: {', '.join(RESPONSE_KEYS)}"
    )
