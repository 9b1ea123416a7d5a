"""Screening score: how close the projected returns come to the investor's targets."""

import math
from dataclasses import dataclass, asdict

DEFAULT_TARGET_IRR = 15.0
DEFAULT_TARGET_EM = 1.8

STRONG_THRESHOLD = 80
MEDIUM_THRESHOLD = 60

# Wording of the executive summary uses its own, lower cut-offs
STRONG_POTENTIAL_THRESHOLD = 70
MODERATE_POTENTIAL_THRESHOLD = 50

RECOMMENDATION_ADVICE = {
    "Advance": "Recommend advancing to full underwriting given attractive risk-adjusted returns.",
    "Monitor": "Recommend monitoring for price discovery while gathering additional market intelligence.",
    "Pass": "Returns do not justify the risk profile. Consider passing unless price adjusts significantly.",
}


@dataclass(frozen=True)
class ScreeningScore:
    return_feasibility: int
    mandate_fit: str       # Weak | Medium | Strong
    recommendation: str    # Pass | Monitor | Advance

    def to_dict(self) -> dict:
        return asdict(self)


def _component(actual: float, target: float) -> float:
    """Percent of target achieved, capped at 100 but not floored."""
    return min(100.0, actual / target * 100)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify(return_feasibility: float) -> tuple[str, str]:
    """Map a feasibility score to (mandate_fit, recommendation). Ties go to the lower tier."""
    if return_feasibility > STRONG_THRESHOLD:
        return "Strong", "Advance"
    if return_feasibility > MEDIUM_THRESHOLD:
        return "Medium", "Monitor"
    return "Weak", "Pass"


def effective_targets(target_irr: float | None = None,
                      target_em: float | None = None) -> tuple[float, float]:
    """Targets actually scored against: blank or non-positive values become 15% / 1.8x."""
    if not target_irr or target_irr <= 0:
        target_irr = DEFAULT_TARGET_IRR
    if not target_em or target_em <= 0:
        target_em = DEFAULT_TARGET_EM
    return target_irr, target_em


def score(projection, target_irr: float | None = None,
          target_em: float | None = None) -> ScreeningScore:
    """Score a ReturnProjection against target IRR (%) and equity multiple.

    Blank or non-positive targets fall back to 15% / 1.8x.
    """
    target_irr, target_em = effective_targets(target_irr, target_em)

    irr_score = _component(projection.irr, target_irr)
    em_score = _component(projection.equity_multiple, target_em)
    feasibility = _round_half_up((irr_score + em_score) / 2)

    mandate_fit, recommendation = classify(feasibility)
    return ScreeningScore(
        return_feasibility=feasibility,
        mandate_fit=mandate_fit,
        recommendation=recommendation,
    )


def return_potential(return_feasibility: float) -> str:
    if return_feasibility > STRONG_POTENTIAL_THRESHOLD:
        return "strong"
    if return_feasibility > MODERATE_POTENTIAL_THRESHOLD:
        return "moderate"
    return "weak"


def summary_text(screening_score: ScreeningScore, projection) -> str:
    """One-paragraph executive summary for the results panel."""
    text = (
        f"Deal shows {return_potential(screening_score.return_feasibility)} return potential "
        f"with base-case IRR of {projection.irr:.1f}% and EM of {projection.equity_multiple:.1f}x."
    )
    advice = RECOMMENDATION_ADVICE.get(screening_score.recommendation)
    return f"{text} {advice}" if advice else text
