from types import SimpleNamespace

import pytest

from models.scoring import ScreeningScore, classify, effective_targets, score, summary_text


def _projection(irr, em):
    # Only the fields score() reads need to exist
    return SimpleNamespace(irr=irr, equity_multiple=em)


def test_scenario_scores_medium_monitor():
    # IRR ~9.94% vs 15% target, EM ~1.61x vs 1.8x target
    s = score(_projection(9.937, 1.6059), 15, 1.8)
    assert s.return_feasibility == 78
    assert s.mandate_fit == "Medium"
    assert s.recommendation == "Monitor"


def test_targets_met_scores_strong_advance():
    s = score(_projection(22.0, 2.5), 15, 1.8)
    assert s.return_feasibility == 100
    assert (s.mandate_fit, s.recommendation) == ("Strong", "Advance")


def test_components_are_capped_at_100_but_not_floored():
    s = score(_projection(-15.0, 0.0), 15, 1.8)
    # irr component -100, em component 0
    assert s.return_feasibility == -50
    assert s.recommendation == "Pass"


@pytest.mark.parametrize("feasibility, expected", [
    (81, ("Strong", "Advance")),
    (80, ("Medium", "Monitor")),
    (61, ("Medium", "Monitor")),
    (60, ("Weak", "Pass")),
    (0, ("Weak", "Pass")),
])
def test_classification_ties_fall_to_lower_tier(feasibility, expected):
    assert classify(feasibility) == expected


def test_score_rounding_to_exactly_80_is_medium():
    # IRR component capped at 100, EM component 59.2 -> average 79.6 -> 80
    s = score(_projection(30.0, 0.592), 15, 1.0)
    assert s.return_feasibility == 80
    assert s.mandate_fit == "Medium"
    assert s.recommendation == "Monitor"


def test_score_is_monotonic_in_irr():
    previous = None
    for irr in [x * 0.5 for x in range(-40, 80)]:
        current = score(_projection(irr, 1.5), 15, 1.8).return_feasibility
        if previous is not None:
            assert current >= previous
        previous = current


@pytest.mark.parametrize("target_irr, target_em", [(None, None), (0, 0), (-5, -1)])
def test_missing_targets_default_to_15_and_1_8(target_irr, target_em):
    defaulted = score(_projection(12.0, 1.5), target_irr, target_em)
    explicit = score(_projection(12.0, 1.5), 15, 1.8)
    assert defaulted == explicit


@pytest.mark.parametrize("feasibility, potential", [
    (71, "strong"),
    (70, "moderate"),
    (51, "moderate"),
    (50, "weak"),
])
def test_summary_potential_cutoffs(feasibility, potential):
    s = ScreeningScore(feasibility, *classify(feasibility))
    text = summary_text(s, _projection(9.937, 1.6059))
    assert text.startswith(f"Deal shows {potential} return potential ")


def test_summary_for_scenario_reads_like_results_panel():
    s = score(_projection(9.937, 1.6059), 15, 1.8)
    assert summary_text(s, _projection(9.937, 1.6059)) == (
        "Deal shows strong return potential with base-case IRR of 9.9% and EM of 1.6x. "
        "Recommend monitoring for price discovery while gathering additional market intelligence."
    )


@pytest.mark.parametrize("recommendation, phrase", [
    ("Advance", "advancing to full underwriting"),
    ("Pass", "Consider passing unless price adjusts"),
])
def test_summary_advice_follows_recommendation(recommendation, phrase):
    s = ScreeningScore(90, "Strong", recommendation)
    assert phrase in summary_text(s, _projection(20.0, 2.0))


def test_effective_targets_replace_blank_and_non_positive():
    assert effective_targets(None, 0) == (15.0, 1.8)
    assert effective_targets(12.0, 2.1) == (12.0, 2.1)
