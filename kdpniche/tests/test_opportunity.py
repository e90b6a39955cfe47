from __future__ import annotations

import pytest

from kdpniche.features.opportunity import (
    OpportunityFactors,
    ScoringStrategy,
    calculate_market_saturation,
    calculate_opportunity_score,
    demand_score,
    saturation_score,
    score_breakdown,
    success_score,
)


def _factors(**overrides: float) -> OpportunityFactors:
    values = {
        "total_sales": 755.5,
        "self_pub_percentage": 50.0,
        "success_rate": 75.0,
        "new_publications": 2,
        "avg_rank": 251387.5,
    }
    values.update(overrides)
    return OpportunityFactors(**values)


def test_full_strategy_sums_all_five_sub_scores() -> None:
    breakdown = score_breakdown(_factors(), ScoringStrategy.FULL)

    assert (breakdown.demand, breakdown.competition, breakdown.self_pub, breakdown.success) == (5, 20, 12, 12)
    assert breakdown.saturation == 10
    assert calculate_opportunity_score(_factors()) == 59


def test_bulk_strategy_omits_saturation() -> None:
    breakdown = score_breakdown(_factors(), ScoringStrategy.BULK)

    assert breakdown.saturation is None
    assert calculate_opportunity_score(_factors(), ScoringStrategy.BULK) == 49
    assert calculate_opportunity_score(_factors(), "bulk") == 49


def test_score_extremes_stay_in_bounds() -> None:
    best = _factors(total_sales=60000, avg_rank=600000, self_pub_percentage=90, success_rate=90, new_publications=5)
    worst = _factors(total_sales=0, avg_rank=1000, self_pub_percentage=0, success_rate=0, new_publications=100)

    assert calculate_opportunity_score(best) == 100
    assert calculate_opportunity_score(best, ScoringStrategy.BULK) == 90
    assert calculate_opportunity_score(worst) == 19
    assert calculate_opportunity_score(worst, ScoringStrategy.BULK) == 17


def test_thresholds_are_strict() -> None:
    assert demand_score(50000) == 25
    assert demand_score(50001) == 30
    assert success_score(80) == 12
    assert saturation_score(10) == 8
    assert saturation_score(9) == 10
    assert saturation_score(60) == 2


def test_unknown_strategy_is_rejected() -> None:
    with pytest.raises(ValueError):
        calculate_opportunity_score(_factors(), "partial")


def test_market_saturation_levels() -> None:
    roomy = calculate_market_saturation(total_books=100, new_books_30d=3, total_sales=20000)
    assert roomy.saturation_level == "low"
    assert roomy.score == 100
    assert roomy.books_per_sale == pytest.approx(0.005)

    balanced = calculate_market_saturation(total_books=1500, new_books_30d=10, total_sales=20000)
    assert balanced.saturation_level == "medium"
    assert balanced.score == 50

    crowded = calculate_market_saturation(total_books=6000, new_books_30d=300, total_sales=0)
    assert crowded.saturation_level == "high"
    assert crowded.score == 0
    assert crowded.books_per_sale == 999.0
