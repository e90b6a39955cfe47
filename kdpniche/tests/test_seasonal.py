from __future__ import annotations

import pytest

from kdpniche.features.seasonal import (
    FALLBACK_PATTERN,
    match_pattern,
    optimal_launch_timing,
    patterns_from_config,
    seasonal_factors,
)


def test_first_matching_niche_wins() -> None:
    assert match_pattern("Keto Diet Cookbook").niche == "diet"
    assert match_pattern("Holiday COOKBOOK for kids").niche == "cookbook"
    assert match_pattern("Gardening for beginners") == FALLBACK_PATTERN


@pytest.mark.parametrize(
    ("keyword", "month", "expected"),
    [
        ("Keto Diet Cookbook", 0, 1.2),
        ("Keto Diet Cookbook", 6, 0.88),
        ("Keto Diet Cookbook", 3, 1.0),
        ("christmas coloring book", 11, 1.4),
        ("christmas coloring book", 5, 0.76),
        ("gardening", 0, 1.1),
        ("gardening", 7, 0.94),
    ],
)
def test_current_multiplier(keyword: str, month: int, expected: float) -> None:
    assert seasonal_factors(keyword, current_month=month).current_multiplier == pytest.approx(expected)


def test_factors_expose_pattern_months() -> None:
    factors = seasonal_factors("Summer Reading", current_month=5)

    assert factors.peak_months == [4, 5, 6]
    assert factors.low_months == [11, 0, 1]
    assert factors.volatility == 0.5


def test_months_are_zero_indexed() -> None:
    with pytest.raises(ValueError):
        seasonal_factors("diet", current_month=12)
    with pytest.raises(ValueError):
        seasonal_factors("diet", current_month=-1)


def test_patterns_from_config_override_table() -> None:
    patterns = patterns_from_config(
        [{"niche": "Gardening", "peak": [2, 3], "low": [10], "volatility": 0.6}]
    )

    factors = seasonal_factors("Gardening for beginners", current_month=2, patterns=patterns)
    assert factors.peak_months == [2, 3]
    assert factors.current_multiplier == pytest.approx(1.3)


def test_patterns_from_config_rejects_bad_entries() -> None:
    with pytest.raises(ValueError):
        patterns_from_config([{"niche": "x", "peak": [13]}])
    with pytest.raises(ValueError):
        patterns_from_config([{"niche": "x", "volatility": 1.5}])


def test_launch_timing_without_publication_pressure() -> None:
    factors = seasonal_factors("gardening", current_month=3)
    timing = optimal_launch_timing(factors, [30] * 12, current_month=3)

    assert timing.best_launch_month == 0
    assert timing.worst_launch_month == 6
    assert timing.urgency == "low"
    assert timing.reasoning.startswith("January shows optimal conditions")


def test_launch_timing_prefers_quiet_months() -> None:
    factors = seasonal_factors("gardening", current_month=6)
    publications = [60] * 12
    publications[4] = 5
    timing = optimal_launch_timing(factors, publications, current_month=6)

    assert timing.best_launch_month == 4
    assert timing.worst_launch_month == 6
    assert timing.urgency == "high"
