from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import numpy as np
import pytest

from kdpniche.features.trend import NEUTRAL_TREND, analyze_trend, linear_regression
from kdpniche.tests.data import (
    AS_OF,
    build_declining_history,
    build_flat_history,
    build_rising_history,
)


def test_short_histories_return_neutral_trend() -> None:
    assert analyze_trend(None) == NEUTRAL_TREND
    assert analyze_trend([]) == NEUTRAL_TREND
    assert analyze_trend(build_rising_history(days=1)) == NEUTRAL_TREND
    assert (NEUTRAL_TREND.direction, NEUTRAL_TREND.strength, NEUTRAL_TREND.confidence) == ("stable", 50, 30)


def test_improving_ranks_are_rising_demand() -> None:
    trend = analyze_trend(build_rising_history())

    assert trend.direction == "rising"
    assert trend.strength == 100
    assert trend.confidence == pytest.approx(100.0)
    assert trend.monthly_change == pytest.approx(352.94)


def test_worsening_ranks_are_declining_demand() -> None:
    trend = analyze_trend(build_declining_history())

    assert trend.direction == "declining"
    assert trend.monthly_change == pytest.approx(-352.94)


def test_flat_history_is_stable_without_confidence() -> None:
    trend = analyze_trend(build_flat_history())

    assert trend.direction == "stable"
    assert trend.strength == 0
    assert trend.confidence == 0
    assert trend.monthly_change == 0


def test_points_are_ordered_by_date() -> None:
    history = build_rising_history()
    shuffled = history[::2] + history[1::2]

    assert analyze_trend(shuffled) == analyze_trend(history)


def test_mapping_points_are_accepted() -> None:
    history = [{"rank": point.rank, "date": point.date.isoformat()} for point in build_rising_history()]

    assert analyze_trend(history).direction == "rising"


def test_window_drops_points_older_than_cutoff() -> None:
    stale = [replace(point, date=point.date - timedelta(days=200)) for point in build_declining_history()]
    history = stale + build_rising_history()

    windowed = analyze_trend(history, 90, as_of=AS_OF)
    assert windowed == analyze_trend(build_rising_history())

    too_narrow = analyze_trend(history, 0, as_of=AS_OF)
    assert too_narrow == NEUTRAL_TREND


def test_linear_regression_exact_fit() -> None:
    fit = linear_regression(np.array([1.0, 3.0, 5.0, 7.0]))

    assert fit.slope == pytest.approx(2.0)
    assert fit.intercept == pytest.approx(1.0)
    assert fit.r_squared == pytest.approx(1.0)
