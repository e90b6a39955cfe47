from __future__ import annotations

import pandas as pd
import pytest

from kdpniche.features.demand import estimate_daily_sales, estimate_daily_sales_series


@pytest.mark.parametrize(
    ("rank", "expected"),
    [
        (1, 795.0),
        (100, 300.0),
        (1000, 50.0),
        (10000, 10.0),
        (100000, 2.0),
        (500000, 1.0),
        (1_000_000, 0.5),
        (5_000_000, 0.1),
    ],
)
def test_estimate_daily_sales_breakpoints(rank: int, expected: float) -> None:
    assert estimate_daily_sales(rank) == pytest.approx(expected)


def test_unranked_uses_default_rank() -> None:
    assert estimate_daily_sales(None) == pytest.approx(estimate_daily_sales(1_000_000))


def test_ranks_below_one_use_long_tail_branch() -> None:
    assert estimate_daily_sales(0) == pytest.approx(1.5)
    assert estimate_daily_sales(-10) == pytest.approx(1.50001)


def test_curve_is_non_increasing_and_positive() -> None:
    ranks = [1, 2, 50, 99, 100, 101, 999, 1000, 1001, 9999, 10000, 10001, 99999, 100000, 100001]
    ranks += [499999, 500000, 500001, 800000, 1_400_000, 1_500_000, 10_000_000]
    values = [estimate_daily_sales(rank) for rank in ranks]
    assert all(value > 0 for value in values)
    assert all(earlier >= later for earlier, later in zip(values, values[1:]))


def test_series_matches_scalar_curve() -> None:
    ranks = pd.Series([1, 100, 750, None, 42000, 0, 3_000_000], index=list("abcdefg"))
    series = estimate_daily_sales_series(ranks)

    assert list(series.index) == list("abcdefg")
    for label, rank in ranks.items():
        scalar_rank = None if pd.isna(rank) else rank
        assert series[label] == pytest.approx(estimate_daily_sales(scalar_rank))
