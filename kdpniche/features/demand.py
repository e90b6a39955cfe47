"""Sales-rank to daily demand conversion.

This curve is the only place rank semantics live; every aggregate in the
package converts ranks through :func:`estimate_daily_sales` or its vectorised
twin :func:`estimate_daily_sales_series`.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from kdpniche.models import DEFAULT_UNRANKED_RANK

# (upper rank bound, base sales, anchor rank, slope)
_BREAKPOINTS: tuple[tuple[int, float, int, float], ...] = (
    (100, 300.0, 100, 5.0),
    (1_000, 50.0, 1_000, 0.25),
    (10_000, 10.0, 10_000, 0.004),
    (100_000, 2.0, 100_000, 0.00008),
    (500_000, 1.0, 500_000, 0.000002),
)
_TAIL_ANCHOR = 500_000
_TAIL_SLOPE = 0.000001
_TAIL_FLOOR = 0.1


def estimate_daily_sales(rank: int | float | None) -> float:
    """Return the estimated daily unit sales for a sales rank.

    ``None`` is treated as unranked (:data:`DEFAULT_UNRANKED_RANK`).  Ranks
    below 1 fall through to the long-tail branch.
    """

    r = DEFAULT_UNRANKED_RANK if rank is None else rank
    if r >= 1:
        for upper, base, anchor, slope in _BREAKPOINTS:
            if r <= upper:
                return base + (anchor - r) * slope
    return max(_TAIL_FLOOR, 1 - (r - _TAIL_ANCHOR) * _TAIL_SLOPE)


def estimate_daily_sales_series(ranks: pd.Series) -> pd.Series:
    """Vectorised :func:`estimate_daily_sales` for a Series of ranks."""

    values = pd.to_numeric(ranks, errors="coerce").astype(float).fillna(float(DEFAULT_UNRANKED_RANK))
    r = values.to_numpy(dtype=float)
    valid = r >= 1
    conditions = []
    choices = []
    for upper, base, anchor, slope in _BREAKPOINTS:
        conditions.append(valid & (r <= upper))
        choices.append(base + (anchor - r) * slope)
    tail = np.maximum(_TAIL_FLOOR, 1 - (r - _TAIL_ANCHOR) * _TAIL_SLOPE)
    result = np.select(conditions, choices, default=tail)
    return pd.Series(result, index=ranks.index, dtype=float)


__all__ = ["estimate_daily_sales", "estimate_daily_sales_series"]
