"""Demand trend classification from rank history."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Mapping

import numpy as np

from kdpniche.features.demand import estimate_daily_sales
from kdpniche.models import coerce_date
from kdpniche.utils.numbers import round_to

DEFAULT_WINDOW_DAYS = 90
RISING_SLOPE = 0.1
DECLINING_SLOPE = -0.1


@dataclass(frozen=True, slots=True)
class TrendAnalysis:
    direction: str
    strength: float
    confidence: float
    monthly_change: float


NEUTRAL_TREND = TrendAnalysis(direction="stable", strength=50, confidence=30, monthly_change=0)


@dataclass(frozen=True, slots=True)
class RegressionFit:
    slope: float
    intercept: float
    r_squared: float


def _field(point: Any, name: str) -> Any:
    if isinstance(point, Mapping):
        return point.get(name)
    return getattr(point, name, None)


def linear_regression(values: np.ndarray) -> RegressionFit:
    """Least-squares fit of ``values`` against their index ``0..n-1``.

    R-squared is ``0`` when the series has no variance and is floored at ``0``.
    """

    y = np.asarray(values, dtype=float)
    n = y.size
    if n < 2:
        return RegressionFit(slope=0.0, intercept=float(y.mean()) if n else 0.0, r_squared=0.0)
    x = np.arange(n, dtype=float)
    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()
    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n
    y_mean = sum_y / n
    ss_res = float(((y - (slope * x + intercept)) ** 2).sum())
    ss_tot = float(((y - y_mean) ** 2).sum())
    r_squared = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0
    return RegressionFit(slope=float(slope), intercept=float(intercept), r_squared=max(0.0, r_squared))


def _ordered_demand(
    history: Iterable[Any],
    window_days: int,
    as_of: date | None,
) -> list[float]:
    cutoff = as_of - timedelta(days=window_days) if as_of is not None else None
    dated: list[tuple[date, int, float]] = []
    for position, point in enumerate(history):
        observed = coerce_date(_field(point, "date"))
        if observed is None:
            continue
        if cutoff is not None and observed < cutoff:
            continue
        dated.append((observed, position, estimate_daily_sales(_field(point, "rank"))))
    dated.sort(key=lambda item: (item[0], item[1]))
    return [demand for _, _, demand in dated]


def analyze_trend(
    history: Iterable[Any] | None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    as_of: date | None = None,
) -> TrendAnalysis:
    """Classify the demand trend for a keyword's rank history.

    Parameters
    ----------
    history:
        Rank observations exposing ``rank`` and ``date`` (attributes or mapping
        keys).  Input order does not matter; points are ordered by date.
    window_days:
        Only points newer than ``as_of - window_days`` are used when ``as_of``
        is provided.
    as_of:
        Reference date for the window.  ``None`` keeps every point.

    Returns
    -------
    TrendAnalysis
        :data:`NEUTRAL_TREND` when fewer than two points are available.
    """

    if history is None:
        return NEUTRAL_TREND
    demand = _ordered_demand(history, window_days, as_of)
    if len(demand) < 2:
        return NEUTRAL_TREND

    values = np.asarray(demand, dtype=float)
    fit = linear_regression(values)
    mean_demand = float(values.mean())
    monthly_change = fit.slope * 30 / mean_demand * 100 if mean_demand > 0 else 0.0

    if fit.slope > RISING_SLOPE:
        direction = "rising"
    elif fit.slope < DECLINING_SLOPE:
        direction = "declining"
    else:
        direction = "stable"

    return TrendAnalysis(
        direction=direction,
        strength=min(100.0, abs(fit.slope) * 1000),
        confidence=min(100.0, fit.r_squared * 100),
        monthly_change=round_to(monthly_change, 2),
    )


__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "NEUTRAL_TREND",
    "RegressionFit",
    "TrendAnalysis",
    "analyze_trend",
    "linear_regression",
]
