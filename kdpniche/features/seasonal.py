"""Seasonality heuristics keyed on niche keywords."""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from kdpniche.utils.numbers import format_number, round_to


@dataclass(frozen=True, slots=True)
class SeasonalPattern:
    niche: str
    peak: tuple[int, ...]
    low: tuple[int, ...]
    volatility: float


@dataclass(frozen=True, slots=True)
class SeasonalFactors:
    current_multiplier: float
    peak_months: list[int]
    low_months: list[int]
    volatility: float


# Ordered: the first niche contained in the keyword wins.
DEFAULT_PATTERNS: tuple[SeasonalPattern, ...] = (
    SeasonalPattern("weight loss", (0, 1, 11), (5, 6, 7), 0.4),
    SeasonalPattern("diet", (0, 1, 11), (5, 6, 7), 0.4),
    SeasonalPattern("fitness", (0, 1, 4), (10, 11), 0.3),
    SeasonalPattern("cookbook", (10, 11, 0), (6, 7, 8), 0.2),
    SeasonalPattern("christmas", (10, 11), (1, 2, 3, 4, 5, 6, 7, 8, 9), 0.8),
    SeasonalPattern("summer", (4, 5, 6), (11, 0, 1), 0.5),
    SeasonalPattern("business", (0, 8, 9), (6, 7, 11), 0.2),
    SeasonalPattern("self help", (0, 1), (6, 7), 0.3),
)
FALLBACK_PATTERN = SeasonalPattern("default", (0, 1), (6, 7), 0.2)


def _check_month(month: int) -> int:
    if not 0 <= int(month) <= 11:
        raise ValueError(f"Months are 0-indexed (0-11), got {month!r}")
    return int(month)


def patterns_from_config(entries: Iterable[Mapping[str, Any]]) -> tuple[SeasonalPattern, ...]:
    """Build an ordered pattern table from rules-file entries."""

    patterns: list[SeasonalPattern] = []
    for entry in entries:
        niche = str(entry["niche"]).strip().lower()
        if not niche:
            raise ValueError("Seasonal pattern entries require a non-empty 'niche'")
        volatility = float(entry.get("volatility", FALLBACK_PATTERN.volatility))
        if not 0.0 <= volatility <= 1.0:
            raise ValueError(f"Volatility for {niche!r} must be within [0, 1]")
        patterns.append(
            SeasonalPattern(
                niche=niche,
                peak=tuple(_check_month(m) for m in entry.get("peak", ())),
                low=tuple(_check_month(m) for m in entry.get("low", ())),
                volatility=volatility,
            )
        )
    return tuple(patterns)


def match_pattern(keyword: str, patterns: Sequence[SeasonalPattern] | None = None) -> SeasonalPattern:
    lowered = keyword.lower()
    for pattern in patterns if patterns is not None else DEFAULT_PATTERNS:
        if pattern.niche in lowered:
            return pattern
    return FALLBACK_PATTERN


def seasonal_factors(
    keyword: str,
    *,
    current_month: int,
    patterns: Sequence[SeasonalPattern] | None = None,
) -> SeasonalFactors:
    """Return seasonal peaks, lows and the multiplier for ``current_month`` (0-11)."""

    month = _check_month(current_month)
    pattern = match_pattern(keyword, patterns)
    multiplier = 1.0
    if month in pattern.peak:
        multiplier = 1.0 + pattern.volatility * 0.5
    elif month in pattern.low:
        multiplier = 1.0 - pattern.volatility * 0.3
    return SeasonalFactors(
        current_multiplier=round_to(multiplier, 2),
        peak_months=list(pattern.peak),
        low_months=list(pattern.low),
        volatility=pattern.volatility,
    )


@dataclass(frozen=True, slots=True)
class LaunchTiming:
    best_launch_month: int
    worst_launch_month: int
    reasoning: str
    urgency: str


def optimal_launch_timing(
    factors: SeasonalFactors,
    monthly_new_publications: Sequence[float],
    *,
    current_month: int,
) -> LaunchTiming:
    """Pick the best and worst launch months from seasonality and publishing pace.

    ``monthly_new_publications[i]`` is the number of new titles observed for
    month ``i``; shorter sequences leave the remaining months unadjusted.
    """

    month = _check_month(current_month)
    scores = {index: 50.0 for index in range(12)}
    for peak in factors.peak_months:
        scores[peak] += 30 * factors.volatility
    for low in factors.low_months:
        scores[low] -= 20 * factors.volatility
    for index, publications in enumerate(monthly_new_publications[:12]):
        if publications < 20:
            scores[index] += 15
        elif publications > 50:
            scores[index] -= 15

    best = max(scores, key=lambda index: (scores[index], -index))
    worst = min(scores, key=lambda index: (scores[index], index))
    current_score = scores[month]
    best_score = scores[best]
    gap = best_score - current_score
    if gap > 30:
        urgency = "high"
    elif gap > 15:
        urgency = "medium"
    else:
        urgency = "low"

    reasoning = (
        f"{calendar.month_name[best + 1]} shows optimal conditions with seasonal advantages and lower "
        f"competition. Current timing scores {format_number(current_score)}/100 vs optimal "
        f"{format_number(best_score)}/100."
    )
    return LaunchTiming(best_launch_month=best, worst_launch_month=worst, reasoning=reasoning, urgency=urgency)


__all__ = [
    "DEFAULT_PATTERNS",
    "FALLBACK_PATTERN",
    "LaunchTiming",
    "SeasonalFactors",
    "SeasonalPattern",
    "match_pattern",
    "optimal_launch_timing",
    "patterns_from_config",
    "seasonal_factors",
]
