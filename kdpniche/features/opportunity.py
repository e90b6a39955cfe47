"""Opportunity scoring from discrete demand/competition/supply buckets."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from kdpniche.utils.numbers import clamp, round_to


class ScoringStrategy(str, Enum):
    """Which sub-scores make up the opportunity score.

    ``FULL`` is used when a single keyword is analysed from freshly fetched
    books and includes the saturation bucket.  ``BULK`` is used by the batch
    recalculation over stored books and sums only demand, competition,
    self-publishing share and success rate.  Both variants are kept so stored
    scores stay comparable with the path that produced them.
    """

    FULL = "full"
    BULK = "bulk"


@dataclass(frozen=True, slots=True)
class OpportunityFactors:
    total_sales: float
    self_pub_percentage: float
    success_rate: float
    new_publications: float
    avg_rank: float


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    demand: int
    competition: int
    self_pub: int
    success: int
    saturation: int | None

    @property
    def total(self) -> int:
        parts = [self.demand, self.competition, self.self_pub, self.success]
        if self.saturation is not None:
            parts.append(self.saturation)
        return int(clamp(sum(parts)))


def _bucket_above(value: float, thresholds: tuple[float, ...], points: tuple[int, ...], floor: int) -> int:
    for threshold, score in zip(thresholds, points):
        if value > threshold:
            return score
    return floor


def demand_score(total_sales: float) -> int:
    return _bucket_above(total_sales, (50000, 20000, 10000, 5000, 1000), (30, 25, 20, 15, 10), 5)


def competition_score(avg_rank: float) -> int:
    # Higher average rank numbers mean weaker incumbents.
    return _bucket_above(avg_rank, (500000, 200000, 100000, 50000), (25, 20, 15, 10), 5)


def self_pub_score(self_pub_percentage: float) -> int:
    return _bucket_above(self_pub_percentage, (80, 60, 40, 20), (20, 16, 12, 8), 4)


def success_score(success_rate: float) -> int:
    return _bucket_above(success_rate, (80, 60, 40, 20), (15, 12, 9, 6), 3)


def saturation_score(new_publications: float) -> int:
    for threshold, score in zip((10, 20, 40, 60), (10, 8, 6, 4)):
        if new_publications < threshold:
            return score
    return 2


def score_breakdown(
    factors: OpportunityFactors,
    strategy: ScoringStrategy = ScoringStrategy.FULL,
) -> ScoreBreakdown:
    """Return the individual sub-scores for ``factors`` under ``strategy``."""

    strategy = ScoringStrategy(strategy)
    saturation = saturation_score(factors.new_publications) if strategy is ScoringStrategy.FULL else None
    return ScoreBreakdown(
        demand=demand_score(factors.total_sales),
        competition=competition_score(factors.avg_rank),
        self_pub=self_pub_score(factors.self_pub_percentage),
        success=success_score(factors.success_rate),
        saturation=saturation,
    )


def calculate_opportunity_score(
    factors: OpportunityFactors,
    strategy: ScoringStrategy = ScoringStrategy.FULL,
) -> int:
    """Return the 0-100 opportunity score for a niche."""

    return score_breakdown(factors, strategy).total


@dataclass(frozen=True, slots=True)
class MarketSaturation:
    saturation_level: str
    score: int
    books_per_sale: float
    recommendation: str


def calculate_market_saturation(total_books: int, new_books_30d: int, total_sales: float) -> MarketSaturation:
    """Classify how crowded a niche is from catalogue size and publishing pace."""

    books_per_sale = total_books / total_sales if total_sales > 0 else 999.0
    new_book_rate = new_books_30d / 30 * 365

    score = 0
    if books_per_sale < 0.01:
        score += 30
    elif books_per_sale < 0.05:
        score += 20
    elif books_per_sale < 0.1:
        score += 10

    if new_book_rate < 100:
        score += 30
    elif new_book_rate < 300:
        score += 20
    elif new_book_rate < 500:
        score += 10

    if total_books < 500:
        score += 40
    elif total_books < 1000:
        score += 30
    elif total_books < 2000:
        score += 20
    elif total_books < 5000:
        score += 10

    if score >= 70:
        level = "low"
        recommendation = "Excellent opportunity - low saturation market"
    elif score >= 40:
        level = "medium"
        recommendation = "Moderate opportunity - balanced market conditions"
    else:
        level = "high"
        recommendation = "Challenging market - high saturation detected"

    return MarketSaturation(
        saturation_level=level,
        score=score,
        books_per_sale=round_to(books_per_sale, 3),
        recommendation=recommendation,
    )


__all__ = [
    "MarketSaturation",
    "OpportunityFactors",
    "ScoreBreakdown",
    "ScoringStrategy",
    "calculate_market_saturation",
    "calculate_opportunity_score",
    "competition_score",
    "demand_score",
    "saturation_score",
    "score_breakdown",
    "self_pub_score",
    "success_score",
]
