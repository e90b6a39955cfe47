"""Publisher concentration and competition level features."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

import pandas as pd

from kdpniche.features.demand import estimate_daily_sales_series
from kdpniche.models import DEFAULT_UNRANKED_RANK, BookSnapshot
from kdpniche.utils.numbers import clamp, round_half_up

UNKNOWN_PUBLISHER = "Unknown"
SELF_PUBLISH_MARKERS: tuple[str, ...] = ("Independent", "Self")
SELF_PUBLISH_PLATFORMS: frozenset[str] = frozenset({"CreateSpace Independent"})
TOP_PUBLISHERS = 5
TOP_BOOKS = 10
DEFAULT_TIME_TO_RANK = 180


@dataclass(frozen=True, slots=True)
class CompetitionAnalysis:
    """Summarises how contested a niche is for a new entrant."""

    level: str
    score: int
    top_publishers: list[str] = field(default_factory=list)
    market_share: dict[str, float] = field(default_factory=dict)
    avg_time_to_rank: int = DEFAULT_TIME_TO_RANK


def default_competition() -> CompetitionAnalysis:
    return CompetitionAnalysis(
        level="medium",
        score=50,
        top_publishers=[],
        market_share={},
        avg_time_to_rank=DEFAULT_TIME_TO_RANK,
    )


def is_self_published(publisher: str | None) -> bool:
    """Return ``True`` for independent / self-publishing imprints."""

    if not publisher:
        return False
    if publisher in SELF_PUBLISH_PLATFORMS:
        return True
    return any(marker in publisher for marker in SELF_PUBLISH_MARKERS)


def books_frame(books: Iterable[BookSnapshot]) -> pd.DataFrame:
    """Tabulate ``books`` sorted by rank ascending with unranked titles last."""

    records = [
        {
            "identifier": book.identifier,
            "publisher": book.publisher if book.publisher else UNKNOWN_PUBLISHER,
            "rank": book.rank,
            "effective_rank": book.effective_rank,
            "price": book.price,
            "is_self_pub": is_self_published(book.publisher),
        }
        for book in books
    ]
    frame = pd.DataFrame.from_records(
        records,
        columns=["identifier", "publisher", "rank", "effective_rank", "price", "is_self_pub"],
    )
    if frame.empty:
        return frame
    frame["unranked"] = frame["rank"].isna()
    frame = frame.sort_values(
        ["unranked", "effective_rank", "identifier"], kind="mergesort"
    ).reset_index(drop=True)
    frame["demand"] = estimate_daily_sales_series(frame["effective_rank"])
    return frame


def _rank_bonus(avg_rank: float) -> int:
    if avg_rank > 500000:
        return 30
    if avg_rank > 100000:
        return 20
    if avg_rank > 50000:
        return 10
    return 0


def estimate_time_to_rank(avg_rank: float, independent_count: int) -> int:
    """Estimate days for a new title to reach the niche's top ranks."""

    if avg_rank > 500000:
        base_time = 90
    elif avg_rank > 100000:
        base_time = 120
    elif avg_rank > 50000:
        base_time = 150
    else:
        base_time = 240
    independent_factor = independent_count / 10
    return int(round_half_up(base_time * (1 - independent_factor * 0.3)))


def analyze_competition(books: Iterable[BookSnapshot]) -> CompetitionAnalysis:
    """Aggregate a book set by publisher and score the competitive pressure."""

    frame = books_frame(books)
    if frame.empty:
        return default_competition()

    publisher_demand = frame.groupby("publisher", sort=True)["demand"].sum()
    total_demand = float(publisher_demand.sum())
    market_share = {
        str(publisher): (round_half_up(float(demand) / total_demand * 10000) / 100 if total_demand > 0 else 0.0)
        for publisher, demand in publisher_demand.items()
    }
    ranked = (
        publisher_demand.rename("demand")
        .reset_index()
        .sort_values(["demand", "publisher"], ascending=[False, True], kind="mergesort")
    )
    top_publishers = [str(name) for name in ranked["publisher"].head(TOP_PUBLISHERS)]

    top_books = frame.head(TOP_BOOKS)
    avg_rank = float(top_books["effective_rank"].mean()) if not top_books.empty else float(DEFAULT_UNRANKED_RANK)
    independent_count = int(top_books["is_self_pub"].sum())

    raw_score = _rank_bonus(avg_rank)
    raw_score += (independent_count / 10) * 40
    raw_score += min(30.0, len(frame) / 100 * 30)
    raw_score = clamp(raw_score)
    score = int(round_half_up(raw_score))

    if raw_score > 70:
        level = "low"
    elif raw_score > 40:
        level = "medium"
    else:
        level = "high"

    return CompetitionAnalysis(
        level=level,
        score=score,
        top_publishers=top_publishers,
        market_share=market_share,
        avg_time_to_rank=estimate_time_to_rank(avg_rank, independent_count),
    )


@dataclass(frozen=True, slots=True)
class CompetitiveAdvantage:
    advantages: list[str]
    disadvantages: list[str]
    overall_score: int
    recommendations: list[str]


def assess_competitive_advantage(
    yours: Mapping[str, float],
    market: Mapping[str, float],
) -> CompetitiveAdvantage:
    """Compare a planned title against niche averages.

    ``yours`` carries ``price``, ``review_count``, ``content_quality`` (1-10)
    and ``marketing_budget``; ``market`` carries ``avg_price``,
    ``avg_reviews`` and ``avg_quality``.
    """

    advantages: list[str] = []
    disadvantages: list[str] = []
    recommendations: list[str] = []
    score = 50.0

    price = float(yours.get("price", 0.0) or 0.0)
    avg_price = float(market.get("avg_price", 0.0) or 0.0)
    if price < avg_price * 0.8:
        advantages.append("Competitive pricing advantage")
        score += 15
    elif price > avg_price * 1.2:
        disadvantages.append("Higher than average pricing")
        score -= 10
        recommendations.append("Consider competitive pricing strategy")

    reviews = float(yours.get("review_count", 0.0) or 0.0)
    avg_reviews = float(market.get("avg_reviews", 0.0) or 0.0)
    if reviews > avg_reviews * 1.5:
        advantages.append("Strong social proof with high review count")
        score += 20
    elif reviews < avg_reviews * 0.5:
        disadvantages.append("Below average review count")
        score -= 15
        recommendations.append("Focus on review acquisition strategy")

    quality = float(yours.get("content_quality", 0.0) or 0.0)
    avg_quality = float(market.get("avg_quality", 0.0) or 0.0)
    if quality > avg_quality + 1:
        advantages.append("Superior content quality")
        score += 25
    elif quality < avg_quality - 1:
        disadvantages.append("Content quality below market standard")
        score -= 20
        recommendations.append("Invest in content improvement")

    budget = float(yours.get("marketing_budget", 0.0) or 0.0)
    if budget > 500:
        advantages.append("Strong marketing budget for promotion")
        score += 10
    elif budget < 100:
        disadvantages.append("Limited marketing budget")
        score -= 5
        recommendations.append("Consider increasing marketing investment")

    return CompetitiveAdvantage(
        advantages=advantages,
        disadvantages=disadvantages,
        overall_score=int(clamp(score)),
        recommendations=recommendations,
    )


__all__ = [
    "CompetitionAnalysis",
    "CompetitiveAdvantage",
    "UNKNOWN_PUBLISHER",
    "analyze_competition",
    "assess_competitive_advantage",
    "books_frame",
    "default_competition",
    "estimate_time_to_rank",
    "is_self_published",
]
