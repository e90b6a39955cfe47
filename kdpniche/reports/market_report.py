"""Compose the market report for one keyword from its metrics, history and books."""
from __future__ import annotations

import calendar
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Sequence

from kdpniche.db.base import BookStore, HistoryStore, MetricsStore
from kdpniche.errors import MetricsNotFound
from kdpniche.features.competition import CompetitionAnalysis, analyze_competition
from kdpniche.features.roi import DEFAULT_INVESTMENT_COST, ROIResult, calculate_roi
from kdpniche.features.seasonal import SeasonalFactors, SeasonalPattern, seasonal_factors
from kdpniche.features.trend import DEFAULT_WINDOW_DAYS, TrendAnalysis, analyze_trend
from kdpniche.models import BookSnapshot, KeywordMetricsSnapshot
from kdpniche.utils.numbers import format_number, round_half_up

LOGGER = logging.getLogger(__name__)

INDEPENDENT_PUBLISHER = "Independent"
MAIN_COMPETITORS = 3


@dataclass(frozen=True, slots=True)
class MarketInsight:
    type: str
    title: str
    description: str
    impact: str
    actionable: bool = True


@dataclass(frozen=True, slots=True)
class CompetitorAnalysis:
    main_competitors: list[str]
    weaknesses: list[str]
    opportunities: list[str]


@dataclass(slots=True)
class MarketReport:
    """Everything known about a keyword's market, ready for rendering."""

    keyword: str
    overall_score: int
    insights: list[MarketInsight]
    recommendations: list[str]
    competitor_analysis: CompetitorAnalysis
    metrics: KeywordMetricsSnapshot
    trend: TrendAnalysis
    competition: CompetitionAnalysis
    seasonal: SeasonalFactors
    roi: ROIResult
    current_month: int = 0

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["metrics"]["calculated_at"] = self.metrics.calculated_at.isoformat()
        return payload


def month_name(month: int) -> str:
    """Return the English name for a 0-indexed month."""

    return calendar.month_name[month + 1]


def _build_insights(
    metrics: KeywordMetricsSnapshot,
    trend: TrendAnalysis,
    competition: CompetitionAnalysis,
    seasonal: SeasonalFactors,
    current_month: int,
) -> list[MarketInsight]:
    insights: list[MarketInsight] = []

    if metrics.opportunity_score > 80:
        insights.append(
            MarketInsight(
                type="opportunity",
                title="High Opportunity Market",
                description=(
                    "This keyword shows excellent potential with a "
                    f"{format_number(metrics.opportunity_score)}% opportunity score."
                ),
                impact="high",
            )
        )

    if metrics.self_pub_percentage > 75:
        insights.append(
            MarketInsight(
                type="opportunity",
                title="Self-Publisher Friendly",
                description=(
                    f"{format_number(metrics.self_pub_percentage)}% of successful books are self-published, "
                    "indicating good opportunities for independent authors."
                ),
                impact="high",
            )
        )

    if competition.level == "high":
        insights.append(
            MarketInsight(
                type="warning",
                title="High Competition Detected",
                description=(
                    f"Competition score of {format_number(competition.score)}% suggests this market "
                    "may be challenging for new entrants."
                ),
                impact="high",
            )
        )

    if metrics.new_publications_30d > 50:
        insights.append(
            MarketInsight(
                type="warning",
                title="Market Saturation Risk",
                description=(
                    f"{metrics.new_publications_30d} new books published in the last 30 days "
                    "indicates potential oversaturation."
                ),
                impact="medium",
            )
        )

    if trend.direction == "rising" and trend.confidence > 70:
        insights.append(
            MarketInsight(
                type="trend",
                title="Growing Market Demand",
                description=(
                    f"Sales trend is {trend.direction} with {format_number(trend.monthly_change)}% monthly growth "
                    f"and {format_number(trend.confidence)}% confidence."
                ),
                impact="high",
            )
        )

    if seasonal.volatility > 0.4:
        in_peak = current_month in seasonal.peak_months
        volatility_pct = int(round_half_up(seasonal.volatility * 100))
        timing = "Currently in peak season." if in_peak else "Consider timing your launch for peak months."
        insights.append(
            MarketInsight(
                type="seasonal",
                title="Peak Season Active" if in_peak else "Seasonal Market Detected",
                description=f"This market shows {volatility_pct}% seasonal volatility. {timing}",
                impact="medium",
            )
        )

    return insights


def _build_recommendations(
    metrics: KeywordMetricsSnapshot,
    competition: CompetitionAnalysis,
    seasonal: SeasonalFactors,
    roi: ROIResult,
) -> list[str]:
    recommendations: list[str] = []
    if metrics.opportunity_score > 70:
        recommendations.append("Consider entering this market - strong opportunity indicators")
    if competition.level == "low":
        recommendations.append("Low competition detected - good timing for market entry")
    if roi.break_even_months < 12:
        recommendations.append(
            f"Fast ROI potential - estimated {format_number(roi.break_even_months)} months to break even"
        )
    if seasonal.peak_months:
        names = ", ".join(month_name(month) for month in seasonal.peak_months)
        recommendations.append(f"Time your launch for peak months: {names}")
    if metrics.success_rate > 60:
        recommendations.append(
            f"High success rate ({format_number(metrics.success_rate)}%) - good market for quality content"
        )
    return recommendations


def competitor_weaknesses(competition: CompetitionAnalysis) -> list[str]:
    weaknesses: list[str] = []
    if competition.score > 60:
        weaknesses.append("Low competition from major publishers")
    if competition.avg_time_to_rank < 120:
        weaknesses.append("Fast ranking potential for quality content")
    if competition.market_share.get(INDEPENDENT_PUBLISHER, 0.0) > 30:
        weaknesses.append("Market dominated by independent publishers")
    return weaknesses


def market_opportunities(metrics: KeywordMetricsSnapshot, competition: CompetitionAnalysis) -> list[str]:
    opportunities: list[str] = []
    if metrics.total_sales > 20000 and competition.level != "high":
        opportunities.append("High demand with manageable competition")
    if metrics.self_pub_percentage > 70:
        opportunities.append("Self-publishing success stories abundant")
    if metrics.new_publications_30d < 20:
        opportunities.append("Undersaturated market with room for growth")
    return opportunities


def overall_score(metrics: KeywordMetricsSnapshot, competition: CompetitionAnalysis, trend: TrendAnalysis) -> int:
    weighted = (
        metrics.opportunity_score * 0.4
        + metrics.success_rate * 0.3
        + competition.score * 0.2
        + trend.strength * 0.1
    )
    return int(round_half_up(weighted))


def compose_market_report(
    keyword: str,
    metrics: KeywordMetricsSnapshot | None,
    history: Iterable[Any] | None,
    books: Sequence[BookSnapshot],
    *,
    current_month: int,
    investment_cost: float = DEFAULT_INVESTMENT_COST,
    window_days: int = DEFAULT_WINDOW_DAYS,
    as_of: date | None = None,
    seasonal_patterns: Sequence[SeasonalPattern] | None = None,
) -> MarketReport:
    """Build the :class:`MarketReport` for ``keyword``.

    Trend and competition analysis run side by side on a two-worker pool and
    both complete before the seasonal and ROI models run.

    Raises
    ------
    MetricsNotFound
        When no metrics snapshot exists for the keyword.
    """

    if metrics is None:
        raise MetricsNotFound(keyword)

    history_points = list(history) if history is not None else []
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="market-report") as pool:
        trend_future = pool.submit(analyze_trend, history_points, window_days, as_of=as_of)
        competition_future = pool.submit(analyze_competition, list(books))
        trend = trend_future.result()
        competition = competition_future.result()

    seasonal = seasonal_factors(keyword, current_month=current_month, patterns=seasonal_patterns)
    roi = calculate_roi(metrics, investment_cost)

    report = MarketReport(
        keyword=keyword,
        overall_score=overall_score(metrics, competition, trend),
        insights=_build_insights(metrics, trend, competition, seasonal, current_month),
        recommendations=_build_recommendations(metrics, competition, seasonal, roi),
        competitor_analysis=CompetitorAnalysis(
            main_competitors=competition.top_publishers[:MAIN_COMPETITORS],
            weaknesses=competitor_weaknesses(competition),
            opportunities=market_opportunities(metrics, competition),
        ),
        metrics=metrics,
        trend=trend,
        competition=competition,
        seasonal=seasonal,
        roi=roi,
        current_month=current_month,
    )
    LOGGER.info(
        "market_report.composed",
        extra={
            "keyword": keyword,
            "overall_score": report.overall_score,
            "insights": len(report.insights),
            "history_points": len(history_points),
            "books": len(books),
        },
    )
    return report


def generate_market_report(
    metrics_store: MetricsStore,
    history_store: HistoryStore,
    book_store: BookStore,
    keyword_id: str,
    keyword_name: str,
    *,
    current_month: int,
    as_of: date,
    investment_cost: float = DEFAULT_INVESTMENT_COST,
    window_days: int = DEFAULT_WINDOW_DAYS,
    seasonal_patterns: Sequence[SeasonalPattern] | None = None,
) -> MarketReport:
    """Look up a keyword's inputs through the stores and compose its report."""

    metrics = metrics_store.get(keyword_id)
    if metrics is None:
        raise MetricsNotFound(keyword_name)
    history = history_store.query(keyword_id, since=as_of - timedelta(days=window_days))
    books = book_store.books_for_keyword(keyword_id)
    return compose_market_report(
        keyword_name,
        metrics,
        history,
        books,
        current_month=current_month,
        investment_cost=investment_cost,
        window_days=window_days,
        as_of=as_of,
        seasonal_patterns=seasonal_patterns,
    )


__all__ = [
    "CompetitorAnalysis",
    "MarketInsight",
    "MarketReport",
    "compose_market_report",
    "competitor_weaknesses",
    "generate_market_report",
    "market_opportunities",
    "month_name",
    "overall_score",
]
