from __future__ import annotations

import json

import pytest

from kdpniche.db.memory import InMemoryBookStore, InMemoryHistoryStore, InMemoryMetricsStore
from kdpniche.errors import MetricsNotFound, NotFoundError
from kdpniche.reports.market_report import compose_market_report, generate_market_report, month_name
from kdpniche.tests.data import AS_OF, build_book_sample, build_metrics_sample, build_rising_history


def _compose(keyword: str = "Keto Diet Cookbook", current_month: int = 0, **metric_overrides: object):
    return compose_market_report(
        keyword,
        build_metrics_sample(**metric_overrides),
        build_rising_history(),
        build_book_sample(),
        current_month=current_month,
        as_of=AS_OF,
    )


def test_report_insights_follow_metric_thresholds() -> None:
    report = _compose()

    assert [insight.title for insight in report.insights] == [
        "High Opportunity Market",
        "Self-Publisher Friendly",
        "High Competition Detected",
        "Growing Market Demand",
    ]
    first = report.insights[0]
    assert first.description == "This keyword shows excellent potential with a 85% opportunity score."
    assert (first.type, first.impact, first.actionable) == ("opportunity", "high", True)


def test_report_recommendations() -> None:
    report = _compose()

    assert report.recommendations == [
        "Consider entering this market - strong opportunity indicators",
        "Fast ROI potential - estimated 5 months to break even",
        "Time your launch for peak months: January, February, December",
        "High success rate (80%) - good market for quality content",
    ]


def test_competitor_analysis_and_overall_score() -> None:
    report = _compose()

    analysis = report.competitor_analysis
    assert analysis.main_competitors == ["Independent", "Penguin", "Self-Published"]
    assert analysis.weaknesses == [
        "Fast ranking potential for quality content",
        "Market dominated by independent publishers",
    ]
    assert analysis.opportunities == [
        "Self-publishing success stories abundant",
        "Undersaturated market with room for growth",
    ]
    assert report.competition.score == 29
    assert report.trend.direction == "rising"
    assert report.overall_score == 74


def test_saturation_warning_and_seasonal_insights() -> None:
    peak = _compose("Christmas Coloring Book", current_month=11, new_publications_30d=60)
    titles = [insight.title for insight in peak.insights]
    assert "Market Saturation Risk" in titles
    assert "Peak Season Active" in titles
    seasonal = next(insight for insight in peak.insights if insight.type == "seasonal")
    assert seasonal.description == "This market shows 80% seasonal volatility. Currently in peak season."

    off_peak = _compose("Christmas Coloring Book", current_month=3)
    assert "Seasonal Market Detected" in [insight.title for insight in off_peak.insights]


def test_missing_metrics_raise() -> None:
    with pytest.raises(MetricsNotFound) as err:
        compose_market_report("keto", None, [], [], current_month=0)

    assert isinstance(err.value, NotFoundError)
    assert err.value.keyword == "keto"


def test_report_without_history_uses_neutral_trend() -> None:
    report = compose_market_report(
        "gardening", build_metrics_sample(), None, build_book_sample(), current_month=4
    )

    assert report.trend.direction == "stable"
    assert report.trend.strength == 50
    assert "Growing Market Demand" not in [insight.title for insight in report.insights]


def test_report_serialises_to_json() -> None:
    payload = _compose().as_dict()

    encoded = json.loads(json.dumps(payload))
    assert encoded["overall_score"] == 74
    assert encoded["metrics"]["calculated_at"] == "2025-03-31T06:00:00"
    assert encoded["competitor_analysis"]["main_competitors"][0] == "Independent"


def test_generate_market_report_reads_stores() -> None:
    book_store = InMemoryBookStore()
    history_store = InMemoryHistoryStore(book_store)
    metrics_store = InMemoryMetricsStore()
    book_store.upsert_books("kw-keto", build_book_sample())
    for point in build_rising_history():
        history_store.append(point)
    metrics_store.upsert("kw-keto", build_metrics_sample())

    report = generate_market_report(
        metrics_store,
        history_store,
        book_store,
        "kw-keto",
        "Keto Diet Cookbook",
        current_month=0,
        as_of=AS_OF,
    )
    assert report.keyword == "Keto Diet Cookbook"
    assert report.overall_score == 74

    with pytest.raises(MetricsNotFound):
        generate_market_report(
            metrics_store, history_store, book_store, "kw-missing", "missing", current_month=0, as_of=AS_OF
        )


def test_month_name_is_zero_indexed() -> None:
    assert month_name(0) == "January"
    assert month_name(11) == "December"
