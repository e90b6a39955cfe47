"""Markdown report assembly helpers."""
from __future__ import annotations

from kdpniche.reports.market_report import MarketReport, month_name
from kdpniche.utils.numbers import format_number


def _format_pct(value: object) -> str:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return "?"
    return f"{number:.1f}%"


def _format_months(months: list[int]) -> str:
    if not months:
        return "N/A"
    return ", ".join(month_name(month) for month in months)


def _bullets(lines: list[str], items: list[str], empty: str = "- None") -> None:
    if not items:
        lines.append(empty)
    for item in items:
        lines.append(f"- {item}")
    lines.append("")


def build_market_report_markdown(report: MarketReport) -> str:
    """Render a :class:`MarketReport` as a Markdown document."""

    metrics = report.metrics
    lines: list[str] = [f"# Market report: {report.keyword}", ""]
    lines.append(f"Overall score: **{report.overall_score}** / 100\n")

    lines.append("## Key metrics\n")
    lines.append("| Metric | Value |")
    lines.append("|---|---|")
    lines.append(f"| Estimated daily sales | {format_number(metrics.total_sales)} |")
    lines.append(f"| Self-published daily sales | {format_number(metrics.self_pub_sales)} |")
    lines.append(f"| Monthly royalties | {metrics.royalties:.2f} |")
    lines.append(f"| Self-published share | {_format_pct(metrics.self_pub_percentage)} |")
    lines.append(f"| Success rate | {_format_pct(metrics.success_rate)} |")
    lines.append(f"| New publications (30d) | {metrics.new_publications_30d} |")
    lines.append(f"| Demand / supply trend | {metrics.demand_trend} / {metrics.supply_trend} |")
    lines.append(f"| Opportunity score | {format_number(metrics.opportunity_score)} |")
    lines.append("")

    trend = report.trend
    lines.append("## Trend\n")
    lines.append(
        f"Direction: {trend.direction} (strength {trend.strength:.1f}, "
        f"confidence {_format_pct(trend.confidence)}, monthly change {_format_pct(trend.monthly_change)})\n"
    )

    competition = report.competition
    lines.append("## Competition\n")
    lines.append(f"Level: {competition.level} (score {competition.score})")
    lines.append(f"Estimated days to rank: {competition.avg_time_to_rank}\n")
    if competition.top_publishers:
        lines.append("| Publisher | Market share |")
        lines.append("|---|---|")
        for publisher in competition.top_publishers:
            lines.append(f"| {publisher} | {_format_pct(competition.market_share.get(publisher))} |")
        lines.append("")

    seasonal = report.seasonal
    lines.append("## Seasonality\n")
    lines.append(f"Current multiplier: {seasonal.current_multiplier:.2f}")
    lines.append(f"Peak months: {_format_months(seasonal.peak_months)}")
    lines.append(f"Low months: {_format_months(seasonal.low_months)}\n")

    roi = report.roi
    lines.append("## Return on investment\n")
    lines.append(f"Monthly ROI: {_format_pct(roi.monthly_roi)}")
    lines.append(f"Break-even: {format_number(roi.break_even_months)} months")
    lines.append(f"Yearly profit: {format_number(roi.yearly_profit)}")
    lines.append(f"Risk: {roi.risk_level}\n")

    if report.insights:
        lines.append("## Insights\n")
        for insight in report.insights:
            lines.append(f"- **{insight.title}** ({insight.type}, {insight.impact} impact): {insight.description}")
        lines.append("")

    lines.append("## Recommendations\n")
    _bullets(lines, report.recommendations)

    analysis = report.competitor_analysis
    lines.append("## Competitor analysis\n")
    lines.append(f"Main competitors: {', '.join(analysis.main_competitors) or 'N/A'}\n")
    lines.append("### Weaknesses\n")
    _bullets(lines, analysis.weaknesses)
    lines.append("### Opportunities\n")
    _bullets(lines, analysis.opportunities)

    return "\n".join(lines).strip() + "\n"


__all__ = ["build_market_report_markdown"]
