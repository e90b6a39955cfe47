"""Return-on-investment estimates for entering a niche."""
from __future__ import annotations

from dataclasses import dataclass

from kdpniche.models import KeywordMetricsSnapshot
from kdpniche.utils.numbers import round_half_up, round_to

DEFAULT_INVESTMENT_COST = 2000.0
MONTHLY_AMORTIZATION = 0.05
BREAK_EVEN_SENTINEL = 999.0


@dataclass(frozen=True, slots=True)
class ROIResult:
    monthly_roi: float
    break_even_months: float
    yearly_profit: float
    risk_level: str


def classify_risk(opportunity_score: float, success_rate: float) -> str:
    if opportunity_score > 75 and success_rate > 70:
        return "low"
    if opportunity_score < 40 or success_rate < 30:
        return "high"
    return "medium"


def calculate_roi(
    metrics: KeywordMetricsSnapshot,
    investment_cost: float = DEFAULT_INVESTMENT_COST,
) -> ROIResult:
    """Estimate monthly ROI, break-even time and yearly profit from royalties.

    ``investment_cost`` is amortised at 5% per month.  Without royalties the
    break-even time is the sentinel ``999``.
    """

    if investment_cost <= 0:
        raise ValueError("investment_cost must be positive")
    monthly_revenue = metrics.royalties
    monthly_profit = monthly_revenue - investment_cost * MONTHLY_AMORTIZATION
    monthly_roi = monthly_profit / investment_cost * 100
    break_even = investment_cost / monthly_revenue if monthly_revenue > 0 else BREAK_EVEN_SENTINEL
    yearly_profit = monthly_profit * 12
    return ROIResult(
        monthly_roi=round_to(monthly_roi, 2),
        break_even_months=round_to(break_even, 1),
        yearly_profit=round_half_up(yearly_profit),
        risk_level=classify_risk(metrics.opportunity_score, metrics.success_rate),
    )


@dataclass(frozen=True, slots=True)
class ProfitProjection:
    month: int
    sales: int
    revenue: float
    profit: float
    cumulative_profit: float


def project_profits(
    initial_sales: float,
    book_price: float,
    royalty_rate: float = 0.35,
    growth_rate: float = 0.05,
    marketing_cost: float = 100.0,
    months: int = 12,
) -> list[ProfitProjection]:
    """Project monthly sales and profit with compounding growth."""

    projections: list[ProfitProjection] = []
    cumulative = 0.0
    for month in range(1, months + 1):
        sales = int(round_half_up(initial_sales * (1 + growth_rate) ** (month - 1)))
        revenue = sales * book_price * royalty_rate
        profit = revenue - marketing_cost
        cumulative += profit
        projections.append(
            ProfitProjection(
                month=month,
                sales=sales,
                revenue=round_to(revenue, 2),
                profit=round_to(profit, 2),
                cumulative_profit=round_to(cumulative, 2),
            )
        )
    return projections


__all__ = [
    "BREAK_EVEN_SENTINEL",
    "DEFAULT_INVESTMENT_COST",
    "ProfitProjection",
    "ROIResult",
    "calculate_roi",
    "classify_risk",
    "project_profits",
]
