from __future__ import annotations

from datetime import date, datetime, timedelta

from kdpniche.models import BookSnapshot, KeywordMetricsSnapshot, RankHistoryPoint

AS_OF = date(2025, 3, 31)


def build_book_sample() -> list[BookSnapshot]:
    """Four titles: two self-published, one traditional, one unranked.

    Daily demand by rank: 50 -> 550, 500 -> 175, 5000 -> 30, unranked -> 0.5.
    """

    return [
        BookSnapshot(
            identifier="B000000003",
            publisher="Self-Published",
            price=6.0,
            rank=5000,
            review_count=12,
            publication_date=date(2025, 3, 10),
            title="Keto Basics",
        ),
        BookSnapshot(
            identifier="B000000004",
            publisher="Big House",
            price=None,
            rank=None,
            review_count=0,
            publication_date=None,
            title="Old Keto Guide",
        ),
        BookSnapshot(
            identifier="B000000001",
            publisher="Independent",
            price=10.0,
            rank=50,
            review_count=340,
            publication_date=date(2025, 3, 20),
            title="Keto Diet Cookbook",
        ),
        BookSnapshot(
            identifier="B000000002",
            publisher="Penguin",
            price=20.0,
            rank=500,
            review_count=1200,
            publication_date=date(2024, 1, 1),
            title="The Keto Kitchen",
        ),
    ]


def build_unknown_books(count: int = 10) -> list[BookSnapshot]:
    """``count`` unranked titles without a publisher."""

    return [BookSnapshot(identifier=f"U{index:09d}") for index in range(count)]


def build_rising_history(book_id: str = "B000000001", days: int = 10) -> list[RankHistoryPoint]:
    """Daily ranks improving by 50 from 1000; demand grows 12.5 per day from 50."""

    start = AS_OF - timedelta(days=days - 1)
    return [
        RankHistoryPoint(book_id=book_id, rank=1000 - 50 * index, date=start + timedelta(days=index))
        for index in range(days)
    ]


def build_declining_history(book_id: str = "B000000001", days: int = 10) -> list[RankHistoryPoint]:
    start = AS_OF - timedelta(days=days - 1)
    return [
        RankHistoryPoint(book_id=book_id, rank=550 + 50 * index, date=start + timedelta(days=index))
        for index in range(days)
    ]


def build_flat_history(book_id: str = "B000000001", days: int = 5) -> list[RankHistoryPoint]:
    start = AS_OF - timedelta(days=days - 1)
    return [
        RankHistoryPoint(book_id=book_id, rank=1000, date=start + timedelta(days=index)) for index in range(days)
    ]


def build_metrics_sample(**overrides: object) -> KeywordMetricsSnapshot:
    values: dict[str, object] = {
        "keyword_id": "kw-keto",
        "total_sales": 25000.0,
        "self_pub_sales": 20000.0,
        "demand_trend": "rising",
        "royalties": 400.0,
        "new_publications_30d": 12,
        "supply_trend": "stable",
        "success_rate": 80.0,
        "self_pub_percentage": 80.0,
        "opportunity_score": 85.0,
        "calculated_at": datetime(2025, 3, 31, 6, 0, 0),
    }
    values.update(overrides)
    return KeywordMetricsSnapshot(**values)  # type: ignore[arg-type]
