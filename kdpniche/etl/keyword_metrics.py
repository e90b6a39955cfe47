"""Keyword metric aggregation and the sequential batch operations around it."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

import pandas as pd

from kdpniche.db.base import BookDataSupplier, BookStore, HistoryStore, MetricsStore, RankSource
from kdpniche.errors import NotFoundError, PartialFailure
from kdpniche.features.competition import books_frame
from kdpniche.features.demand import estimate_daily_sales
from kdpniche.features.opportunity import OpportunityFactors, ScoringStrategy, calculate_opportunity_score
from kdpniche.models import BookSnapshot, Keyword, KeywordMetricsSnapshot, RankHistoryPoint
from kdpniche.settings import EngineRules, default_rules
from kdpniche.utils.numbers import clamp, round_half_up, round_to

LOGGER = logging.getLogger(__name__)

DEFAULT_RECENT_DAYS = 30
DEFAULT_ROYALTY_RATE = 0.35
DEFAULT_SUCCESS_RANK = 100_000

JOB_ALL_KEYWORDS = "all_keywords"
JOB_METRICS_RECALCULATION = "metrics_recalculation"
JOB_RANK_HISTORY = "rank_history"


@dataclass(slots=True)
class BatchResult:
    """Outcome of a batch run; failed items are listed and excluded from ``processed_items``."""

    job_type: str
    status: str
    total_items: int
    processed_items: int
    failures: list[PartialFailure] = field(default_factory=list)

    @property
    def failed_items(self) -> int:
        return len(self.failures)

    def as_dict(self) -> dict[str, Any]:
        return {
            "job_type": self.job_type,
            "status": self.status,
            "total_items": self.total_items,
            "processed_items": self.processed_items,
            "failures": [failure.as_dict() for failure in self.failures],
        }


def demand_trend_label(total_sales: float) -> str:
    if total_sales > 10000:
        return "rising"
    if total_sales > 5000:
        return "stable"
    return "declining"


def supply_trend_label(new_publications: int) -> str:
    if new_publications > 20:
        return "rising"
    if new_publications > 10:
        return "stable"
    return "declining"


def count_recent_publications(books: Iterable[BookSnapshot], as_of: date, recent_days: int = DEFAULT_RECENT_DAYS) -> int:
    """Count titles published within ``recent_days`` days before ``as_of``."""

    cutoff = as_of - timedelta(days=recent_days)
    return sum(
        1
        for book in books
        if book.publication_date is not None and cutoff <= book.publication_date <= as_of
    )


def compute_keyword_metrics(
    keyword_id: str,
    books: Sequence[BookSnapshot],
    *,
    as_of: date,
    strategy: ScoringStrategy | str = ScoringStrategy.FULL,
    recent_days: int = DEFAULT_RECENT_DAYS,
    royalty_rate: float = DEFAULT_ROYALTY_RATE,
    success_rank: int = DEFAULT_SUCCESS_RANK,
) -> KeywordMetricsSnapshot:
    """Aggregate a keyword's book set into a metrics snapshot.

    Parameters
    ----------
    keyword_id:
        Identifier the snapshot is stored under.
    books:
        Current competing titles for the keyword.  Unranked titles count with
        the unranked default rank.
    as_of:
        Reference day for the recent-publication window.
    strategy:
        Opportunity scoring variant, see :class:`ScoringStrategy`.

    Raises
    ------
    NotFoundError
        When ``books`` is empty.
    """

    books = list(books)
    if not books:
        raise NotFoundError(f"No books stored for keyword {keyword_id!r}")

    frame = books_frame(books)
    total_books = len(frame)
    total_sales = float(frame["demand"].sum())
    self_pub = frame["is_self_pub"].astype(bool)
    self_pub_sales = float(frame.loc[self_pub, "demand"].sum())
    avg_price = float(pd.to_numeric(frame["price"], errors="coerce").fillna(0.0).mean())
    royalties = self_pub_sales * avg_price * royalty_rate

    new_publications = count_recent_publications(books, as_of, recent_days)
    success_rate = float((frame["effective_rank"] < success_rank).sum()) / total_books * 100
    self_pub_percentage = float(self_pub.sum()) / total_books * 100
    avg_rank = float(frame["effective_rank"].mean())

    opportunity = calculate_opportunity_score(
        OpportunityFactors(
            total_sales=total_sales,
            self_pub_percentage=self_pub_percentage,
            success_rate=success_rate,
            new_publications=new_publications,
            avg_rank=avg_rank,
        ),
        strategy,
    )

    return KeywordMetricsSnapshot(
        keyword_id=keyword_id,
        total_sales=round_half_up(total_sales),
        self_pub_sales=round_half_up(self_pub_sales),
        demand_trend=demand_trend_label(total_sales),
        royalties=round_to(royalties, 2),
        new_publications_30d=new_publications,
        supply_trend=supply_trend_label(new_publications),
        success_rate=round_to(clamp(success_rate), 2),
        self_pub_percentage=round_to(clamp(self_pub_percentage), 2),
        opportunity_score=float(opportunity),
        calculated_at=datetime.utcnow(),
    )


def _metrics_kwargs(rules: EngineRules) -> dict[str, Any]:
    return {
        "recent_days": rules.recent_days,
        "royalty_rate": rules.royalty_rate,
        "success_rank": rules.success_rank,
    }


def analyze_keyword(
    keyword: Keyword,
    supplier: BookDataSupplier,
    book_store: BookStore,
    metrics_store: MetricsStore,
    *,
    as_of: date,
    strategy: ScoringStrategy | str | None = None,
    rules: EngineRules | None = None,
) -> KeywordMetricsSnapshot:
    """Fetch fresh books for ``keyword``, store them and upsert new metrics."""

    rules = rules or default_rules()
    strategy = strategy or rules.analyze_strategy
    books = list(supplier.fetch_books(keyword.name))
    LOGGER.info(
        "keyword_metrics.analyze.fetched",
        extra={"keyword_id": keyword.keyword_id, "keyword": keyword.name, "books": len(books)},
    )
    book_store.upsert_books(keyword.keyword_id, books)
    snapshot = compute_keyword_metrics(
        keyword.keyword_id,
        books,
        as_of=as_of,
        strategy=strategy,
        **_metrics_kwargs(rules),
    )
    return metrics_store.upsert(keyword.keyword_id, snapshot)


def _log_failure(job_type: str, item_id: str, item_name: str, exc: Exception) -> PartialFailure:
    LOGGER.warning(
        "keyword_metrics.item_failed",
        extra={"job_type": job_type, "item_id": item_id, "item_name": item_name},
        exc_info=True,
    )
    return PartialFailure(item_id=item_id, item_name=item_name, error=str(exc))


def _finish(job_type: str, total: int, processed: int, failures: list[PartialFailure]) -> BatchResult:
    result = BatchResult(
        job_type=job_type,
        status="completed",
        total_items=total,
        processed_items=processed,
        failures=failures,
    )
    LOGGER.info(
        "keyword_metrics.batch.finish",
        extra={
            "job_type": job_type,
            "total_items": total,
            "processed_items": processed,
            "failed_items": len(failures),
        },
    )
    return result


def recalculate_all_metrics(
    keywords: Sequence[Keyword],
    book_store: BookStore,
    metrics_store: MetricsStore,
    *,
    as_of: date,
    strategy: ScoringStrategy | str | None = None,
    rules: EngineRules | None = None,
) -> BatchResult:
    """Recompute metrics for every keyword from its stored books.

    Keywords are processed one after another.  A keyword that fails (including
    one with no stored books) is recorded and the batch moves on.
    """

    rules = rules or default_rules()
    strategy = strategy or rules.bulk_strategy
    LOGGER.info(
        "keyword_metrics.recalculate.start",
        extra={"keywords": len(keywords), "strategy": ScoringStrategy(strategy).value},
    )
    processed = 0
    failures: list[PartialFailure] = []
    for keyword in keywords:
        try:
            books = book_store.books_for_keyword(keyword.keyword_id)
            snapshot = compute_keyword_metrics(
                keyword.keyword_id,
                books,
                as_of=as_of,
                strategy=strategy,
                **_metrics_kwargs(rules),
            )
            metrics_store.upsert(keyword.keyword_id, snapshot)
        except Exception as exc:  # noqa: BLE001
            failures.append(_log_failure(JOB_METRICS_RECALCULATION, keyword.keyword_id, keyword.name, exc))
            continue
        processed += 1
    return _finish(JOB_METRICS_RECALCULATION, len(keywords), processed, failures)


def update_all_keywords(
    keywords: Sequence[Keyword],
    supplier: BookDataSupplier,
    book_store: BookStore,
    metrics_store: MetricsStore,
    *,
    as_of: date,
    strategy: ScoringStrategy | str | None = None,
    rules: EngineRules | None = None,
) -> BatchResult:
    """Run :func:`analyze_keyword` for each keyword in turn."""

    rules = rules or default_rules()
    LOGGER.info("keyword_metrics.update.start", extra={"keywords": len(keywords)})
    processed = 0
    failures: list[PartialFailure] = []
    for keyword in keywords:
        try:
            analyze_keyword(
                keyword,
                supplier,
                book_store,
                metrics_store,
                as_of=as_of,
                strategy=strategy,
                rules=rules,
            )
        except Exception as exc:  # noqa: BLE001
            failures.append(_log_failure(JOB_ALL_KEYWORDS, keyword.keyword_id, keyword.name, exc))
            continue
        processed += 1
    return _finish(JOB_ALL_KEYWORDS, len(keywords), processed, failures)


def update_rank_history(
    books: Sequence[BookSnapshot],
    rank_source: RankSource,
    book_store: BookStore,
    history_store: HistoryStore,
    *,
    as_of: date,
) -> BatchResult:
    """Refresh the rank of every ranked book and append a history point for it."""

    ranked = [book for book in books if book.rank is not None]
    LOGGER.info("keyword_metrics.rank_history.start", extra={"books": len(ranked), "date": as_of.isoformat()})
    processed = 0
    failures: list[PartialFailure] = []
    for book in ranked:
        name = book.title or book.identifier
        try:
            rank = rank_source.current_rank(book)
            if rank is None:
                raise NotFoundError(f"No current rank available for {book.identifier!r}")
            book_store.update_rank(book.identifier, rank)
            history_store.append(
                RankHistoryPoint(
                    book_id=book.identifier,
                    rank=rank,
                    date=as_of,
                    derived_daily_sales=estimate_daily_sales(rank),
                )
            )
        except Exception as exc:  # noqa: BLE001
            failures.append(_log_failure(JOB_RANK_HISTORY, book.identifier, name, exc))
            continue
        processed += 1
    return _finish(JOB_RANK_HISTORY, len(ranked), processed, failures)


__all__ = [
    "BatchResult",
    "JOB_ALL_KEYWORDS",
    "JOB_METRICS_RECALCULATION",
    "JOB_RANK_HISTORY",
    "analyze_keyword",
    "compute_keyword_metrics",
    "count_recent_publications",
    "demand_trend_label",
    "recalculate_all_metrics",
    "supply_trend_label",
    "update_all_keywords",
    "update_rank_history",
]
