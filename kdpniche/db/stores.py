"""SQL-backed record stores for keywords, books, rank history and metrics."""
from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine

from kdpniche.db.io import fetch_dataframe, upsert_rows
from kdpniche.db.schema import books_table, keyword_metrics_table, keywords_table, rank_history_table
from kdpniche.errors import NotFoundError
from kdpniche.models import BookSnapshot, Keyword, KeywordMetricsSnapshot, RankHistoryPoint

LOGGER = logging.getLogger(__name__)


class SqlKeywordStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def add(self, keyword: Keyword) -> None:
        upsert_rows(
            self.engine,
            keywords_table,
            [{"keyword_id": keyword.keyword_id, "name": keyword.name}],
            conflict_columns=["keyword_id"],
        )

    def list_keywords(self, keyword_ids: Sequence[str] | None = None) -> list[Keyword]:
        stmt = select(keywords_table).order_by(keywords_table.c.keyword_id)
        if keyword_ids is not None:
            stmt = stmt.where(keywords_table.c.keyword_id.in_(list(keyword_ids)))
        frame = fetch_dataframe(self.engine, stmt)
        return [Keyword(keyword_id=str(row.keyword_id), name=str(row.name)) for row in frame.itertuples(index=False)]


class SqlBookStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def books_for_keyword(self, keyword_id: str) -> list[BookSnapshot]:
        stmt = (
            select(books_table)
            .where(books_table.c.keyword_id == keyword_id)
            .order_by(books_table.c.identifier)
        )
        frame = fetch_dataframe(self.engine, stmt)
        return [BookSnapshot.from_mapping(row) for row in frame.to_dict(orient="records")]

    def upsert_books(self, keyword_id: str, books: Sequence[BookSnapshot]) -> int:
        rows = [
            {
                "identifier": book.identifier,
                "keyword_id": keyword_id,
                "title": book.title,
                "publisher": book.publisher,
                "price": book.price,
                "current_rank": book.rank,
                "review_count": book.review_count,
                "publication_date": book.publication_date,
            }
            for book in books
        ]
        return upsert_rows(self.engine, books_table, rows, conflict_columns=["identifier"])

    def update_rank(self, book_id: str, rank: int | None) -> None:
        stmt = update(books_table).where(books_table.c.identifier == book_id).values(current_rank=rank)
        with self.engine.begin() as conn:
            matched = conn.execute(stmt).rowcount
        if matched == 0:
            raise NotFoundError(f"Book {book_id!r} not found")


class SqlMetricsStore:
    """One metrics row per keyword; ``upsert`` is last-write-wins."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def get(self, keyword_id: str) -> KeywordMetricsSnapshot | None:
        stmt = select(keyword_metrics_table).where(keyword_metrics_table.c.keyword_id == keyword_id)
        frame = fetch_dataframe(self.engine, stmt)
        if frame.empty:
            return None
        return KeywordMetricsSnapshot.from_mapping(frame.iloc[0].to_dict())

    def upsert(self, keyword_id: str, snapshot: KeywordMetricsSnapshot) -> KeywordMetricsSnapshot:
        row = snapshot.as_dict()
        row["keyword_id"] = keyword_id
        upsert_rows(self.engine, keyword_metrics_table, [row], conflict_columns=["keyword_id"])
        LOGGER.debug("metrics_store.upsert", extra={"keyword_id": keyword_id})
        stored = self.get(keyword_id)
        if stored is None:  # pragma: no cover - write/read race
            raise NotFoundError(f"Metrics for {keyword_id!r} disappeared after upsert")
        return stored


class SqlHistoryStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def append(self, point: RankHistoryPoint) -> None:
        stmt = insert(rank_history_table).values(
            book_id=point.book_id,
            rank=point.rank,
            date=point.date,
            derived_daily_sales=point.derived_daily_sales,
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)

    def query(self, keyword_id: str, since: date | None = None) -> list[RankHistoryPoint]:
        history = rank_history_table
        stmt = (
            select(history.c.book_id, history.c.rank, history.c.date, history.c.derived_daily_sales)
            .join(books_table, books_table.c.identifier == history.c.book_id)
            .where(books_table.c.keyword_id == keyword_id)
            .order_by(history.c.date, history.c.history_id)
        )
        if since is not None:
            stmt = stmt.where(history.c.date >= since)
        frame = fetch_dataframe(self.engine, stmt)
        return [RankHistoryPoint.from_mapping(row) for row in frame.to_dict(orient="records")]


__all__ = ["SqlBookStore", "SqlHistoryStore", "SqlKeywordStore", "SqlMetricsStore"]
