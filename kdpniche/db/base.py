"""Interfaces for the record stores and book data supplier used by the engine."""
from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from kdpniche.models import BookSnapshot, Keyword, KeywordMetricsSnapshot, RankHistoryPoint


class BookDataSupplier(Protocol):
    """Returns the current competing titles for a keyword (unordered)."""

    def fetch_books(self, keyword: str) -> Sequence[BookSnapshot]: ...


class RankSource(Protocol):
    """Returns a fresh sales rank for a stored book, or ``None`` if unavailable."""

    def current_rank(self, book: BookSnapshot) -> int | None: ...


class KeywordStore(Protocol):
    def list_keywords(self, keyword_ids: Sequence[str] | None = None) -> list[Keyword]: ...


class BookStore(Protocol):
    def books_for_keyword(self, keyword_id: str) -> list[BookSnapshot]: ...

    def upsert_books(self, keyword_id: str, books: Sequence[BookSnapshot]) -> int: ...

    def update_rank(self, book_id: str, rank: int | None) -> None: ...


class MetricsStore(Protocol):
    def get(self, keyword_id: str) -> KeywordMetricsSnapshot | None: ...

    def upsert(self, keyword_id: str, snapshot: KeywordMetricsSnapshot) -> KeywordMetricsSnapshot: ...


class HistoryStore(Protocol):
    def append(self, point: RankHistoryPoint) -> None: ...

    def query(self, keyword_id: str, since: date | None = None) -> list[RankHistoryPoint]: ...


__all__ = [
    "BookDataSupplier",
    "BookStore",
    "HistoryStore",
    "KeywordStore",
    "MetricsStore",
    "RankSource",
]
