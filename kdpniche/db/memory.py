"""Process-local record stores.

These mirror the SQL stores in :mod:`kdpniche.db.stores` and are handy for
notebooks, tests and one-off analyses where no database is configured.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Sequence

from kdpniche.errors import NotFoundError
from kdpniche.models import BookSnapshot, Keyword, KeywordMetricsSnapshot, RankHistoryPoint


@dataclass(slots=True)
class InMemoryKeywordStore:
    keywords: dict[str, Keyword] = field(default_factory=dict)

    def add(self, keyword: Keyword) -> None:
        self.keywords[keyword.keyword_id] = keyword

    def list_keywords(self, keyword_ids: Sequence[str] | None = None) -> list[Keyword]:
        if keyword_ids is None:
            return list(self.keywords.values())
        return [self.keywords[kid] for kid in keyword_ids if kid in self.keywords]


@dataclass(slots=True)
class InMemoryBookStore:
    """Books keyed by identifier; each book belongs to one keyword."""

    _books: dict[str, BookSnapshot] = field(default_factory=dict)
    _keyword_of: dict[str, str] = field(default_factory=dict)

    def books_for_keyword(self, keyword_id: str) -> list[BookSnapshot]:
        return [book for book_id, book in self._books.items() if self._keyword_of.get(book_id) == keyword_id]

    def keyword_for_book(self, book_id: str) -> str | None:
        return self._keyword_of.get(book_id)

    def upsert_books(self, keyword_id: str, books: Sequence[BookSnapshot]) -> int:
        for book in books:
            self._books[book.identifier] = book
            self._keyword_of[book.identifier] = keyword_id
        return len(books)

    def update_rank(self, book_id: str, rank: int | None) -> None:
        if book_id not in self._books:
            raise NotFoundError(f"Book {book_id!r} not found")
        self._books[book_id] = replace(self._books[book_id], rank=rank)


@dataclass(slots=True)
class InMemoryMetricsStore:
    _snapshots: dict[str, KeywordMetricsSnapshot] = field(default_factory=dict)

    def get(self, keyword_id: str) -> KeywordMetricsSnapshot | None:
        return self._snapshots.get(keyword_id)

    def upsert(self, keyword_id: str, snapshot: KeywordMetricsSnapshot) -> KeywordMetricsSnapshot:
        if snapshot.keyword_id != keyword_id:
            snapshot = replace(snapshot, keyword_id=keyword_id)
        self._snapshots[keyword_id] = snapshot
        return snapshot


@dataclass(slots=True)
class InMemoryHistoryStore:
    """Append-only rank history resolved to keywords through a book store."""

    books: InMemoryBookStore
    _points: list[RankHistoryPoint] = field(default_factory=list)

    def append(self, point: RankHistoryPoint) -> None:
        self._points.append(point)

    def query(self, keyword_id: str, since: date | None = None) -> list[RankHistoryPoint]:
        selected = [
            point
            for point in self._points
            if self.books.keyword_for_book(point.book_id) == keyword_id and (since is None or point.date >= since)
        ]
        return sorted(selected, key=lambda point: point.date)


__all__ = [
    "InMemoryBookStore",
    "InMemoryHistoryStore",
    "InMemoryKeywordStore",
    "InMemoryMetricsStore",
]
