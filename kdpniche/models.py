"""Value records exchanged between the scoring engine and its collaborators."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Mapping

import pandas as pd

DEFAULT_UNRANKED_RANK = 1_000_000

TrendLabel = Literal["rising", "stable", "declining"]
TREND_LABELS: tuple[str, ...] = ("rising", "stable", "declining")


def _normalise_scalar(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):  # type: ignore[arg-type]
            return None
    except (TypeError, ValueError):
        pass
    return value


def coerce_date(value: Any) -> date | None:
    """Convert strings, timestamps and datetimes into :class:`date` objects."""

    value = _normalise_scalar(value)
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime().date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            parsed = pd.to_datetime(value, errors="coerce")
            if pd.isna(parsed):
                return None
            return parsed.to_pydatetime().date()
    return None


def coerce_datetime(value: Any) -> datetime | None:
    value = _normalise_scalar(value)
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            parsed = pd.to_datetime(value, errors="coerce")
            if pd.isna(parsed):
                return None
            return parsed.to_pydatetime()
    return None


def _optional_int(value: Any) -> int | None:
    value = _normalise_scalar(value)
    if value is None:
        return None
    return int(value)


def _optional_float(value: Any) -> float | None:
    value = _normalise_scalar(value)
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True, slots=True)
class Keyword:
    """A tracked niche keyword."""

    keyword_id: str
    name: str


@dataclass(frozen=True, slots=True)
class BookSnapshot:
    """One competing title at one point in time.

    ``rank`` is ``None`` for unranked titles; aggregates use
    :attr:`effective_rank` which substitutes :data:`DEFAULT_UNRANKED_RANK`.
    """

    identifier: str
    publisher: str | None = None
    price: float | None = None
    rank: int | None = None
    review_count: int = 0
    publication_date: date | None = None
    title: str | None = None

    @property
    def effective_rank(self) -> int:
        return self.rank if self.rank is not None else DEFAULT_UNRANKED_RANK

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "BookSnapshot":
        identifier = row.get("identifier", row.get("asin"))
        if identifier is None:
            raise ValueError("Book records require an 'identifier' or 'asin'")
        publisher = _normalise_scalar(row.get("publisher"))
        return cls(
            identifier=str(identifier),
            publisher=str(publisher) if publisher is not None else None,
            price=_optional_float(row.get("price")),
            rank=_optional_int(row.get("rank", row.get("current_rank"))),
            review_count=_optional_int(row.get("review_count")) or 0,
            publication_date=coerce_date(row.get("publication_date")),
            title=_normalise_scalar(row.get("title")),
        )


@dataclass(frozen=True, slots=True)
class RankHistoryPoint:
    """A single observed rank for a book, with the demand derived from it."""

    book_id: str
    rank: int | None
    date: date
    derived_daily_sales: float | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "RankHistoryPoint":
        observed = coerce_date(row.get("date"))
        if observed is None:
            raise ValueError("Rank history points require a date")
        return cls(
            book_id=str(row.get("book_id", "")),
            rank=_optional_int(row.get("rank")),
            date=observed,
            derived_daily_sales=_optional_float(row.get("derived_daily_sales")),
        )


@dataclass(frozen=True, slots=True)
class KeywordMetricsSnapshot:
    """Current market metrics for a keyword; replaced on every recalculation."""

    keyword_id: str
    total_sales: float
    self_pub_sales: float
    demand_trend: str
    royalties: float
    new_publications_30d: int
    supply_trend: str
    success_rate: float
    self_pub_percentage: float
    opportunity_score: float
    calculated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        for label_field in ("demand_trend", "supply_trend"):
            value = getattr(self, label_field)
            if value not in TREND_LABELS:
                raise ValueError(f"{label_field} must be one of {TREND_LABELS}, got {value!r}")

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "KeywordMetricsSnapshot":
        calculated_at = coerce_datetime(row.get("calculated_at")) or datetime.utcnow()
        return cls(
            keyword_id=str(row["keyword_id"]),
            total_sales=float(row.get("total_sales") or 0.0),
            self_pub_sales=float(row.get("self_pub_sales") or 0.0),
            demand_trend=str(row.get("demand_trend") or "stable"),
            royalties=float(row.get("royalties") or 0.0),
            new_publications_30d=int(row.get("new_publications_30d") or 0),
            supply_trend=str(row.get("supply_trend") or "stable"),
            success_rate=float(row.get("success_rate") or 0.0),
            self_pub_percentage=float(row.get("self_pub_percentage") or 0.0),
            opportunity_score=float(row.get("opportunity_score") or 0.0),
            calculated_at=calculated_at,
        )


__all__ = [
    "BookSnapshot",
    "DEFAULT_UNRANKED_RANK",
    "Keyword",
    "KeywordMetricsSnapshot",
    "RankHistoryPoint",
    "TREND_LABELS",
    "TrendLabel",
    "coerce_date",
    "coerce_datetime",
]
