"""SQLAlchemy table definitions backing the record stores."""
from __future__ import annotations

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

keywords_table = Table(
    "kdp_keywords",
    metadata,
    Column("keyword_id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
)

books_table = Table(
    "kdp_books",
    metadata,
    Column("identifier", String(32), primary_key=True),
    Column("keyword_id", String(64), ForeignKey("kdp_keywords.keyword_id"), nullable=False, index=True),
    Column("title", String(512)),
    Column("publisher", String(255)),
    Column("price", Float),
    Column("current_rank", Integer),
    Column("review_count", Integer, nullable=False, default=0),
    Column("publication_date", Date),
)

rank_history_table = Table(
    "kdp_rank_history",
    metadata,
    Column("history_id", Integer, primary_key=True, autoincrement=True),
    Column("book_id", String(32), ForeignKey("kdp_books.identifier"), nullable=False, index=True),
    Column("rank", Integer),
    Column("date", Date, nullable=False),
    Column("derived_daily_sales", Float),
)

keyword_metrics_table = Table(
    "kdp_keyword_metrics",
    metadata,
    Column("keyword_id", String(64), ForeignKey("kdp_keywords.keyword_id"), nullable=False),
    Column("total_sales", Float, nullable=False),
    Column("self_pub_sales", Float, nullable=False),
    Column("demand_trend", String(16), nullable=False),
    Column("royalties", Float, nullable=False),
    Column("new_publications_30d", Integer, nullable=False),
    Column("supply_trend", String(16), nullable=False),
    Column("success_rate", Float, nullable=False),
    Column("self_pub_percentage", Float, nullable=False),
    Column("opportunity_score", Float, nullable=False),
    Column("calculated_at", DateTime, nullable=False),
    UniqueConstraint("keyword_id", name="uq_kdp_keyword_metrics_keyword"),
)


def create_schema(engine: Engine) -> None:
    """Create any missing tables."""

    metadata.create_all(engine)


__all__ = [
    "books_table",
    "create_schema",
    "keyword_metrics_table",
    "keywords_table",
    "metadata",
    "rank_history_table",
]
