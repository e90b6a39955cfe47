"""Literal fixtures for scoring, report and store tests."""
from __future__ import annotations

__all__ = [
    "AS_OF",
    "build_book_sample",
    "build_declining_history",
    "build_flat_history",
    "build_metrics_sample",
    "build_rising_history",
    "build_unknown_books",
]

from .book_samples import (
    AS_OF,
    build_book_sample,
    build_declining_history,
    build_flat_history,
    build_metrics_sample,
    build_rising_history,
    build_unknown_books,
)
