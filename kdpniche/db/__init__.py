"""Record store adapters for the scoring engine."""
from .memory import InMemoryBookStore, InMemoryHistoryStore, InMemoryKeywordStore, InMemoryMetricsStore

__all__ = [
    "InMemoryBookStore",
    "InMemoryHistoryStore",
    "InMemoryKeywordStore",
    "InMemoryMetricsStore",
]
