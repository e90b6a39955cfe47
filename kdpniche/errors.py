"""Exception taxonomy shared across the scoring engine and its adapters."""
from __future__ import annotations

from dataclasses import dataclass


class KdpNicheError(RuntimeError):
    """Base class for errors raised by kdpniche."""


class ConfigurationError(KdpNicheError):
    """Raised when a required collaborator (database, rules file) is unavailable."""


class NotFoundError(KdpNicheError):
    """Raised when a referenced keyword, metrics snapshot or book set is absent."""


class MetricsNotFound(NotFoundError):
    """Raised when a report is requested for a keyword without a metrics snapshot."""

    def __init__(self, keyword: str) -> None:
        super().__init__(f"Keyword metrics not found for {keyword!r}")
        self.keyword = keyword


@dataclass(frozen=True, slots=True)
class PartialFailure:
    """Records one failed item inside a batch operation that kept running."""

    item_id: str
    item_name: str
    error: str

    def as_dict(self) -> dict[str, str]:
        return {"item_id": self.item_id, "item_name": self.item_name, "error": self.error}


__all__ = [
    "ConfigurationError",
    "KdpNicheError",
    "MetricsNotFound",
    "NotFoundError",
    "PartialFailure",
]
