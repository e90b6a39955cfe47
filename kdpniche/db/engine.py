"""SQLAlchemy engine helpers for the record stores."""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from kdpniche.settings import get_database_settings

DEFAULT_POOL_KWARGS: dict[str, Any] = {
    "pool_pre_ping": True,
    "pool_recycle": 1800,
}


@lru_cache(maxsize=1)
def create_store_engine(**overrides: Any) -> Engine:
    """Create (or reuse) the engine configured by ``KDPN_DB_URI``.

    Raises :class:`~kdpniche.errors.ConfigurationError` when no URI is set.
    """

    settings = get_database_settings()
    kwargs = {**DEFAULT_POOL_KWARGS, **overrides}
    kwargs.setdefault("echo", settings.echo)
    return create_engine(settings.uri, **kwargs)


__all__ = ["create_store_engine"]
