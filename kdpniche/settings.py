"""Runtime configuration helpers for environment-driven settings."""
from __future__ import annotations

import logging
import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from kdpniche.errors import ConfigurationError
from kdpniche.features.opportunity import ScoringStrategy
from kdpniche.features.seasonal import DEFAULT_PATTERNS, SeasonalPattern, patterns_from_config

LOGGER = logging.getLogger(__name__)

RULES_PATH = Path(__file__).resolve().parents[1] / "configs" / "niche_rules.yml"

DEFAULT_RULES: dict[str, Any] = {
    "metrics": {
        "royalty_rate": 0.35,
        "success_rank": 100000,
        "recent_days": 30,
    },
    "scoring": {
        "analyze_strategy": ScoringStrategy.FULL.value,
        "bulk_strategy": ScoringStrategy.BULK.value,
    },
    "roi": {
        "investment_cost": 2000,
    },
    "trend": {
        "window_days": 90,
    },
    "seasonal": {
        "patterns": None,
    },
}


def read_env_file(path: str | os.PathLike[str]) -> dict[str, str]:
    """Parse ``KEY=value`` lines from ``path``; a missing file yields ``{}``.

    Blank lines and ``#`` comments are skipped, a leading ``export`` is
    accepted and one pair of matching quotes around the value is removed.
    """

    env_path = Path(path)
    if not env_path.is_file():
        return {}
    values: dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#"):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        values[key] = value
    return values


def load_dotenv(path: str | os.PathLike[str] = ".env", *, override: bool = False) -> list[str]:
    """Copy ``path``'s entries into ``os.environ`` and return the keys set.

    Existing variables win unless ``override`` is true.
    """

    applied = []
    for key, value in read_env_file(path).items():
        if override or key not in os.environ:
            os.environ[key] = value
            applied.append(key)
    if applied:
        LOGGER.debug("settings.dotenv_loaded", extra={"path": str(path), "keys": applied})
    return applied


@dataclass(slots=True)
class DatabaseSettings:
    """Settings used to build the SQLAlchemy engine for the record stores."""

    uri: str
    echo: bool = False


def get_database_settings(*, env_paths: Iterable[str | os.PathLike[str]] = (".env",)) -> DatabaseSettings:
    """Return database settings sourced from environment variables."""

    for candidate in env_paths:
        load_dotenv(candidate)
    uri = os.getenv("KDPN_DB_URI", "").strip()
    if not uri:
        raise ConfigurationError("Environment variable KDPN_DB_URI must be configured")
    echo = os.getenv("KDPN_DB_ECHO", "0").strip().lower() in {"1", "true", "yes"}
    return DatabaseSettings(uri=uri, echo=echo)


@dataclass(slots=True)
class EngineRules:
    """Tunable constants for metrics computation and reporting."""

    royalty_rate: float
    success_rank: int
    recent_days: int
    analyze_strategy: ScoringStrategy
    bulk_strategy: ScoringStrategy
    investment_cost: float
    window_days: int
    seasonal_patterns: tuple[SeasonalPattern, ...]


def _deep_update(target: dict[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
    return target


def _build_rules(raw: Mapping[str, Any]) -> EngineRules:
    metrics = raw["metrics"]
    scoring = raw["scoring"]
    patterns_raw = raw["seasonal"].get("patterns")
    patterns = patterns_from_config(patterns_raw) if patterns_raw else DEFAULT_PATTERNS
    return EngineRules(
        royalty_rate=float(metrics["royalty_rate"]),
        success_rank=int(metrics["success_rank"]),
        recent_days=int(metrics["recent_days"]),
        analyze_strategy=ScoringStrategy(scoring["analyze_strategy"]),
        bulk_strategy=ScoringStrategy(scoring["bulk_strategy"]),
        investment_cost=float(raw["roi"]["investment_cost"]),
        window_days=int(raw["trend"]["window_days"]),
        seasonal_patterns=patterns,
    )


def default_rules() -> EngineRules:
    return _build_rules(deepcopy(DEFAULT_RULES))


def load_engine_rules(config_path: str | Path | None = None) -> EngineRules:
    """Return engine rules merged from ``config_path`` over :data:`DEFAULT_RULES`.

    A missing or unreadable rules file logs a warning and falls back to the
    built-in defaults.  Values that cannot be interpreted raise
    :class:`ConfigurationError`.
    """

    path = Path(config_path) if config_path is not None else RULES_PATH
    merged = deepcopy(DEFAULT_RULES)
    if not path.exists():
        LOGGER.warning("settings.rules_missing", extra={"path": str(path)})
        return _build_rules(merged)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError:
        LOGGER.error("settings.rules_parse_failed", extra={"path": str(path)}, exc_info=True)
        return _build_rules(merged)
    except OSError:
        LOGGER.error("settings.rules_read_failed", extra={"path": str(path)}, exc_info=True)
        return _build_rules(merged)

    if not isinstance(data, Mapping):
        LOGGER.error("settings.rules_not_mapping", extra={"path": str(path)})
        return _build_rules(merged)

    _deep_update(merged, data)
    try:
        return _build_rules(merged)
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid engine rules in {path}: {exc}") from exc


__all__ = [
    "DEFAULT_RULES",
    "DatabaseSettings",
    "EngineRules",
    "RULES_PATH",
    "default_rules",
    "get_database_settings",
    "load_dotenv",
    "load_engine_rules",
    "read_env_file",
]
