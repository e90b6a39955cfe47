"""CLI entry point for the keyword metrics recalculation batch."""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from typing import Sequence

from kdpniche.db.engine import create_store_engine
from kdpniche.db.schema import create_schema
from kdpniche.db.stores import SqlBookStore, SqlKeywordStore, SqlMetricsStore
from kdpniche.errors import ConfigurationError, KdpNicheError
from kdpniche.etl.keyword_metrics import recalculate_all_metrics
from kdpniche.features.opportunity import ScoringStrategy
from kdpniche.settings import RULES_PATH, load_engine_rules
from kdpniche.utils.logs import configure_logging

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recalculate stored keyword metrics from stored books")
    parser.add_argument(
        "--keyword-id",
        dest="keyword_ids",
        action="append",
        help="Restrict the run to this keyword id (repeatable); defaults to every keyword",
    )
    parser.add_argument("--as-of", type=date.fromisoformat, help="Reference date YYYY-MM-DD (default: today)")
    parser.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in ScoringStrategy],
        help="Opportunity scoring strategy; defaults to the rules file's bulk strategy",
    )
    parser.add_argument("--config", default=str(RULES_PATH), help="Path to the engine rules YAML file")
    parser.add_argument("--create-schema", action="store_true", help="Create missing tables before running")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging("recalculate_metrics")
    as_of = args.as_of or date.today()
    try:
        rules = load_engine_rules(args.config)
        engine = create_store_engine()
        if args.create_schema:
            create_schema(engine)
        keywords = SqlKeywordStore(engine).list_keywords(args.keyword_ids)
        result = recalculate_all_metrics(
            keywords,
            SqlBookStore(engine),
            SqlMetricsStore(engine),
            as_of=as_of,
            strategy=args.strategy,
            rules=rules,
        )
    except ConfigurationError as exc:
        LOGGER.error("recalculate_metrics.configuration_error", extra={"error": str(exc)})
        return 1
    except KdpNicheError as exc:
        LOGGER.error("recalculate_metrics.failed", extra={"error": str(exc)})
        return 1
    except Exception:  # pragma: no cover - unexpected failure
        LOGGER.exception("recalculate_metrics.unexpected_error", extra={"as_of": as_of.isoformat()})
        return 1

    print(json.dumps(result.as_dict(), ensure_ascii=False, indent=2))
    return 2 if result.failures else 0


if __name__ == "__main__":  # pragma: no cover - CLI guard
    raise SystemExit(main())
