"""CLI entry point for the per-keyword Markdown market report."""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Sequence

from kdpniche.db.engine import create_store_engine
from kdpniche.db.stores import SqlBookStore, SqlHistoryStore, SqlKeywordStore, SqlMetricsStore
from kdpniche.errors import ConfigurationError, NotFoundError
from kdpniche.reports.builder import build_market_report_markdown
from kdpniche.reports.market_report import generate_market_report
from kdpniche.settings import RULES_PATH, load_engine_rules
from kdpniche.utils.logs import configure_logging

LOGGER = logging.getLogger(__name__)


def _month(value: str) -> int:
    month = int(value)
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError("month must be between 1 and 12")
    return month


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a market report for one keyword")
    parser.add_argument("--keyword-id", required=True, help="Keyword id whose metrics are reported")
    parser.add_argument("--keyword-name", help="Display name; looked up from the keyword table when omitted")
    parser.add_argument("--as-of", type=date.fromisoformat, help="Reference date YYYY-MM-DD (default: today)")
    parser.add_argument("--month", type=_month, help="Calendar month 1-12 for seasonality (default: --as-of month)")
    parser.add_argument("--investment-cost", type=float, help="Override the rules file's ROI investment cost")
    parser.add_argument("--format", choices=["md", "json"], default="md", help="Output format")
    parser.add_argument("--output", help="Write the report to this file instead of stdout")
    parser.add_argument("--config", default=str(RULES_PATH), help="Path to the engine rules YAML file")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging("market_report")
    as_of = args.as_of or date.today()
    current_month = (args.month or as_of.month) - 1
    try:
        rules = load_engine_rules(args.config)
        engine = create_store_engine()
        keyword_name = args.keyword_name
        if not keyword_name:
            matches = SqlKeywordStore(engine).list_keywords([args.keyword_id])
            if not matches:
                raise NotFoundError(f"Keyword {args.keyword_id!r} not found")
            keyword_name = matches[0].name
        report = generate_market_report(
            SqlMetricsStore(engine),
            SqlHistoryStore(engine),
            SqlBookStore(engine),
            args.keyword_id,
            keyword_name,
            current_month=current_month,
            as_of=as_of,
            investment_cost=args.investment_cost if args.investment_cost is not None else rules.investment_cost,
            window_days=rules.window_days,
            seasonal_patterns=rules.seasonal_patterns,
        )
    except ConfigurationError as exc:
        LOGGER.error("market_report.configuration_error", extra={"error": str(exc)})
        return 1
    except NotFoundError as exc:
        LOGGER.error("market_report.not_found", extra={"keyword_id": args.keyword_id, "error": str(exc)})
        return 1
    except Exception:  # pragma: no cover - unexpected failure
        LOGGER.exception("market_report.unexpected_error", extra={"keyword_id": args.keyword_id})
        return 1

    if args.format == "json":
        content = json.dumps(report.as_dict(), ensure_ascii=False, indent=2)
    else:
        content = build_market_report_markdown(report)

    if args.output:
        path = Path(args.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        LOGGER.info("market_report.written", extra={"path": str(path)})
    else:
        print(content)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI guard
    raise SystemExit(main())
