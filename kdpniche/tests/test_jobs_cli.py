from __future__ import annotations

import json
from pathlib import Path

import pytest

pytest.importorskip("sqlalchemy")

from kdpniche.db.engine import create_store_engine
from kdpniche.db.schema import create_schema
from kdpniche.db.stores import SqlBookStore, SqlHistoryStore, SqlKeywordStore, SqlMetricsStore
from kdpniche.jobs import market_report_job, recalculate_metrics_job
from kdpniche.models import Keyword
from kdpniche.tests.data import build_book_sample, build_metrics_sample, build_rising_history


@pytest.fixture()
def seeded_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("KDPN_DB_URI", f"sqlite:///{tmp_path / 'kdp.db'}")
    monkeypatch.setenv("KDPN_LOG_DIR", "")
    create_store_engine.cache_clear()
    engine = create_store_engine()
    create_schema(engine)
    SqlKeywordStore(engine).add(Keyword("kw-keto", "keto diet cookbook"))
    SqlBookStore(engine).upsert_books("kw-keto", build_book_sample())
    history = SqlHistoryStore(engine)
    for point in build_rising_history():
        history.append(point)
    yield engine
    engine.dispose()
    create_store_engine.cache_clear()


def test_recalculate_job_writes_metrics(seeded_db, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = recalculate_metrics_job.main(["--as-of", "2025-03-31"])

    assert exit_code == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["job_type"] == "metrics_recalculation"
    assert summary["processed_items"] == 1
    stored = SqlMetricsStore(seeded_db).get("kw-keto")
    assert stored is not None
    assert stored.opportunity_score == 49


def test_recalculate_job_reports_partial_failures(seeded_db, capsys: pytest.CaptureFixture[str]) -> None:
    SqlKeywordStore(seeded_db).add(Keyword("kw-empty", "no books yet"))

    exit_code = recalculate_metrics_job.main(["--as-of", "2025-03-31", "--strategy", "full"])

    assert exit_code == 2
    summary = json.loads(capsys.readouterr().out)
    assert summary["total_items"] == 2
    assert [failure["item_id"] for failure in summary["failures"]] == ["kw-empty"]
    assert SqlMetricsStore(seeded_db).get("kw-keto").opportunity_score == 59


def test_market_report_job_renders_markdown(seeded_db, tmp_path: Path) -> None:
    SqlMetricsStore(seeded_db).upsert("kw-keto", build_metrics_sample(keyword_id="kw-keto"))
    output = tmp_path / "reports" / "keto.md"

    exit_code = market_report_job.main(
        ["--keyword-id", "kw-keto", "--as-of", "2025-03-31", "--month", "1", "--output", str(output)]
    )

    assert exit_code == 0
    content = output.read_text(encoding="utf-8")
    assert content.startswith("# Market report: keto diet cookbook")
    assert "Growing Market Demand" in content


def test_market_report_job_json_to_stdout(seeded_db, capsys: pytest.CaptureFixture[str]) -> None:
    SqlMetricsStore(seeded_db).upsert("kw-keto", build_metrics_sample(keyword_id="kw-keto"))

    exit_code = market_report_job.main(
        ["--keyword-id", "kw-keto", "--keyword-name", "Keto", "--as-of", "2025-03-31", "--format", "json"]
    )

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["keyword"] == "Keto"
    assert payload["current_month"] == 2


def test_market_report_job_without_metrics(seeded_db) -> None:
    assert market_report_job.main(["--keyword-id", "kw-keto", "--as-of", "2025-03-31"]) == 1
    assert market_report_job.main(["--keyword-id", "kw-missing", "--as-of", "2025-03-31"]) == 1


def test_jobs_require_database_uri(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("KDPN_DB_URI", raising=False)
    monkeypatch.setenv("KDPN_LOG_DIR", "")
    create_store_engine.cache_clear()

    assert recalculate_metrics_job.main([]) == 1
    assert market_report_job.main(["--keyword-id", "kw-keto", "--keyword-name", "keto"]) == 1
