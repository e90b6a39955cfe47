"""Read/write helpers for the record stores using SQLAlchemy."""
from __future__ import annotations

import logging
from itertools import islice
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd
from sqlalchemy import Table, text
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def fetch_dataframe(engine: Engine, sql: Any, params: Mapping[str, object] | None = None) -> pd.DataFrame:
    """Execute ``sql`` (text or a Core selectable) and return a DataFrame."""

    stmt = text(sql) if isinstance(sql, str) else sql
    with engine.connect() as conn:
        result = conn.execute(stmt, dict(params or {}))
        rows = result.fetchall()
        columns = list(result.keys())
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


def _normalise_records(records: Iterable[Mapping[str, object]]) -> list[dict[str, object]]:
    """Convert pandas scalars (``Timestamp``, ``NaN``) to plain Python values."""

    normalised: list[dict[str, object]] = []
    for row in records:
        converted: dict[str, object] = {}
        for key, value in row.items():
            if isinstance(value, pd.Timestamp):
                converted[key] = value.to_pydatetime()
            elif value is not None and not isinstance(value, (list, dict, tuple)) and pd.isna(value):  # type: ignore[arg-type]
                converted[key] = None
            else:
                converted[key] = value
        normalised.append(converted)
    return normalised


def _chunks(seq: Sequence[Mapping[str, object]], size: int) -> Iterable[list[Mapping[str, object]]]:
    it = iter(seq)
    while True:
        batch = list(islice(it, size))
        if not batch:
            break
        yield batch


_DIALECT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


def _upsert_statement(dialect: str, table: Table, conflict_columns: Sequence[str]) -> Any:
    update_columns = [column.name for column in table.columns if column.name not in conflict_columns]
    if dialect == "mysql" or dialect == "mariadb":
        stmt = mysql_insert(table)
        targets = {name: stmt.inserted[name] for name in update_columns} or {
            name: stmt.inserted[name] for name in conflict_columns
        }
        return stmt.on_duplicate_key_update(**targets)
    factory = _DIALECT_INSERTS.get(dialect)
    if factory is None:
        raise NotImplementedError(f"upsert_rows does not support the {dialect!r} dialect")
    stmt = factory(table)
    if not update_columns:
        return stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
    return stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={name: stmt.excluded[name] for name in update_columns},
    )


def upsert_rows(
    engine: Engine,
    table: Table,
    records: Sequence[Mapping[str, object]] | pd.DataFrame,
    *,
    conflict_columns: Sequence[str],
    chunk_size: int = 500,
) -> int:
    """Insert ``records`` into ``table`` replacing rows that collide on ``conflict_columns``."""

    if isinstance(records, pd.DataFrame):
        if records.empty:
            return 0
        rows = _normalise_records(records.to_dict(orient="records"))
    else:
        rows = _normalise_records(records)
    if not rows:
        return 0

    dialect = engine.dialect.name
    statement = _upsert_statement(dialect, table, conflict_columns)
    logger.info("db.upsert", extra={"table": table.name, "dialect": dialect, "rows": len(rows)})
    affected = 0
    with engine.begin() as conn:
        for chunk in _chunks(rows, chunk_size):
            conn.execute(statement, chunk)
            affected += len(chunk)
    return affected


__all__ = ["fetch_dataframe", "upsert_rows"]
