from __future__ import annotations

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence
from uuid import uuid4

from src.io.reports import write_json_atomic
from src.normalize.schema import coerce_count
from src.store.base import BaseStore, RemoteFailure, Row

logger = logging.getLogger(__name__)


def _same(left: Any, right: Any) -> bool:
    if left == right:
        return True
    return left is not None and right is not None and str(left) == str(right)


def _sort_key(value: Any) -> tuple[int, Any]:
    # Numbers sort before text; mixed types never compare directly.
    if isinstance(value, (int, float)):
        return (0, value)
    try:
        return (0, float(value))
    except (TypeError, ValueError):
        return (1, str(value))


def _order_rows(rows: list[Row], column: str, descending: bool) -> list[Row]:
    present = [row for row in rows if row.get(column) not in (None, "")]
    missing = [row for row in rows if row.get(column) in (None, "")]
    present.sort(key=lambda row: _sort_key(row.get(column)), reverse=descending)
    return present + missing


class InMemoryStore(BaseStore):
    """Dict-of-tables store for offline runs and tests.

    Every primitive holds one lock, so the counter operations are atomic with
    respect to each other exactly like the server-side functions.
    """

    name = "memory"

    def __init__(self, tables: Mapping[str, Iterable[Mapping[str, Any]]] | None = None) -> None:
        self._lock = threading.Lock()
        self._tables: dict[str, list[Row]] = {}
        for table, rows in (tables or {}).items():
            self._tables[table] = [dict(row) for row in rows]

    @classmethod
    def from_json_file(cls, path: Path) -> InMemoryStore:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Store file '{path}' must contain an object of tables.")
        return cls(payload)

    def dump_json(self, path: Path) -> None:
        write_json_atomic(self.snapshot(), Path(path))

    def snapshot(self) -> dict[str, list[Row]]:
        with self._lock:
            return copy.deepcopy(self._tables)

    def _find(self, table: str, row_id: Any) -> Row:
        for row in self._tables.get(table, []):
            if _same(row.get("id"), row_id):
                return row
        raise RemoteFailure(f"No row with id={row_id!r} in '{table}'.")

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        with self._lock:
            rows = [
                dict(row)
                for row in self._tables.get(table, [])
                if all(_same(row.get(column), value) for column, value in (filters or {}).items())
            ]
        if order_by:
            rows = _order_rows(rows, order_by, descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        stored: list[Row] = []
        with self._lock:
            target = self._tables.setdefault(table, [])
            for row in rows:
                new_row = dict(row)
                new_row.setdefault("id", uuid4().hex)
                target.append(new_row)
                stored.append(dict(new_row))
        return stored

    def update(self, table: str, row_id: Any, values: Mapping[str, Any]) -> Row:
        with self._lock:
            row = self._find(table, row_id)
            row.update(values)
            return dict(row)

    def delete(self, table: str, row_id: Any) -> None:
        self.delete_many(table, [row_id])

    def delete_many(self, table: str, row_ids: Iterable[Any]) -> int:
        wanted = list(row_ids)
        with self._lock:
            rows = self._tables.get(table, [])
            kept = [row for row in rows if not any(_same(row.get("id"), row_id) for row_id in wanted)]
            removed = len(rows) - len(kept)
            self._tables[table] = kept
        logger.debug("Deleted %d rows from %s", removed, table)
        return removed

    def increment_if_below(
        self, table: str, row_id: Any, *, column: str, limit_column: str
    ) -> int | None:
        with self._lock:
            row = self._find(table, row_id)
            current = coerce_count(row.get(column))
            if current >= coerce_count(row.get(limit_column)):
                return None
            row[column] = current + 1
            return row[column]

    def decrement_floor(self, table: str, row_id: Any, *, column: str) -> int:
        with self._lock:
            row = self._find(table, row_id)
            row[column] = max(0, coerce_count(row.get(column)) - 1)
            return row[column]
