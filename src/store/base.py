from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Sequence


class RemoteFailure(RuntimeError):
    """A store call failed (network, permission or constraint error)."""


Row = dict[str, Any]


class BaseStore(ABC):
    """Query and mutation primitives over named tables."""

    name: str

    @abstractmethod
    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        """Rows whose columns equal every value in `filters`."""

    @abstractmethod
    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        """Insert rows and return them as stored."""

    @abstractmethod
    def update(self, table: str, row_id: Any, values: Mapping[str, Any]) -> Row:
        """Update one row by id; raises `RemoteFailure` when it does not exist."""

    @abstractmethod
    def delete(self, table: str, row_id: Any) -> None:
        """Delete one row by id."""

    @abstractmethod
    def delete_many(self, table: str, row_ids: Iterable[Any]) -> int:
        """Delete rows by id and return how many were removed."""

    @abstractmethod
    def increment_if_below(
        self, table: str, row_id: Any, *, column: str, limit_column: str
    ) -> int | None:
        """Add one to `column` iff it is below `limit_column`, in a single step.

        Returns the new value, or None when the row is already at its limit.
        """

    @abstractmethod
    def decrement_floor(self, table: str, row_id: Any, *, column: str) -> int:
        """Subtract one from `column`, never going below zero."""

    def get(self, table: str, row_id: Any) -> Row | None:
        rows = self.select(table, filters={"id": row_id}, limit=1)
        return rows[0] if rows else None

    def close(self) -> None:
        return None
