from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Mapping, Sequence

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.store.base import BaseStore, RemoteFailure, Row
from src.store.settings import StoreSettings

DEFAULT_USER_AGENT = "ScholarDesk/0.1"
logger = logging.getLogger(__name__)
_SLOW_REQUEST_SECONDS = 5.0


def _eq(value: Any) -> str:
    return f"eq.{value}"


def _in(values: Iterable[Any]) -> str:
    return "in.(" + ",".join(str(value) for value in values) + ")"


class RestStore(BaseStore):
    """PostgREST-style table client.

    Only idempotent GETs are retried. The capacity counters call the
    `increment_if_below` and `decrement_floor` database functions defined in
    `sql/capacity_counters.sql`; install that file once per database.
    """

    name = "rest"

    def __init__(self, settings: StoreSettings, *, access_token: str | None = None) -> None:
        self.settings = settings
        self._session = requests.Session()
        bearer = access_token or settings.service_key or settings.api_key
        self._session.headers.update(
            {
                "User-Agent": DEFAULT_USER_AGENT,
                "apikey": settings.api_key,
                "Authorization": f"Bearer {bearer}",
                "Content-Type": "application/json",
            }
        )
        retry = Retry(
            total=settings.max_retries,
            connect=settings.max_retries,
            read=settings.max_retries,
            status=settings.max_retries,
            backoff_factor=settings.backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def close(self) -> None:
        self._session.close()

    @property
    def timeout_tuple(self) -> tuple[float, float]:
        connect_timeout = max(1.0, min(self.settings.timeout_seconds, 5.0))
        read_timeout = max(connect_timeout, self.settings.timeout_seconds)
        return connect_timeout, read_timeout

    def _table_url(self, table: str) -> str:
        return f"{self.settings.rest_url}/{table}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        started_at = time.monotonic()
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=dict(params or {}),
                json=json_body,
                headers=dict(headers or {}),
                timeout=self.timeout_tuple,
            )
            elapsed = time.monotonic() - started_at
            if elapsed > _SLOW_REQUEST_SECONDS:
                logger.warning("Slow HTTP %s %.3fs %s", method, elapsed, url)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Store request failed: %s %s (%s)", method, url, exc)
            raise RemoteFailure(f"{method} {url} failed: {exc}") from exc
        return response

    def _rows(self, response: Response) -> list[Row]:
        if not response.content:
            return []
        payload = response.json()
        if isinstance(payload, dict):
            return [payload]
        return list(payload)

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        params: dict[str, Any] = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = "is.null" if value is None else _eq(value)
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}.nullslast"
        if limit is not None:
            params["limit"] = int(limit)
        return self._rows(self._request("GET", self._table_url(table), params=params))

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        if not rows:
            return []
        response = self._request(
            "POST",
            self._table_url(table),
            json_body=[dict(row) for row in rows],
            headers={"Prefer": "return=representation"},
        )
        return self._rows(response)

    def update(self, table: str, row_id: Any, values: Mapping[str, Any]) -> Row:
        response = self._request(
            "PATCH",
            self._table_url(table),
            params={"id": _eq(row_id)},
            json_body=dict(values),
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response)
        if not rows:
            raise RemoteFailure(f"No row with id={row_id!r} in '{table}'.")
        return rows[0]

    def delete(self, table: str, row_id: Any) -> None:
        self._request("DELETE", self._table_url(table), params={"id": _eq(row_id)})

    def delete_many(self, table: str, row_ids: Iterable[Any]) -> int:
        ids = list(row_ids)
        if not ids:
            return 0
        response = self._request(
            "DELETE",
            self._table_url(table),
            params={"id": _in(ids)},
            headers={"Prefer": "return=representation"},
        )
        return len(self._rows(response))

    def _rpc(self, function: str, arguments: Mapping[str, Any]) -> Any:
        response = self._request(
            "POST",
            f"{self.settings.rest_url}/rpc/{function}",
            json_body=dict(arguments),
        )
        if not response.content:
            return None
        return response.json()

    def increment_if_below(
        self, table: str, row_id: Any, *, column: str, limit_column: str
    ) -> int | None:
        result = self._rpc(
            "increment_if_below",
            {"p_table": table, "p_id": str(row_id), "p_column": column, "p_limit_column": limit_column},
        )
        return None if result is None else int(result)

    def decrement_floor(self, table: str, row_id: Any, *, column: str) -> int:
        result = self._rpc(
            "decrement_floor",
            {"p_table": table, "p_id": str(row_id), "p_column": column},
        )
        return int(result or 0)
