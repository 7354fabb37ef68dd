from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from src.eligibility.duplicates import (
    find_duplicate_groups,
    has_blocking_duplicates,
    uploaded_duplicate_ids,
)
from src.normalize.lifecycle import (
    StageKind,
    forward_status_for_faculty,
    parse_stage,
    publish_status_for_faculty,
)
from src.normalize.schema import EXAMINATION_RECORDS_TABLE, SCHOLAR_APPLICATIONS_TABLE
from src.store.base import BaseStore
from src.workflow.batch import DEFAULT_MAX_WORKERS, BatchResult, run_batch
from src.workflow.errors import (
    AlreadyForwardedError,
    DuplicateRecordsError,
    MissingSelectionError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)


def _is_forwarded(record: Mapping[str, Any]) -> bool:
    return parse_stage(record.get("status")).kind is StageKind.FORWARDED


def forward_scholar(
    store: BaseStore, scholar_id: Any, *, table: str = SCHOLAR_APPLICATIONS_TABLE
) -> dict[str, Any]:
    """Tag one application as forwarded to its faculty."""

    scholar = store.get(table, scholar_id)
    if scholar is None:
        raise RecordNotFoundError(f"Scholar {scholar_id} not found.")
    if _is_forwarded(scholar):
        raise AlreadyForwardedError(f"Scholar {scholar_id} is already forwarded.")
    status = forward_status_for_faculty(scholar.get("faculty"))
    return store.update(table, scholar["id"], {"status": status})


def bulk_forward(
    store: BaseStore,
    scholar_ids: Iterable[Any],
    *,
    table: str = SCHOLAR_APPLICATIONS_TABLE,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> BatchResult:
    return run_batch(
        scholar_ids,
        lambda scholar_id: forward_scholar(store, scholar_id, table=table),
        max_workers=max_workers,
    )


def forward_all(
    store: BaseStore,
    records: Iterable[Mapping[str, Any]],
    *,
    table: str = SCHOLAR_APPLICATIONS_TABLE,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> BatchResult:
    """Forward every record not yet forwarded, refusing while duplicates remain."""

    rows = list(records)
    if has_blocking_duplicates(rows):
        raise DuplicateRecordsError("Resolve duplicate application numbers, emails or phones first.")
    pending = [row.get("id") for row in rows if not _is_forwarded(row)]
    logger.info("Forwarding %d of %d records", len(pending), len(rows))
    return bulk_forward(store, pending, table=table, max_workers=max_workers)


def bulk_delete(
    store: BaseStore,
    scholar_ids: Iterable[Any],
    *,
    table: str = SCHOLAR_APPLICATIONS_TABLE,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> BatchResult:
    return run_batch(
        scholar_ids,
        lambda scholar_id: store.delete(table, scholar_id),
        max_workers=max_workers,
    )


def delete_uploaded_duplicates(
    store: BaseStore,
    records: Iterable[Mapping[str, Any]],
    *,
    table: str = SCHOLAR_APPLICATIONS_TABLE,
) -> list[Any]:
    ids = uploaded_duplicate_ids(find_duplicate_groups(records))
    if not ids:
        return []
    removed = store.delete_many(table, ids)
    logger.info("Deleted %d uploaded duplicates", removed)
    return ids


def publish_faculty_results(
    store: BaseStore,
    faculty: Any,
    scholar_ids: Iterable[Any],
    *,
    table: str = EXAMINATION_RECORDS_TABLE,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> BatchResult:
    ids = list(scholar_ids)
    if not ids:
        raise MissingSelectionError("No scholars selected for publishing.")
    status = publish_status_for_faculty(faculty)
    return run_batch(
        ids,
        lambda scholar_id: store.update(table, scholar_id, {"result_dir": status}),
        max_workers=max_workers,
    )
