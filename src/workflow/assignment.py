from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from src.capacity.ledger import ScholarType, scholar_type_from_label, vacancy
from src.matching.department import department_matches
from src.matching.faculty import faculties_match
from src.normalize.labels import canonical_type, resolve_scholar_type
from src.normalize.schema import (
    ADMITTED,
    EXAMINATION_RECORDS_TABLE,
    SUPERVISORS_TABLE,
    SupervisorRecord,
    scholar_name,
)
from src.store.base import BaseStore, RemoteFailure
from src.workflow.errors import (
    AlreadyAssignedError,
    MissingSelectionError,
    RecordNotFoundError,
    UnknownScholarTypeError,
    ValidationError,
    VacancyError,
)

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATE_LIMIT = 50


@dataclass(frozen=True, slots=True)
class Assignment:
    scholar_id: Any
    supervisor_id: Any
    supervisor_name: str
    scholar_type: ScholarType
    current_count: int
    vacancy: int


@dataclass(frozen=True, slots=True)
class Unassignment:
    scholar_id: Any
    supervisor_id: Optional[Any]
    supervisor_name: str
    scholar_type: Optional[ScholarType]
    current_count: Optional[int]


def _blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _is_assigned(record: Mapping[str, Any]) -> bool:
    return not _blank(record.get("supervisor_name"))


def assign_scholar(
    store: BaseStore,
    *,
    supervisor_id: Any,
    scholar_id: Any,
    scholar_type: Any,
    table: str = EXAMINATION_RECORDS_TABLE,
) -> Assignment:
    """Admit one scholar under a supervisor.

    Every precondition is checked before the first write. The ledger slot is
    reserved with a conditional increment, then the scholar row is written
    together with the bucket label it was admitted under; if that write fails
    the slot is released again.
    """

    if _blank(scholar_id):
        raise MissingSelectionError("Select a scholar to assign.")
    if _blank(scholar_type):
        raise MissingSelectionError("Select a scholar type.")
    bucket = scholar_type_from_label(scholar_type)
    if bucket is None:
        raise UnknownScholarTypeError(f"No capacity bucket for scholar type '{scholar_type}'.")

    supervisor = store.get(SUPERVISORS_TABLE, supervisor_id)
    if supervisor is None:
        raise RecordNotFoundError(f"Supervisor {supervisor_id} not found.")
    if SupervisorRecord.from_row(supervisor).vacancy(bucket) <= 0:
        raise VacancyError(f"No {bucket.value} vacancy for supervisor {supervisor.get('name')}.")

    scholar = store.get(table, scholar_id)
    if scholar is None or _blank(scholar.get("id")):
        raise RecordNotFoundError(f"Scholar {scholar_id} not found.")
    if _is_assigned(scholar):
        raise AlreadyAssignedError(
            f"Scholar {scholar_id} is already assigned to {scholar.get('supervisor_name')}."
        )

    new_count = store.increment_if_below(
        SUPERVISORS_TABLE,
        supervisor_id,
        column=bucket.current_column,
        limit_column=bucket.max_column,
    )
    if new_count is None:
        raise VacancyError(f"No {bucket.value} vacancy for supervisor {supervisor.get('name')}.")

    supervisor_name = str(supervisor.get("name") or "")
    try:
        store.update(
            table,
            scholar["id"],
            {"supervisor_name": supervisor_name, "supervisor_status": ADMITTED, "type": bucket.label},
        )
    except RemoteFailure:
        logger.exception("Scholar write failed; releasing %s slot of %s", bucket.value, supervisor_id)
        store.decrement_floor(SUPERVISORS_TABLE, supervisor_id, column=bucket.current_column)
        raise

    logger.info("Assigned scholar %s to %s (%s)", scholar_id, supervisor_name, bucket.value)
    return Assignment(
        scholar_id=scholar["id"],
        supervisor_id=supervisor_id,
        supervisor_name=supervisor_name,
        scholar_type=bucket,
        current_count=new_count,
        vacancy=vacancy({**supervisor, bucket.current_column: new_count}, bucket),
    )


def unassign_scholar(
    store: BaseStore, scholar_id: Any, *, table: str = EXAMINATION_RECORDS_TABLE
) -> Unassignment:
    if _blank(scholar_id):
        raise MissingSelectionError("Select a scholar to unassign.")
    scholar = store.get(table, scholar_id)
    if scholar is None:
        raise RecordNotFoundError(f"Scholar {scholar_id} not found.")
    if not _is_assigned(scholar):
        raise ValidationError(f"Scholar {scholar_id} has no supervisor.")

    supervisor_name = str(scholar["supervisor_name"]).strip()
    store.update(table, scholar["id"], {"supervisor_name": None, "supervisor_status": None})

    bucket = scholar_type_from_label(resolve_scholar_type(scholar))
    supervisors = store.select(SUPERVISORS_TABLE, filters={"name": supervisor_name}, limit=1)
    if not supervisors:
        logger.warning("Supervisor %s not found; ledger left unchanged", supervisor_name)
        return Unassignment(scholar["id"], None, supervisor_name, bucket, None)
    supervisor_id = supervisors[0].get("id")
    if bucket is None:
        logger.warning("Scholar %s has no capacity bucket; ledger left unchanged", scholar_id)
        return Unassignment(scholar["id"], supervisor_id, supervisor_name, None, None)

    current = store.decrement_floor(SUPERVISORS_TABLE, supervisor_id, column=bucket.current_column)
    logger.info("Unassigned scholar %s from %s (%s)", scholar_id, supervisor_name, bucket.value)
    return Unassignment(scholar["id"], supervisor_id, supervisor_name, bucket, current)


def _marks(record: Mapping[str, Any]) -> float:
    try:
        value = float(record.get("total_marks"))
    except (TypeError, ValueError):
        return -math.inf
    return value if math.isfinite(value) else -math.inf


def _is_absent(record: Mapping[str, Any]) -> bool:
    return "absent" in str(record.get("total_marks") or "").lower()


def _faculty_of(record: Mapping[str, Any]) -> Any:
    return record.get("institution") or record.get("faculty")


def _type_matches(record: Mapping[str, Any], scholar_type: Any) -> bool:
    wanted = str(scholar_type or "").strip().lower()
    if not wanted or "all" in wanted:
        return True
    wanted = canonical_type(wanted).lower()
    actual = resolve_scholar_type(record).lower()
    return wanted in actual or actual in wanted


def find_candidate_scholars(
    records: Iterable[Mapping[str, Any]],
    *,
    faculty_name: Any,
    department_name: Any,
    scholar_type: Any = None,
    limit: int = DEFAULT_CANDIDATE_LIMIT,
) -> list[dict[str, Any]]:
    """Unassigned, present scholars of one department, best marks first."""

    candidates = [
        dict(record)
        for record in records
        if not _is_assigned(record)
        and scholar_name(record)
        and faculties_match(_faculty_of(record), faculty_name)
        and department_matches(record, department_name)
        and not _is_absent(record)
        and _type_matches(record, scholar_type)
    ]
    candidates.sort(key=_marks, reverse=True)
    return candidates[:limit]


def load_candidate_scholars(
    store: BaseStore,
    *,
    faculty_name: Any,
    department_name: Any,
    scholar_type: Any = None,
    limit: int = DEFAULT_CANDIDATE_LIMIT,
    table: str = EXAMINATION_RECORDS_TABLE,
) -> list[dict[str, Any]]:
    return find_candidate_scholars(
        store.select(table),
        faculty_name=faculty_name,
        department_name=department_name,
        scholar_type=scholar_type,
        limit=limit,
    )


def list_assignments(
    store: BaseStore,
    supervisor_name: str | None = None,
    *,
    table: str = EXAMINATION_RECORDS_TABLE,
) -> list[dict[str, Any]]:
    filters: dict[str, Any] = {"supervisor_status": ADMITTED}
    if supervisor_name:
        filters["supervisor_name"] = supervisor_name
    return store.select(table, filters=filters, order_by="supervisor_name")
