from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from src.capacity.ledger import ScholarType, scholar_type_from_label
from src.normalize.labels import resolve_scholar_type
from src.normalize.schema import ADMITTED, SUPERVISORS_TABLE, SupervisorRecord
from src.store.base import BaseStore
from src.workflow.batch import BatchResult, run_batch

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CapacityDrift:
    supervisor_id: Any
    supervisor_name: str
    scholar_type: ScholarType
    recorded: int
    actual: int

    @property
    def delta(self) -> int:
        return self.actual - self.recorded

    def to_dict(self) -> dict[str, Any]:
        return {
            "supervisor_id": self.supervisor_id,
            "supervisor_name": self.supervisor_name,
            "scholar_type": self.scholar_type.value,
            "column": self.scholar_type.current_column,
            "recorded": self.recorded,
            "actual": self.actual,
            "delta": self.delta,
        }


def _name_key(value: Any) -> str:
    return str(value or "").strip().lower()


def count_admitted(records: Iterable[Mapping[str, Any]]) -> Counter:
    """Admitted scholars per (supervisor name, bucket)."""

    counts: Counter = Counter()
    for record in records:
        if _name_key(record.get("supervisor_status")) != ADMITTED.lower():
            continue
        name = _name_key(record.get("supervisor_name"))
        bucket = scholar_type_from_label(resolve_scholar_type(record))
        if not name or bucket is None:
            continue
        counts[(name, bucket)] += 1
    return counts


def compute_capacity_drift(
    supervisors: Iterable[Mapping[str, Any]],
    records: Iterable[Mapping[str, Any]],
) -> list[CapacityDrift]:
    counts = count_admitted(records)
    drifts: list[CapacityDrift] = []
    for supervisor in supervisors:
        record = SupervisorRecord.from_row(supervisor)
        for bucket in ScholarType:
            recorded = getattr(record, bucket.current_column)
            actual = counts.get((_name_key(record.name), bucket), 0)
            if recorded != actual:
                drifts.append(
                    CapacityDrift(
                        supervisor_id=supervisor.get("id"),
                        supervisor_name=record.name,
                        scholar_type=bucket,
                        recorded=recorded,
                        actual=actual,
                    )
                )
    return drifts


def apply_capacity_reconciliation(store: BaseStore, drifts: Iterable[CapacityDrift]) -> BatchResult:
    """Overwrite drifted counters with the recounted values, one write per supervisor."""

    updates: dict[Any, dict[str, int]] = {}
    for drift in drifts:
        updates.setdefault(drift.supervisor_id, {})[drift.scholar_type.current_column] = drift.actual

    result = run_batch(
        updates,
        lambda supervisor_id: store.update(SUPERVISORS_TABLE, supervisor_id, updates[supervisor_id]),
    )
    if result.failed:
        logger.warning("Reconciliation left %d supervisors unchanged", result.failed_count)
    return result
