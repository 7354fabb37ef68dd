from __future__ import annotations

from src.capacity.ledger import ScholarType
from src.store.memory import InMemoryStore
from src.workflow.assignment import assign_scholar
from src.workflow.reconcile import apply_capacity_reconciliation, compute_capacity_drift, count_admitted


def _records() -> list[dict]:
    return [
        {"id": "x1", "type": "Full Time", "supervisor_name": "Dr. Rao", "supervisor_status": "Admitted"},
        {"id": "x2", "type": "FT", "supervisor_name": " dr. rao ", "supervisor_status": "admitted"},
        {"id": "x3", "type": "PTE(Industry)", "supervisor_name": "Dr. Rao", "supervisor_status": "Admitted"},
        {"id": "x4", "type": "Full Time", "supervisor_name": "Dr. Rao", "supervisor_status": None},
        {"id": "x5", "type": "Part Time", "supervisor_name": "Dr. Rao", "supervisor_status": "Admitted"},
        {"id": "x6", "type": "PTI", "supervisor_name": "Dr. Iyer", "supervisor_status": "Admitted"},
    ]


def _supervisors() -> list[dict]:
    return [
        {
            "id": "s1",
            "name": "Dr. Rao",
            "current_full_time_scholars": 3,
            "current_part_time_industry_scholars": 1,
        },
        {"id": "s2", "name": "Dr. Iyer", "current_part_time_internal_scholars": 1},
    ]


def test_count_admitted_groups_by_name_and_bucket() -> None:
    counts = count_admitted(_records())

    assert counts[("dr. rao", ScholarType.FULL_TIME)] == 2
    assert counts[("dr. rao", ScholarType.PART_TIME_INDUSTRY)] == 1
    assert counts[("dr. iyer", ScholarType.PART_TIME_INTERNAL)] == 1
    assert sum(counts.values()) == 4


def test_compute_capacity_drift_reports_only_mismatches() -> None:
    drifts = compute_capacity_drift(_supervisors(), _records())

    assert [drift.to_dict() for drift in drifts] == [
        {
            "supervisor_id": "s1",
            "supervisor_name": "Dr. Rao",
            "scholar_type": "full_time",
            "column": "current_full_time_scholars",
            "recorded": 3,
            "actual": 2,
            "delta": -1,
        }
    ]


def test_apply_capacity_reconciliation_overwrites_counters() -> None:
    store = InMemoryStore({"supervisors": _supervisors(), "examination_records": _records()})

    drifts = compute_capacity_drift(store.select("supervisors"), store.select("examination_records"))
    result = apply_capacity_reconciliation(store, drifts)

    assert result.succeeded == ["s1"]
    assert store.get("supervisors", "s1")["current_full_time_scholars"] == 2
    assert compute_capacity_drift(store.select("supervisors"), store.select("examination_records")) == []


def test_ledger_stays_consistent_after_assignments() -> None:
    store = InMemoryStore(
        {
            "supervisors": [{"id": "s1", "name": "Dr. Rao", "max_full_time_scholars": 3}],
            "examination_records": [
                {"id": f"x{index}", "registered_name": f"Scholar {index}", "type": "Full Time"}
                for index in range(5)
            ],
        }
    )

    for index in range(5):
        try:
            assign_scholar(store, supervisor_id="s1", scholar_id=f"x{index}", scholar_type="Full Time")
        except ValueError:
            pass

    assert store.get("supervisors", "s1")["current_full_time_scholars"] == 3
    assert compute_capacity_drift(store.select("supervisors"), store.select("examination_records")) == []
