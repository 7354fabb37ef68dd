from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.capacity.ledger import vacancy_summary
from src.io.reports import format_utc, report_path_for, write_json_atomic
from src.normalize.schema import EXAMINATION_RECORDS_TABLE, SUPERVISORS_TABLE
from src.store.base import BaseStore
from src.store.memory import InMemoryStore
from src.store.registry import create_store
from src.workflow.reconcile import apply_capacity_reconciliation, compute_capacity_drift

logger = logging.getLogger("reconcile_capacity")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recount admitted scholars and compare them with supervisor counters."
    )
    parser.add_argument("--store-file", type=Path, default=None)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--table", type=str, default=EXAMINATION_RECORDS_TABLE)
    parser.add_argument("--apply", action="store_true", help="Write recounted values back.")
    parser.add_argument("--report-dir", type=Path, default=ROOT_DIR / "reports" / "reconcile")
    return parser.parse_args()


def run_reconcile(
    *,
    store: BaseStore,
    table: str = EXAMINATION_RECORDS_TABLE,
    apply: bool = False,
    report_dir: Path | None = None,
) -> dict[str, Any]:
    started_at = datetime.now(tz=UTC)
    report_path = report_path_for(report_dir or (ROOT_DIR / "reports" / "reconcile"), "reconcile", started_at)

    supervisors = store.select(SUPERVISORS_TABLE)
    records = store.select(table)
    drifts = compute_capacity_drift(supervisors, records)
    for drift in drifts:
        logger.warning(
            "Drift %s %s: recorded=%d actual=%d",
            drift.supervisor_name,
            drift.scholar_type.value,
            drift.recorded,
            drift.actual,
        )

    applied: dict[str, Any] | None = None
    if apply and drifts:
        applied = apply_capacity_reconciliation(store, drifts).to_dict()

    if applied is None:
        status = "success"
    else:
        status = applied["status"]

    # Vacancy after any writes.
    summary = vacancy_summary(store.select(SUPERVISORS_TABLE))
    report_payload = {
        "status": status,
        "run_started_at": format_utc(started_at),
        "run_finished_at": format_utc(datetime.now(tz=UTC)),
        "supervisors": len(supervisors),
        "records": len(records),
        "drift_count": len(drifts),
        "drifts": [drift.to_dict() for drift in drifts],
        "applied": applied,
        "vacancy": summary.to_dict(orient="records"),
        "artifact_paths": {"report": str(report_path.resolve())},
    }
    write_json_atomic(report_payload, report_path)
    return report_payload


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    store = create_store(store_file=args.store_file, config_path=args.config)
    try:
        report = run_reconcile(store=store, table=args.table, apply=args.apply, report_dir=args.report_dir)
        if isinstance(store, InMemoryStore) and args.store_file and args.apply:
            store.dump_json(args.store_file)
    finally:
        store.close()

    for drift in report["drifts"]:
        print(
            f"{drift['supervisor_name']}\t{drift['scholar_type']}\t"
            f"recorded={drift['recorded']}\tactual={drift['actual']}"
        )
    print(f"Drifted counters: {report['drift_count']}")
    print(f"Wrote reconcile report: {report['artifact_paths']['report']}")
    return 0 if report["status"] != "failed" else 1


if __name__ == "__main__":
    raise SystemExit(main())
