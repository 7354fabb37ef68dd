from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pandas as pd

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.eligibility.duplicates import find_duplicate_groups
from src.eligibility.rules import apply_eligibility_filter
from src.io.reports import format_utc, report_path_for, write_json_atomic
from src.io.spreadsheet import (
    build_export_rows,
    export_rows,
    read_spreadsheet_rows,
    rows_to_scholar_records,
)
from src.matching.department import group_departments_by_faculty
from src.normalize.schema import DEPARTMENTS_TABLE, SCHOLAR_APPLICATIONS_TABLE
from src.store.base import BaseStore
from src.store.memory import InMemoryStore
from src.store.registry import create_store

logger = logging.getLogger("import_scholars")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import scholar applications from a spreadsheet.")
    parser.add_argument("--input", type=Path, required=True, help="Spreadsheet to import (.xlsx or .csv).")
    parser.add_argument(
        "--store-file",
        type=Path,
        default=None,
        help="JSON table snapshot to use instead of the remote store; updated in place.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Store settings JSON file.")
    parser.add_argument("--table", type=str, default=SCHOLAR_APPLICATIONS_TABLE)
    parser.add_argument("--export", type=Path, default=None, help="Write the reviewed rows here.")
    parser.add_argument("--report-dir", type=Path, default=ROOT_DIR / "reports" / "imports")
    parser.add_argument("--dry-run", action="store_true", help="Validate only; do not insert.")
    return parser.parse_args()


def _exception_summary(exc: Exception) -> dict[str, str]:
    return {"type": type(exc).__name__, "message": str(exc)}


def _ineligible_summary(ineligible_df: pd.DataFrame) -> list[dict[str, Any]]:
    summary: list[dict[str, Any]] = []
    for _, row in ineligible_df.iterrows():
        summary.append(
            {
                "application_no": row.get("application_no"),
                "registered_name": row.get("registered_name"),
                "reasons": list(row["reasons"]),
            }
        )
    return summary


def run_import(
    *,
    input_path: Path,
    store: BaseStore,
    table: str = SCHOLAR_APPLICATIONS_TABLE,
    dry_run: bool = False,
    export_path: Path | None = None,
    report_dir: Path | None = None,
) -> dict[str, Any]:
    started_at = datetime.now(tz=UTC)
    resolved_report_dir = report_dir or (ROOT_DIR / "reports" / "imports")
    report_path = report_path_for(resolved_report_dir, "import", started_at)

    records: list[dict[str, Any]] = []
    inserted: list[dict[str, Any]] = []
    ineligible: list[dict[str, Any]] = []
    duplicate_groups: list[dict[str, Any]] = []
    run_exception: dict[str, str] | None = None
    exported: str | None = None

    try:
        records = rows_to_scholar_records(read_spreadsheet_rows(input_path))
        _, ineligible_df = apply_eligibility_filter(pd.DataFrame(records))
        ineligible = _ineligible_summary(ineligible_df)
        duplicate_groups = [
            {
                "type": group.type,
                "value": group.value,
                "count": group.count,
                "application_nos": [scholar.get("application_no") for scholar in group.scholars],
            }
            for group in find_duplicate_groups(records)
        ]
        for group in duplicate_groups:
            logger.warning("Duplicate %s group: %s (%d rows)", group["type"], group["value"], group["count"])

        if records and not dry_run:
            inserted = store.insert(table, records)
            logger.info("Inserted %d records into %s", len(inserted), table)

        if export_path is not None:
            departments = [
                department
                for faculty in group_departments_by_faculty(store.select(DEPARTMENTS_TABLE))
                for department in faculty.departments
            ]
            exported = str(export_rows(build_export_rows(records, departments), export_path).resolve())
    except Exception as exc:
        run_exception = _exception_summary(exc)
        logger.exception("Import failed after reading %d records.", len(records))
    finally:
        finished_at = datetime.now(tz=UTC)
        if run_exception is not None:
            status = "partial" if inserted else "failed"
        else:
            status = "success"
        report_payload = {
            "status": status,
            "run_started_at": format_utc(started_at),
            "run_finished_at": format_utc(finished_at),
            "input": str(input_path),
            "table": table,
            "dry_run": dry_run,
            "records": {
                "read": len(records),
                "inserted": len(inserted),
                "ineligible": len(ineligible),
                "duplicate_groups": len(duplicate_groups),
            },
            "ineligible": ineligible,
            "duplicate_groups": duplicate_groups,
            "artifact_paths": {"report": str(report_path.resolve()), "export": exported},
            "exception_summary": run_exception,
        }
        write_json_atomic(report_payload, report_path)
    return report_payload


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    store = create_store(store_file=args.store_file, config_path=args.config)
    try:
        report = run_import(
            input_path=args.input,
            store=store,
            table=args.table,
            dry_run=args.dry_run,
            export_path=args.export,
            report_dir=args.report_dir,
        )
        if isinstance(store, InMemoryStore) and args.store_file and not args.dry_run:
            store.dump_json(args.store_file)
    finally:
        store.close()

    print(f"Run status: {report['status']}")
    print(
        "Records: "
        f"read={report['records']['read']}, "
        f"inserted={report['records']['inserted']}, "
        f"ineligible={report['records']['ineligible']}, "
        f"duplicate_groups={report['records']['duplicate_groups']}"
    )
    print(f"Wrote import report: {report['artifact_paths']['report']}")
    return 0 if report["status"] != "failed" else 1


if __name__ == "__main__":
    raise SystemExit(main())
