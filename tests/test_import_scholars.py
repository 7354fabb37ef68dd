from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from scripts.import_scholars import run_import
from src.store.memory import InMemoryStore

MECH_PROGRAM = "Ph.d. - Mechanical Engineering (ph.d. - Ft - E And T)"


def _write_upload(path: Path) -> Path:
    pd.DataFrame(
        [
            {
                "Application No": "APP-1",
                "Registered Name": "Asha R",
                "Email ID": "asha@example.edu",
                "Mobile Number": "9876500001",
                "Select Program": MECH_PROGRAM,
            },
            {
                "Application No": "APP-2",
                "Registered Name": "Bala K",
                "Email ID": "bala@example.edu",
                "Mobile Number": "9876500001",
                "Select Program": MECH_PROGRAM,
            },
        ]
    ).to_csv(path, index=False)
    return path


def test_run_import_inserts_records_and_writes_report(tmp_path: Path) -> None:
    store = InMemoryStore(
        {
            "departments": [
                {
                    "id": 1,
                    "department_name": "Mechanical Engineering",
                    "faculty": "Faculty of Engineering & Technology",
                }
            ]
        }
    )

    report = run_import(
        input_path=_write_upload(tmp_path / "upload.csv"),
        store=store,
        export_path=tmp_path / "review.csv",
        report_dir=tmp_path / "reports",
    )

    assert report["status"] == "success"
    assert report["records"] == {"read": 2, "inserted": 2, "ineligible": 2, "duplicate_groups": 1}
    assert report["duplicate_groups"][0]["type"] == "Phone"
    assert report["duplicate_groups"][0]["application_nos"] == ["APP-1", "APP-2"]
    assert "MISSING_CERTIFICATES" not in report["ineligible"][0]["reasons"]
    assert "MISSING_UG_CGPA" in report["ineligible"][0]["reasons"]

    stored = store.select("scholar_applications")
    assert [row["application_no"] for row in stored] == ["APP-1", "APP-2"]
    assert stored[0]["faculty"] == "Faculty of Engineering & Technology"
    assert stored[0]["status"] == "uploaded"

    review = pd.read_csv(report["artifact_paths"]["export"], dtype=object)
    assert review["Department"].tolist() == ["Mechanical Engineering", "Mechanical Engineering"]

    report_path = Path(report["artifact_paths"]["report"])
    assert json.loads(report_path.read_text(encoding="utf-8"))["status"] == "success"


def test_run_import_dry_run_writes_nothing(tmp_path: Path) -> None:
    store = InMemoryStore()

    report = run_import(
        input_path=_write_upload(tmp_path / "upload.csv"),
        store=store,
        dry_run=True,
        report_dir=tmp_path / "reports",
    )

    assert report["records"]["inserted"] == 0
    assert report["dry_run"] is True
    assert store.select("scholar_applications") == []


def test_run_import_reports_unreadable_input(tmp_path: Path) -> None:
    report = run_import(
        input_path=tmp_path / "missing.csv",
        store=InMemoryStore(),
        report_dir=tmp_path / "reports",
    )

    assert report["status"] == "failed"
    assert report["exception_summary"]["type"] == "FileNotFoundError"
    assert Path(report["artifact_paths"]["report"]).exists()


def test_run_import_reports_every_duplicate_pair(tmp_path: Path) -> None:
    source = tmp_path / "upload.csv"
    pd.DataFrame(
        [
            {"Application No": "APP-1", "Registered Name": "Asha R", "Mobile Number": "111", "Email ID": "a@x.com"},
            {"Application No": "APP-2", "Registered Name": "Bala K", "Mobile Number": "111", "Email ID": "b@x.com"},
            {"Application No": "APP-3", "Registered Name": "Chitra S", "Mobile Number": "222", "Email ID": "c@x.com"},
            {"Application No": "APP-4", "Registered Name": "Deepa M", "Mobile Number": "222", "Email ID": "d@x.com"},
            {"Application No": "APP-5", "Registered Name": "Elan P", "Mobile Number": "333", "Email ID": "e@x.com"},
            {"Application No": "APP-6", "Registered Name": "Farah N", "Mobile Number": "444", "Email ID": "E@x.com"},
        ]
    ).to_csv(source, index=False)

    report = run_import(input_path=source, store=InMemoryStore(), dry_run=True, report_dir=tmp_path / "reports")

    assert report["records"]["duplicate_groups"] == 3
    assert [(group["type"], group["application_nos"]) for group in report["duplicate_groups"]] == [
        ("Phone", ["APP-1", "APP-2"]),
        ("Phone", ["APP-3", "APP-4"]),
        ("Email", ["APP-5", "APP-6"]),
    ]
