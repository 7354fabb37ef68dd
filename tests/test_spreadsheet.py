from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd

from src.io.spreadsheet import (
    build_export_rows,
    clean_phone_number,
    column_value,
    convert_excel_date,
    convert_to_month_year,
    export_rows,
    read_spreadsheet_rows,
    row_to_scholar_record,
)
from src.normalize.schema import Department

MECH_PROGRAM = "Ph.d. - Mechanical Engineering (ph.d. - Ft - E And T)"


def test_convert_excel_date_handles_serials_strings_and_datetimes() -> None:
    assert convert_excel_date(36526) == "01-01-2000"
    assert convert_excel_date(36526.0) == "01-01-2000"
    assert convert_excel_date("1998-07-15") == "15-07-1998"
    assert convert_excel_date("15/07/1998") == "15-07-1998"
    assert convert_excel_date(datetime(1998, 7, 15)) == "15-07-1998"
    assert convert_excel_date("unknown") == "unknown"
    assert convert_excel_date("") is None
    assert convert_excel_date(None) is None


def test_convert_to_month_year() -> None:
    assert convert_to_month_year(39814) == "Jan-09"
    assert convert_to_month_year("Jan-09") == "Jan-09"
    assert convert_to_month_year("2015-05-01") == "May-15"
    assert convert_to_month_year("01/04/2012") == "Apr-12"
    assert convert_to_month_year("01/13/2012") == "01/13/2012"
    assert convert_to_month_year(float("nan")) is None


def test_clean_phone_number_strips_quotes_and_float_suffix() -> None:
    assert clean_phone_number(9876543210.0) == "9876543210"
    assert clean_phone_number("'9876543210'") == "9876543210"
    assert clean_phone_number(" 98765 43210 ") == "98765 43210"
    assert clean_phone_number(None) is None


def test_column_value_takes_first_non_blank_header() -> None:
    row = {"Name": "", "Scholar Name": "Asha R", "Applicant Name": "Ignored"}

    assert column_value(row, "Registered Name", "Name", "Scholar Name", "Applicant Name") == "Asha R"
    assert column_value(row, "Missing") is None


def test_row_to_scholar_record_maps_headers_and_derives_fields() -> None:
    record = row_to_scholar_record(
        {
            "Application No": "APP-101",
            "Scholar Name": "Asha R",
            "Email ID": "asha@example.edu",
            "Mobile Number": 9876543210.0,
            "Date Of Birth": 36526,
            "Select Program": MECH_PROGRAM,
            "Select Institution": "Main Campus",
            "UG - Month & Year": 39814,
            "PG - CGPA / Percentage": 8.1,
        }
    )

    assert record["application_no"] == "APP-101"
    assert record["registered_name"] == "Asha R"
    assert record["mobile_number"] == "9876543210"
    assert record["date_of_birth"] == "01-01-2000"
    assert record["ug_month_year"] == "Jan-09"
    assert record["pg_cgpa"] == 8.1
    assert record["type"] == "Full Time"
    assert record["program_type"] == "Full Time"
    assert record["faculty"] == "Faculty of Engineering & Technology"
    assert record["department"] == "Mechanical Engineering"
    assert record["status"] == "uploaded"
    assert record["current_owner"] == "director"
    assert record["gender"] == "Male"


def test_row_to_scholar_record_prefers_explicit_columns() -> None:
    record = row_to_scholar_record(
        {
            "Name": "Bala K",
            "Type": "PTE",
            "Faculty": "Faculty of Management",
            "Department": "Finance",
            "Status": "Pending",
        }
    )

    assert record["type"] == "Part Time External"
    assert record["faculty"] == "Faculty of Management"
    assert record["department"] == "Finance"
    assert record["status"] == "Pending"


def test_read_and_export_csv(tmp_path: Path) -> None:
    source = tmp_path / "upload.csv"
    pd.DataFrame(
        [
            {"Application No": "APP-1", " Name ": "Asha R", "Mobile Number": "9876543210"},
            {"Application No": "APP-2", " Name ": "Bala K", "Mobile Number": ""},
        ]
    ).to_csv(source, index=False)

    rows = read_spreadsheet_rows(source)

    assert rows[0]["Name"] == "Asha R"
    assert rows[0]["Mobile Number"] == "9876543210"
    assert rows[1]["Mobile Number"] == ""

    records = [row_to_scholar_record(row) for row in rows]
    exported = export_rows(build_export_rows(records), tmp_path / "out" / "scholars.csv")
    frame = pd.read_csv(exported, dtype=object)

    assert frame.columns[:3].tolist() == ["S.No", "Application No", "Eligibility Status"]
    assert frame["Registered Name"].tolist() == ["Asha R", "Bala K"]
    assert frame["Mobile Number"].tolist() == ["9876543210", "-"]


def test_build_export_rows_marks_eligibility_and_department() -> None:
    records = [
        {
            "application_no": "APP-1",
            "registered_name": "Asha R",
            "program": MECH_PROGRAM,
            "institution": "Faculty of Engineering & Technology",
        },
    ]
    departments = [
        Department(id="d1", name="Mechanical Engineering", faculty_name="Faculty of Engineering & Technology")
    ]

    row = build_export_rows(records, departments)[0]

    assert row["S.No"] == 1
    assert row["Eligibility Status"] == "Not Eligible"
    assert row["Department"] == "Mechanical Engineering"
    assert row["Supervisor"] == "-"


def test_export_xlsx_has_single_header_row(tmp_path: Path) -> None:
    path = export_rows([{"S.No": 1, "Registered Name": "Asha R"}], tmp_path / "scholars.xlsx")

    frame = pd.read_excel(path, engine="openpyxl")

    assert frame.columns.tolist() == ["S.No", "Registered Name"]
    assert frame.iloc[0]["Registered Name"] == "Asha R"
