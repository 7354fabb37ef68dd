from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from src.eligibility.rules import check_eligibility
from src.matching.department import display_department, extract_department_from_program
from src.matching.faculty import infer_faculty
from src.normalize.labels import canonical_type
from src.normalize.schema import Department, scholar_mobile, scholar_name

logger = logging.getLogger(__name__)

EXCEL_EPOCH = date(1899, 12, 30)
MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_EDGE_QUOTES_PATTERN = re.compile(r"^['\"]|['\"]$")
_MONTH_YEAR_PATTERN = re.compile(r"^[A-Za-z]{3}-\d{2}$")
_DATE_SPLIT_PATTERN = re.compile(r"[-/]")

DEFAULT_STATUS = "uploaded"
DEFAULT_OWNER = "director"

PROGRAM_HEADERS = ("Select Program", "Program", "Course Name", "Programme")
INSTITUTION_HEADERS = ("Select Institution", "Institution", "Institute", "University", "Select Institute")
TYPE_HEADERS = ("Type", "Study Type", "Program Type")
FACULTY_HEADERS = ("Faculty", "Faculty Name")
DEPARTMENT_HEADERS = ("Department", "Dept")

# Record column -> accepted spreadsheet headers, first non-empty wins.
HEADER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "application_no": ("Application No", "ApplicationNo", "App No", "Application Number"),
    "form_name": ("Form Name", "FormName", "Form"),
    "registered_name": (
        "Registered Name", "Name", "Scholar Name", "Applicant Name", "Full Name", "Student Name",
    ),
    "email": ("Email ID", "Email", "E-mail", "Email Address"),
    "gender": ("Gender", "Sex"),
    "nationality": ("Nationality", "Country"),
    "aadhaar_no": ("Aadhaar Card No.", "Aadhaar No", "Aadhaar", "Aadhar Number"),
    "area_of_interest": ("Area Of Interest", "Research Area", "Interest Area", "Specialization Area"),
    "employee_id": ("1 - Employee Id", "Employee ID", "EmployeeID", "Emp ID", "Employee Id"),
    "designation": ("1 - Designation", "Designation", "Position", "Job Title"),
    "organization_name": (
        "1 - Organization Name", "Organization Name", "Organization", "Company Name", "Employer",
    ),
    "ug_qualification": (
        "UG - Current Education Qualification", "UG Qualification", "UG Education",
        "Undergraduate Qualification",
    ),
    "ug_institute": ("UG - Institute Name", "UG Institute", "UG College", "UG University"),
    "ug_degree": ("UG - Degree", "UG Degree", "Undergraduate Degree"),
    "ug_specialization": ("UG - Specialization", "UG Specialization", "UG Branch", "UG Major"),
    "ug_marking_scheme": ("UG - Marking Scheme", "UG Marking Scheme", "UG Grade System"),
    "ug_cgpa": ("UG - CGPA Or Percentage", "UG CGPA", "UG Marks", "UG Percentage", "UG Grade"),
    "ug_registration_no": ("UG - Registration No.", "UG Registration No", "UG Reg No", "UG Roll No"),
    "ug_mode_of_study": ("UG - Mode Of Study", "UG Mode of Study", "UG Study Mode"),
    "ug_place_of_institution": ("UG - Place Of The Institution", "UG Place", "UG Location", "UG City"),
    "pg_qualification": (
        "PG - Current Education Qualification", "PG Qualification", "PG Education",
        "Postgraduate Qualification",
    ),
    "pg_institute": ("PG - Institute Name", "PG Institute", "PG College", "PG University"),
    "pg_degree": ("PG - Degree", "PG Degree", "Postgraduate Degree"),
    "pg_specialization": ("PG - Specialization", "PG Specialization", "PG Branch", "PG Major"),
    "pg_marking_scheme": ("PG - Marking Scheme", "PG Marking Scheme", "PG Grade System"),
    "pg_cgpa": (
        "PG - CGPA / Percentage", "PG - CGPA Or Percentage", "PG CGPA", "PG Marks", "PG Percentage",
        "PG Grade", "PG - CGPA", "PG - Percentage", "PG Score",
    ),
    "pg_registration_no": ("PG - Registration No.", "PG Registration No", "PG Reg No", "PG Roll No"),
    "pg_mode_of_study": ("PG - Mode Of Study", "PG Mode of Study", "PG Study Mode"),
    "pg_place_of_institution": ("PG - Place Of The Institution", "PG Place", "PG Location", "PG City"),
    "exam1_name": ("1. - Name Of The Exam", "Exam 1 Name", "Exam1 Name", "Exam 1"),
    "exam1_score": ("1. - Score Obtained", "1. - Score", "Exam 1 Score", "Exam1 Score", "Score Obtained"),
    "exam1_year": ("1. - Year Appeared", "1. - Year", "Exam 1 Year", "Exam1 Year", "Year Appeared"),
    "certificates": (
        "Certificates Drive Link", "Certificates", "Certificate Link", "Docs", "Certificate",
        "Certificates Link",
    ),
    "user_id": ("User Id", "User ID", "UserID"),
}
MOBILE_HEADERS = ("Mobile Number", "Mobile", "Phone", "Contact Number", "Phone Number")
BIRTH_DATE_HEADERS = ("Date Of Birth", "DOB", "Birth Date", "Date of Birth")
MONTH_YEAR_HEADERS = {
    "ug_month_year": ("UG - Month & Year", "UG Month Year", "UG Completion Date", "UG Year"),
    "pg_month_year": ("PG - Month & Year", "PG Month Year", "PG Completion Date", "PG Year"),
}
FIELD_DEFAULTS = {
    "form_name": "PhD Application Form",
    "gender": "Male",
    "nationality": "Indian",
    "designation": "Research Scholar",
    "ug_marking_scheme": "CGPA",
    "ug_mode_of_study": "Full Time",
    "pg_marking_scheme": "CGPA",
    "pg_mode_of_study": "Full Time",
    "certificates": "Certificates",
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    return bool(pd.api.types.is_scalar(value) and pd.isna(value))


def column_value(row: Mapping[str, Any], *headers: str) -> Any:
    for header in headers:
        value = row.get(header)
        if not _is_blank(value):
            return value
    return None


def clean_phone_number(value: Any) -> str | None:
    if _is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return _EDGE_QUOTES_PATTERN.sub("", str(value)).strip()


def _serial_to_date(serial: float) -> date:
    return EXCEL_EPOCH + timedelta(days=int(serial))


def _date_parts(text: str) -> tuple[str, str, str] | None:
    parts = _DATE_SPLIT_PATTERN.split(text)
    if len(parts) != 3:
        return None
    return parts[0], parts[1], parts[2]


def convert_excel_date(value: Any) -> str | None:
    """Birth dates as DD-MM-YYYY from serials, datetimes or YYYY-MM-DD strings."""

    if _is_blank(value):
        return None
    if isinstance(value, (datetime, date)):
        return value.strftime("%d-%m-%Y")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _serial_to_date(value).strftime("%d-%m-%Y")

    text = str(value).strip()
    parts = _date_parts(text)
    if parts is None:
        return text
    first, second, third = parts
    if len(first) <= 2 and len(second) <= 2 and len(third) == 4:
        return text.replace("/", "-")
    if len(first) == 4:
        return f"{third}-{second}-{first}"
    return text


def _month_year(month: int, year: int) -> str:
    return f"{MONTH_NAMES[month - 1]}-{year % 100:02d}"


def convert_to_month_year(value: Any) -> str | None:
    """Completion dates as 'Mon-YY' (e.g. 'Jan-09')."""

    if _is_blank(value):
        return None
    if isinstance(value, (datetime, date)):
        return _month_year(value.month, value.year)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        converted = _serial_to_date(value)
        return _month_year(converted.month, converted.year)

    text = str(value).strip()
    if _MONTH_YEAR_PATTERN.match(text):
        return text
    parts = _date_parts(text)
    if parts is None:
        return text
    first, second, third = parts
    try:
        if len(first) <= 2 and len(second) <= 2 and len(third) == 4:
            month, year = int(second), int(third)
        elif len(first) == 4:
            month, year = int(second), int(first)
        else:
            return text
    except ValueError:
        return text
    if 1 <= month <= 12:
        return _month_year(month, year)
    return text


def read_spreadsheet_rows(path: Path) -> list[dict[str, Any]]:
    """Rows of the first sheet keyed by header; `.csv` files are read as text."""

    path = Path(path)
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, dtype=object, keep_default_na=False)
    else:
        df = pd.read_excel(path, engine="openpyxl", dtype=object)
    df.columns = [str(column).strip() for column in df.columns]
    df = df.astype(object).where(pd.notna(df), None)
    rows = df.to_dict(orient="records")
    logger.info("Read %d rows from %s", len(rows), path)
    return rows


def _scholar_type(row: Mapping[str, Any], program: Any) -> str:
    direct = column_value(row, *TYPE_HEADERS)
    if direct is not None:
        return canonical_type(direct)
    return canonical_type(program)


def row_to_scholar_record(row: Mapping[str, Any]) -> dict[str, Any]:
    program = column_value(row, *PROGRAM_HEADERS)
    institution = column_value(row, *INSTITUTION_HEADERS)

    record: dict[str, Any] = {
        column: column_value(row, *headers) for column, headers in HEADER_SYNONYMS.items()
    }
    for column, default in FIELD_DEFAULTS.items():
        if record.get(column) is None:
            record[column] = default

    record["program"] = program
    record["institution"] = institution
    record["mobile_number"] = clean_phone_number(column_value(row, *MOBILE_HEADERS))
    record["date_of_birth"] = convert_excel_date(column_value(row, *BIRTH_DATE_HEADERS))
    for column, headers in MONTH_YEAR_HEADERS.items():
        record[column] = convert_to_month_year(column_value(row, *headers))

    scholar_type = _scholar_type(row, program)
    record["type"] = scholar_type
    record["program_type"] = scholar_type
    record["faculty"] = column_value(row, *FACULTY_HEADERS) or infer_faculty(program, institution)
    record["department"] = extract_department_from_program(program) or column_value(
        row, *DEPARTMENT_HEADERS
    )
    record["status"] = column_value(row, "Status") or DEFAULT_STATUS
    record["current_owner"] = column_value(row, "Current Owner", "Owner") or DEFAULT_OWNER
    return record


def rows_to_scholar_records(rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [row_to_scholar_record(row) for row in rows]


def _display(value: Any, default: str = "-") -> Any:
    return default if _is_blank(value) else value


def build_export_rows(
    records: Sequence[Mapping[str, Any]],
    departments: Iterable[Department] = (),
) -> list[dict[str, Any]]:
    department_list = list(departments)
    export: list[dict[str, Any]] = []
    for index, record in enumerate(records, start=1):
        export.append(
            {
                "S.No": index,
                "Application No": _display(record.get("application_no")),
                "Eligibility Status": check_eligibility(record, records),
                "Current Status": _display(record.get("status")),
                "Registered Name": _display(scholar_name(record)),
                "Date of Birth": _display(record.get("date_of_birth")),
                "Gender": _display(record.get("gender")),
                "Mobile Number": _display(scholar_mobile(record)),
                "Email": _display(record.get("email")),
                "Institution": _display(record.get("institution")),
                "Faculty": _display(record.get("faculty")),
                "Department": display_department(record, department_list),
                "Program": _display(record.get("program")),
                "Program Type": _display(record.get("type") or record.get("program_type")),
                "Supervisor": _display(record.get("supervisor_name")),
                "Supervisor Status": _display(record.get("supervisor_status")),
                "Total Marks": _display(record.get("total_marks")),
            }
        )
    return export


def export_rows(rows: Sequence[Mapping[str, Any]], path: Path, *, sheet_name: str = "Scholars") -> Path:
    """Write flat rows with a single header row; `.csv` paths are written as CSV."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(list(rows))
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    else:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=sheet_name)
    logger.info("Exported %d rows to %s", len(df), path)
    return path
