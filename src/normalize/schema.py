from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

DEPARTMENTS_TABLE = "departments"
EXAMINATION_RECORDS_TABLE = "examination_records"
SCHOLAR_APPLICATIONS_TABLE = "scholar_applications"
SUPERVISORS_TABLE = "supervisors"
DEPARTMENT_USERS_TABLE = "department_users"

CANONICAL_FACULTIES = (
    "Faculty of Engineering & Technology",
    "Faculty of Science & Humanities",
    "Faculty of Medical & Health Science",
    "Faculty of Management",
)

ADMITTED = "Admitted"
NOT_AVAILABLE = "N/A"


def coerce_count(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _string_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def scholar_name(record: Mapping[str, Any]) -> str:
    """Display name of a scholar row, whichever column the source filled."""

    for key in ("registered_name", "name", "applicant_name"):
        value = _string_or_none(record.get(key))
        if value:
            return value
    return ""


def scholar_mobile(record: Mapping[str, Any]) -> Any:
    value = record.get("mobile")
    if value is None or value == "":
        return record.get("mobile_number")
    return value


@dataclass(slots=True)
class Department:
    id: str
    name: str
    faculty_name: str


@dataclass(slots=True)
class Faculty:
    name: str
    departments: list[Department] = field(default_factory=list)


@dataclass(slots=True)
class DepartmentUser:
    id: Optional[str]
    name: str
    email: str
    faculty: Optional[str]
    department: Optional[str]
    department_code: str
    phone: Optional[str] = None
    role: str = "department"


@dataclass(slots=True)
class SupervisorRecord:
    """Supervisor row with per-type capacity counters.

    Vacancy is never stored; it is derived from the max/current pair at read time.
    """

    id: str
    name: str
    email: Optional[str] = None
    faculty_id: Optional[str] = None
    faculty_name: Optional[str] = None
    department_id: Optional[str] = None
    department_name: Optional[str] = None
    specialization: Optional[str] = None
    max_full_time_scholars: int = 0
    max_part_time_internal_scholars: int = 0
    max_part_time_external_scholars: int = 0
    max_part_time_industry_scholars: int = 0
    current_full_time_scholars: int = 0
    current_part_time_internal_scholars: int = 0
    current_part_time_external_scholars: int = 0
    current_part_time_industry_scholars: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> SupervisorRecord:
        return cls(
            id=str(row.get("id")),
            name=str(row.get("name") or ""),
            email=_string_or_none(row.get("email")),
            faculty_id=_string_or_none(row.get("faculty_id")),
            faculty_name=_string_or_none(row.get("faculty_name")),
            department_id=_string_or_none(row.get("department_id")),
            department_name=_string_or_none(row.get("department_name")),
            specialization=_string_or_none(row.get("specialization")),
            max_full_time_scholars=coerce_count(row.get("max_full_time_scholars")),
            max_part_time_internal_scholars=coerce_count(row.get("max_part_time_internal_scholars")),
            max_part_time_external_scholars=coerce_count(row.get("max_part_time_external_scholars")),
            max_part_time_industry_scholars=coerce_count(row.get("max_part_time_industry_scholars")),
            current_full_time_scholars=coerce_count(row.get("current_full_time_scholars")),
            current_part_time_internal_scholars=coerce_count(
                row.get("current_part_time_internal_scholars")
            ),
            current_part_time_external_scholars=coerce_count(
                row.get("current_part_time_external_scholars")
            ),
            current_part_time_industry_scholars=coerce_count(
                row.get("current_part_time_industry_scholars")
            ),
        )

    def vacancy(self, scholar_type: Any) -> int:
        """Remaining slots for a `ScholarType` bucket, floored at zero."""

        maximum = getattr(self, scholar_type.max_column)
        current = getattr(self, scholar_type.current_column)
        return max(0, maximum - current)


@dataclass(slots=True)
class DuplicateGroup:
    type: str
    value: Any
    scholars: list[dict[str, Any]]

    @property
    def count(self) -> int:
        return len(self.scholars)
