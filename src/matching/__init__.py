"""Free-text faculty and department matching."""

from src.matching.department import (
    department_matches,
    department_short_code,
    display_department,
    extract_department_from_program,
    group_departments_by_faculty,
    resolve_department,
)
from src.matching.faculty import (
    faculties_match,
    infer_faculty,
    normalize_faculty_name,
    resolve_faculty,
)

__all__ = [
    "department_matches",
    "department_short_code",
    "display_department",
    "extract_department_from_program",
    "faculties_match",
    "group_departments_by_faculty",
    "infer_faculty",
    "normalize_faculty_name",
    "resolve_department",
    "resolve_faculty",
]
