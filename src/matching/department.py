from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional

from src.matching.faculty import faculties_match
from src.normalize.schema import NOT_AVAILABLE, Department, Faculty

_PHD_PREFIX_PATTERN = re.compile(r"^ph\.?d\.?\s*-\s*", re.IGNORECASE)
_NON_UPPER_PATTERN = re.compile(r"[^A-Z]")

DEPARTMENT_SHORT_CODES = {
    "Computer Science Engineering": "CSE",
    "Computer Science and Engineering": "CSE",
    "Electronics and Communication Engineering": "ECE",
    "Electrical and Electronics Engineering": "EEE",
    "Mechanical Engineering": "MECH",
    "Civil Engineering": "CIVIL",
    "Biotechnology": "BIO",
    "Chemistry": "CHEM",
    "Physics": "PHYSICS",
    "Mathematics": "MATH",
    "Management": "MBA",
    "Business Administration": "MBA",
    "Medicine": "MEDICINE",
    "Medical": "MEDICINE",
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def extract_department_from_program(program: Any) -> str:
    """'Ph.D. - Mechanical Engineering (ft - E and T)' -> 'Mechanical Engineering'."""

    text = _text(program)
    if not text:
        return ""
    text = text.split("(", 1)[0]
    text = _PHD_PREFIX_PATTERN.sub("", text.strip())
    return text.strip()


def resolve_department(
    free_text: Any,
    faculty_name: Any,
    departments: Iterable[Department],
) -> Optional[str]:
    candidate = _text(free_text).lower()
    if not candidate:
        return None

    in_faculty = [
        department
        for department in departments
        if department.name and faculties_match(department.faculty_name, faculty_name)
    ]
    for department in in_faculty:
        if department.name.strip().lower() == candidate:
            return department.name
    for department in in_faculty:
        name = department.name.strip().lower()
        if name in candidate or candidate in name:
            return department.name
    return None


def display_department(record: Mapping[str, Any], departments: Iterable[Department]) -> str:
    stored = _text(record.get("department"))
    if stored:
        return stored

    extracted = extract_department_from_program(record.get("program"))
    faculty = record.get("faculty") or record.get("institution")
    resolved = resolve_department(extracted, faculty, departments)
    return resolved or NOT_AVAILABLE


def department_matches(record: Mapping[str, Any], target: Any) -> bool:
    wanted = _text(target).lower()
    if not wanted:
        return False
    department = _text(record.get("department")).lower()
    program = _text(record.get("program")).lower()
    if wanted in department or wanted in program:
        return True
    return bool(department) and department in wanted


def group_departments_by_faculty(rows: Iterable[Mapping[str, Any]]) -> list[Faculty]:
    faculties: dict[str, Faculty] = {}
    for row in rows:
        faculty_name = _text(row.get("faculty"))
        if not faculty_name:
            continue
        faculty = faculties.setdefault(faculty_name, Faculty(name=faculty_name))
        faculty.departments.append(
            Department(
                id=str(row.get("id")),
                name=_text(row.get("department_name")),
                faculty_name=faculty_name,
            )
        )
    return list(faculties.values())


def department_short_code(department_name: Any) -> str:
    name = _text(department_name)
    if name in DEPARTMENT_SHORT_CODES:
        return DEPARTMENT_SHORT_CODES[name]

    lowered = name.lower()
    if lowered:
        for full_name, short_code in DEPARTMENT_SHORT_CODES.items():
            full_lowered = full_name.lower()
            if full_lowered in lowered or lowered in full_lowered:
                return short_code

    fallback = _NON_UPPER_PATTERN.sub("", name.upper())[:4]
    return fallback or "UNKNOWN"
