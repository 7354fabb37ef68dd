from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from src.normalize.schema import CANONICAL_FACULTIES

_NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9]+")
_NOISE_TOKENS = ("faculty", "of")

FACULTY_ENGINEERING = CANONICAL_FACULTIES[0]
FACULTY_SCIENCE = CANONICAL_FACULTIES[1]
FACULTY_MEDICAL = CANONICAL_FACULTIES[2]
FACULTY_MANAGEMENT = CANONICAL_FACULTIES[3]
FACULTY_LAW = "Faculty of Law"

_PROGRAM_CODES = (
    ((" - hs", "(hs)"), FACULTY_MEDICAL),
    ((" - mgt", "(mgt)"), FACULTY_MANAGEMENT),
    (("s and h", "s & h"), FACULTY_SCIENCE),
    (("e and t", "e & t"), FACULTY_ENGINEERING),
)
# Order matters: medical programs often mention "technology".
_PROGRAM_KEYWORDS = (
    (("chemistry", "physics", "mathematics", "english"), FACULTY_SCIENCE),
    (
        (
            "medical", "health", "medicine", "nursing", "pharmacy", "physiotherapy",
            "therapy", "anaesthesia", "renal", "clinical", "surgery", "dental", "psychology",
        ),
        FACULTY_MEDICAL,
    ),
    (("management", "business", "commerce", "mba"), FACULTY_MANAGEMENT),
    (("engineering", "technology"), FACULTY_ENGINEERING),
    (("science", "humanities", "arts"), FACULTY_SCIENCE),
    (("law", "legal"), FACULTY_LAW),
)
_INSTITUTION_KEYWORDS = (
    (("medical", "health"), FACULTY_MEDICAL),
    (("management", "business"), FACULTY_MANAGEMENT),
    (("science", "humanities"), FACULTY_SCIENCE),
    (("engineering", "technology"), FACULTY_ENGINEERING),
)


def normalize_faculty_name(value: Any) -> str:
    """Reduce a faculty name to a bare alphanumeric key.

    "Faculty of Medical & Health Sciences" and "medical and health science" both
    become "medicalandhealthscience".
    """

    if value is None:
        return ""
    text = str(value).lower().replace("&", "and")
    text = _NON_ALNUM_PATTERN.sub("", text)
    # Removing a token can splice a new one together, so repeat until stable.
    while True:
        reduced = text.replace("sciences", "science")
        for token in _NOISE_TOKENS:
            reduced = reduced.replace(token, "")
        if reduced == text:
            return text
        text = reduced


def faculties_match(left: Any, right: Any) -> bool:
    left_key = normalize_faculty_name(left)
    right_key = normalize_faculty_name(right)
    if not left_key or not right_key:
        return False
    return left_key in right_key or right_key in left_key


def resolve_faculty(
    free_text: Any, faculties: Iterable[str] = CANONICAL_FACULTIES
) -> Optional[str]:
    key = normalize_faculty_name(free_text)
    if not key:
        return None

    candidates = [(name, normalize_faculty_name(name)) for name in faculties]
    for name, candidate_key in candidates:
        if candidate_key == key:
            return name
    for name, candidate_key in candidates:
        if candidate_key and (candidate_key in key or key in candidate_key):
            return name
    return None


def _first_keyword_match(text: str, table: tuple) -> str | None:
    for keywords, faculty in table:
        if any(keyword in text for keyword in keywords):
            return faculty
    return None


def infer_faculty(program: Any, institution: Any = None) -> str:
    """Guess the owning faculty of an uploaded application from its program text."""

    program_text = str(program or "").lower()
    if program_text:
        faculty = _first_keyword_match(program_text, _PROGRAM_CODES)
        if faculty:
            return faculty
        faculty = _first_keyword_match(program_text, _PROGRAM_KEYWORDS)
        if faculty:
            return faculty

    institution_text = str(institution or "").lower()
    if institution_text:
        faculty = _first_keyword_match(institution_text, _INSTITUTION_KEYWORDS)
        if faculty:
            return faculty
    return ""
