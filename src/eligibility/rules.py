from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

import pandas as pd

from src.normalize.schema import scholar_mobile, scholar_name

ELIGIBLE = "Eligible"
NOT_ELIGIBLE = "Not Eligible"
DUPLICATE_NAME = "DUPLICATE_NAME"

REQUIRED_FIELDS: dict[str, str] = {
    "Name": "name",
    "Email": "email",
    "Mobile": "mobile",
    "Certificates": "certificates",
    "Faculty": "faculty",
    "Program": "program",
    "UG Qualification": "ug_qualification",
    "UG Institute": "ug_institute",
    "UG Degree": "ug_degree",
    "UG Specialization": "ug_specialization",
    "UG Marking Scheme": "ug_marking_scheme",
    "UG CGPA": "ug_cgpa",
    "UG Month & Year": "ug_month_year",
    "UG Registration No": "ug_registration_no",
    "UG Mode of Study": "ug_mode_of_study",
    "UG Place of Institution": "ug_place_of_institution",
    "PG Qualification": "pg_qualification",
    "PG Institute": "pg_institute",
    "PG Degree": "pg_degree",
    "PG Specialization": "pg_specialization",
    "PG Marking Scheme": "pg_marking_scheme",
    "PG CGPA": "pg_cgpa",
    "PG Month & Year": "pg_month_year",
    "PG Registration No": "pg_registration_no",
    "PG Mode of Study": "pg_mode_of_study",
    "PG Place of Institution": "pg_place_of_institution",
}

_EDGE_QUOTES_PATTERN = re.compile(r"^['\"]|['\"]$")
_NON_WORD_PATTERN = re.compile(r"[^A-Z0-9]+")


def is_valid_field(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return not pd.isna(value)
    if isinstance(value, str):
        cleaned = _EDGE_QUOTES_PATTERN.sub("", value).strip()
        return cleaned != "" and cleaned.lower() != "n/a"
    return value != ""


def _field_value(record: Mapping[str, Any], key: str) -> Any:
    if key == "name":
        return scholar_name(record) or None
    if key == "mobile":
        return scholar_mobile(record)
    return record.get(key)


def missing_fields(record: Mapping[str, Any]) -> list[str]:
    return [
        label
        for label, key in REQUIRED_FIELDS.items()
        if not is_valid_field(_field_value(record, key))
    ]


def _name_key(record: Mapping[str, Any]) -> str:
    return scholar_name(record).strip().lower()


def has_name_duplicate(record: Mapping[str, Any], all_records: Iterable[Mapping[str, Any]]) -> bool:
    """True when the collection holds this name more than once (the record itself counts)."""

    name = _name_key(record)
    if not name:
        return False
    return sum(1 for other in all_records if _name_key(other) == name) > 1


def check_eligibility(record: Mapping[str, Any], all_records: Iterable[Mapping[str, Any]]) -> str:
    if missing_fields(record):
        return NOT_ELIGIBLE
    if has_name_duplicate(record, all_records):
        return NOT_ELIGIBLE
    return ELIGIBLE


def _reason_code(label: str) -> str:
    return "MISSING_" + _NON_WORD_PATTERN.sub("_", label.upper()).strip("_")


def _row_reasons(row: pd.Series, name_counts: Mapping[str, int]) -> list[str]:
    record = row.to_dict()
    reasons = [_reason_code(label) for label in missing_fields(record)]
    name = _name_key(record)
    if name and name_counts.get(name, 0) > 1:
        reasons.append(DUPLICATE_NAME)
    return reasons


def apply_eligibility_filter(df: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    with_reasons_df = df.copy()
    if with_reasons_df.empty:
        with_reasons_df["reasons"] = pd.Series(dtype=object)
        return with_reasons_df.copy(), with_reasons_df.copy()

    # NaN cells from a DataFrame count as missing.
    records = with_reasons_df.astype(object).where(pd.notna(with_reasons_df), None)
    name_counts = records.apply(lambda row: _name_key(row.to_dict()), axis=1).value_counts().to_dict()
    with_reasons_df["reasons"] = records.apply(
        lambda row: _row_reasons(row=row, name_counts=name_counts),
        axis=1,
    )

    is_ineligible = with_reasons_df["reasons"].map(bool)
    ineligible_df = with_reasons_df[is_ineligible].copy()
    eligible_df = with_reasons_df[~is_ineligible].copy()

    return eligible_df, ineligible_df
