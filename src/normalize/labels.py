from __future__ import annotations

import re
from typing import Any, Mapping

FULL_TIME = "Full Time"
PART_TIME = "Part Time"
PART_TIME_INTERNAL = "Part Time Internal"
PART_TIME_EXTERNAL = "Part Time External"
PART_TIME_EXTERNAL_INDUSTRY = "Part Time External (Industry)"
DEFAULT_SCHOLAR_TYPE = FULL_TIME

STATUS_PENDING = "Pending"
STATUS_FORWARDED = "Forwarded"
STATUS_VERIFIED = "Verified"
STATUS_DUPLICATE = "Duplicate"
STATUS_REJECTED = "Rejected"

_KNOWN_STATUSES = {
    label.lower(): label
    for label in (STATUS_PENDING, STATUS_FORWARDED, STATUS_VERIFIED, STATUS_DUPLICATE, STATUS_REJECTED)
}

_WS_PATTERN = re.compile(r"\s+")


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return _WS_PATTERN.sub(" ", str(value)).strip().lower()


def canonical_status(raw: Any) -> str:
    """Collapse a free-text status tag to its display label.

    Anything unrecognised is reported as Rejected; see `parse_stage` for the
    typed variant that keeps unknown values apart.
    """

    status = _clean(raw)
    if not status:
        return STATUS_PENDING
    if "forwarded" in status:
        return STATUS_FORWARDED
    return _KNOWN_STATUSES.get(status, STATUS_REJECTED)


def _is_industry(text: str) -> bool:
    return (
        "pte(industry)" in text
        or "pte (industry)" in text
        or "part time external (industry)" in text
    )


def _has_code(text: str, code: str) -> bool:
    return text == code or f"- {code} " in text or f"- {code}-" in text


def _type_from_type_field(text: str) -> str | None:
    if _has_code(text, "ft") or "full time" in text:
        return FULL_TIME
    if _is_industry(text):
        return PART_TIME_EXTERNAL_INDUSTRY
    if _has_code(text, "pte") or "part time external" in text:
        return PART_TIME_EXTERNAL
    if _has_code(text, "pti") or "part time internal" in text:
        return PART_TIME_INTERNAL
    if _has_code(text, "pt") or "part time" in text:
        return PART_TIME
    return None


def _type_from_program(text: str) -> str | None:
    if "- ft " in text or "- ft-" in text or "(ft)" in text:
        return FULL_TIME
    if _is_industry(text):
        return PART_TIME_EXTERNAL_INDUSTRY
    if "- pte " in text or "- pte-" in text or "- pte(" in text:
        return PART_TIME_EXTERNAL
    if "- pti " in text or "- pti-" in text or "- pti(" in text:
        return PART_TIME_INTERNAL
    if "- pt " in text or "- pt-" in text:
        return PART_TIME
    return None


def recognised_type(raw: Any) -> str | None:
    text = _clean(raw)
    if not text:
        return None
    return _type_from_type_field(text) or _type_from_program(text)


def canonical_type(raw: Any) -> str:
    """Map an abbreviated or long-form scholar type to its display label."""

    return recognised_type(raw) or DEFAULT_SCHOLAR_TYPE


def resolve_scholar_type(record: Mapping[str, Any]) -> str:
    """Scholar type from `type`, then `program_type`, then the program string."""

    for key in ("type", "program_type", "programType"):
        text = _clean(record.get(key))
        if not text:
            continue
        resolved = _type_from_type_field(text)
        if resolved:
            return resolved

    program = _clean(record.get("program"))
    if program:
        resolved = _type_from_program(program)
        if resolved:
            return resolved

    return DEFAULT_SCHOLAR_TYPE
