from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from src.matching.faculty import normalize_faculty_name

# Faculty short names used in forward/publish tags, keyed by normalized faculty name.
_FACULTY_SHORT_NAMES = {
    normalize_faculty_name("Faculty of Engineering & Technology"): "Engineering",
    normalize_faculty_name("Faculty of Science & Humanities"): "Science",
    normalize_faculty_name("Faculty of Medical & Health Science"): "Medical",
    normalize_faculty_name("Faculty of Management"): "Management",
}


class StageKind(str, Enum):
    PENDING = "Pending"
    UPLOADED = "Uploaded"
    FORWARDED = "Forwarded"
    VERIFIED = "Verified"
    DUPLICATE = "Duplicate"
    REJECTED = "Rejected"
    ADMITTED = "Admitted"
    PUBLISHED = "Published"
    UNKNOWN = "Unknown"


@dataclass(frozen=True, slots=True)
class ScholarStage:
    kind: StageKind
    target: Optional[str] = None
    raw: Optional[str] = None

    @property
    def label(self) -> str:
        if self.target and self.kind in (StageKind.FORWARDED, StageKind.PUBLISHED):
            return f"{self.kind.value} to {self.target}"
        return self.kind.value


_LITERAL_STAGES = {
    "pending": StageKind.PENDING,
    "uploaded": StageKind.UPLOADED,
    "verified": StageKind.VERIFIED,
    "duplicate": StageKind.DUPLICATE,
    "rejected": StageKind.REJECTED,
    "admitted": StageKind.ADMITTED,
}


def _stage_target(tail: str) -> Optional[str]:
    tail = tail.strip()
    if tail.lower().startswith("to "):
        tail = tail[3:].strip()
    return tail or None


def parse_stage(raw: Any) -> ScholarStage:
    """Parse a free-text status tag into a closed stage with an optional target."""

    if raw is None or not str(raw).strip():
        return ScholarStage(kind=StageKind.PENDING)

    text = " ".join(str(raw).split())
    lowered = text.lower()
    if "forwarded" in lowered:
        start = lowered.index("forwarded") + len("forwarded")
        return ScholarStage(kind=StageKind.FORWARDED, target=_stage_target(text[start:]), raw=text)
    if lowered.startswith("published"):
        return ScholarStage(
            kind=StageKind.PUBLISHED,
            target=_stage_target(text[len("published"):]),
            raw=text,
        )
    kind = _LITERAL_STAGES.get(lowered, StageKind.UNKNOWN)
    return ScholarStage(kind=kind, raw=text)


def faculty_short_name(faculty: Any) -> Optional[str]:
    normalized = normalize_faculty_name(faculty)
    if not normalized:
        return None
    if normalized in _FACULTY_SHORT_NAMES:
        return _FACULTY_SHORT_NAMES[normalized]
    if "medical" in normalized:
        return "Medical"
    return None


def forward_status_for_faculty(faculty: Any) -> str:
    short_name = faculty_short_name(faculty)
    if short_name is None:
        return "Forwarded"
    return f"Forwarded to {short_name}"


def publish_status_for_faculty(faculty: Any) -> str:
    short_name = faculty_short_name(faculty)
    if short_name is None:
        raise ValueError(f"Unknown faculty: {faculty}")
    return f"Published to {short_name}"
