from __future__ import annotations

import re
from collections import Counter
from typing import Any, Iterable, Mapping

from src.normalize.schema import DuplicateGroup, scholar_mobile, scholar_name

PHONE_GROUP = "Phone"
EMAIL_GROUP = "Email"
NAME_GROUP = "Name"

_WS_PATTERN = re.compile(r"\s+")
_NON_DIGIT_PATTERN = re.compile(r"\D+")


def _phone_key(record: Mapping[str, Any]) -> str:
    value = scholar_mobile(record)
    if not isinstance(value, str):
        return ""
    return _WS_PATTERN.sub("", value.strip())


def _email_key(record: Mapping[str, Any]) -> str:
    value = record.get("email")
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def _group_by(records: Iterable[dict[str, Any]], key_fn) -> dict[str, list[dict[str, Any]]]:
    groups: dict[str, list[dict[str, Any]]] = {}
    for record in records:
        key = key_fn(record)
        if key:
            groups.setdefault(key, []).append(record)
    return groups


def find_duplicate_groups(records: Iterable[Mapping[str, Any]]) -> list[DuplicateGroup]:
    """Group likely duplicate scholars by phone, then email, then name.

    The name pass only looks inside sets that already share phone and email. A
    scholar appears in at most one group; later passes skip rows already placed.
    Rows are tracked by identity, so records without an `id` (fresh uploads)
    are grouped too.
    """

    rows = [dict(record) for record in records]
    phone_groups = _group_by(rows, _phone_key)
    email_groups = _group_by(rows, _email_key)
    combo_groups = _group_by(
        rows,
        lambda row: f"{_phone_key(row)}|{_email_key(row)}" if _phone_key(row) and _email_key(row) else "",
    )

    placed: set[int] = set()
    duplicates: list[DuplicateGroup] = []

    def _collect(group_type: str, members: list[dict[str, Any]], value: Any) -> None:
        if len(members) < 2:
            return
        fresh = [member for member in members if id(member) not in placed]
        if len(fresh) < 2:
            return
        duplicates.append(DuplicateGroup(type=group_type, value=value, scholars=fresh))
        placed.update(id(member) for member in fresh)

    for members in phone_groups.values():
        _collect(PHONE_GROUP, members, scholar_mobile(members[0]))
    for members in email_groups.values():
        _collect(EMAIL_GROUP, members, members[0].get("email"))
    for members in combo_groups.values():
        name_groups = _group_by(members, lambda row: scholar_name(row).lower())
        for named in name_groups.values():
            _collect(NAME_GROUP, named, scholar_name(named[0]))

    return duplicates


def _digits(value: Any) -> str:
    if value is None:
        return ""
    return _NON_DIGIT_PATTERN.sub("", str(value))


def has_blocking_duplicates(records: Iterable[Mapping[str, Any]]) -> bool:
    """True when any application number, email or phone number repeats."""

    rows = list(records)
    keys = (
        lambda row: str(row.get("application_no") or "").strip(),
        lambda row: str(row.get("email") or "").strip().lower(),
        lambda row: _digits(scholar_mobile(row)),
    )
    for key_fn in keys:
        counts = Counter(key for key in map(key_fn, rows) if key)
        if any(count > 1 for count in counts.values()):
            return True
    return False


def uploaded_duplicate_ids(groups: Iterable[DuplicateGroup]) -> list[Any]:
    ids: list[Any] = []
    for group in groups:
        for scholar in group.scholars:
            status = str(scholar.get("status") or "").strip().lower()
            if status == "uploaded" and scholar.get("id") is not None:
                ids.append(scholar["id"])
    return ids
