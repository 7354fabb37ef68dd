from __future__ import annotations

from src.eligibility.duplicates import (
    find_duplicate_groups,
    has_blocking_duplicates,
    uploaded_duplicate_ids,
)


def _scholars() -> list[dict]:
    return [
        {"id": 1, "name": "Asha", "mobile": "98765 43210", "email": "a@x.com", "status": "uploaded"},
        {"id": 2, "name": "Bala", "mobile": "9876543210", "email": "b@x.com", "status": "uploaded"},
        {"id": 3, "name": "Chitra", "mobile": "111", "email": " A@X.com", "status": "Forwarded"},
        {"id": 4, "name": "Deepa", "mobile": "222", "email": "d@x.com"},
        {"id": 5, "name": "Deepa", "mobile": "222", "email": "d@x.com"},
        {"id": 6, "name": "Elan", "mobile": None, "email": "e@x.com", "status": "uploaded"},
        {"id": 7, "name": "Elan K", "mobile_number": None, "email": " E@x.com", "status": "Pending"},
        {"id": 8, "name": "Farah", "mobile": "333", "email": "f@x.com"},
    ]


def test_find_duplicate_groups_by_phone_then_email() -> None:
    groups = find_duplicate_groups(_scholars())

    summary = [(group.type, sorted(s["id"] for s in group.scholars)) for group in groups]
    assert summary == [("Phone", [1, 2]), ("Phone", [4, 5]), ("Email", [6, 7])]
    assert groups[0].value == "98765 43210"
    assert groups[2].count == 2


def test_find_duplicate_groups_places_each_scholar_once() -> None:
    groups = find_duplicate_groups(_scholars())

    ids = [scholar["id"] for group in groups for scholar in group.scholars]
    assert len(ids) == len(set(ids))
    # Scholar 3 shares an email with 1, but 1 is already in a phone group.
    assert 3 not in ids


def test_find_duplicate_groups_ignores_blank_keys() -> None:
    scholars = [
        {"id": 1, "name": "A", "mobile": "", "email": ""},
        {"id": 2, "name": "B", "mobile": "  ", "email": None},
    ]

    assert find_duplicate_groups(scholars) == []


def test_uploaded_duplicate_ids_only_returns_uploaded_members() -> None:
    groups = find_duplicate_groups(_scholars())

    assert uploaded_duplicate_ids(groups) == [1, 2, 6]


def test_has_blocking_duplicates_checks_application_email_and_phone() -> None:
    clean = [
        {"application_no": "A1", "email": "a@x.com", "mobile_number": "98765"},
        {"application_no": "A2", "email": "b@x.com", "mobile_number": "12345"},
    ]
    same_application = [*clean, {"application_no": "A1", "email": "c@x.com"}]
    same_email = [*clean, {"application_no": "A3", "email": " A@X.com"}]
    same_phone = [*clean, {"application_no": "A4", "mobile_number": "98-765"}]

    assert not has_blocking_duplicates(clean)
    assert has_blocking_duplicates(same_application)
    assert has_blocking_duplicates(same_email)
    assert has_blocking_duplicates(same_phone)


def test_find_duplicate_groups_handles_rows_without_ids() -> None:
    uploaded = [
        {"name": "Asha", "mobile_number": "111", "email": "a@x.com"},
        {"name": "Bala", "mobile_number": "111", "email": "b@x.com"},
        {"name": "Chitra", "mobile_number": "222", "email": "c@x.com"},
        {"name": "Deepa", "mobile_number": "222", "email": "d@x.com"},
        {"name": "Elan", "mobile_number": "333", "email": "e@x.com"},
        {"name": "Farah", "mobile_number": "444", "email": " E@x.com"},
    ]

    groups = find_duplicate_groups(uploaded)

    summary = [(group.type, [scholar["name"] for scholar in group.scholars]) for group in groups]
    assert summary == [
        ("Phone", ["Asha", "Bala"]),
        ("Phone", ["Chitra", "Deepa"]),
        ("Email", ["Elan", "Farah"]),
    ]
