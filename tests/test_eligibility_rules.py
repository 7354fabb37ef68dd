from __future__ import annotations

import pandas as pd

from src.eligibility.rules import (
    REQUIRED_FIELDS,
    apply_eligibility_filter,
    check_eligibility,
    has_name_duplicate,
    is_valid_field,
    missing_fields,
)


def _complete_scholar(name: str, **overrides) -> dict:  # noqa: ANN003
    record = {key: f"value-{key}" for key in REQUIRED_FIELDS.values()}
    record["name"] = name
    record["mobile"] = "9876543210"
    record["ug_cgpa"] = 8.4
    record.update(overrides)
    return record


def test_required_fields_cover_personal_ug_and_pg_details() -> None:
    labels = list(REQUIRED_FIELDS)

    assert len(labels) == 26
    assert labels[:6] == ["Name", "Email", "Mobile", "Certificates", "Faculty", "Program"]
    assert sum(label.startswith("UG ") for label in labels) == 10
    assert sum(label.startswith("PG ") for label in labels) == 10


def test_is_valid_field_rejects_blank_quoted_and_na_values() -> None:
    assert is_valid_field("x")
    assert is_valid_field(0)
    assert is_valid_field(7.5)
    assert not is_valid_field(None)
    assert not is_valid_field("")
    assert not is_valid_field('"  "')
    assert not is_valid_field("'n/a'")
    assert not is_valid_field(" N/A ")
    assert not is_valid_field(float("nan"))


def test_clearing_any_required_field_flips_eligibility_and_refilling_restores_it() -> None:
    scholar = _complete_scholar("Asha R")
    assert check_eligibility(scholar, [scholar]) == "Eligible"

    for label, key in REQUIRED_FIELDS.items():
        cleared = dict(scholar, **{key: ""})
        assert check_eligibility(cleared, [cleared]) == "Not Eligible", label
        assert label in missing_fields(cleared)

        refilled = dict(cleared, **{key: scholar[key]})
        assert check_eligibility(refilled, [refilled]) == "Eligible", label


def test_name_and_mobile_fall_back_to_store_columns() -> None:
    scholar = _complete_scholar("", registered_name="Asha R", mobile=None, mobile_number="98765")

    assert missing_fields(scholar) == []


def test_shared_name_makes_both_scholars_ineligible() -> None:
    first = _complete_scholar("Asha R")
    second = _complete_scholar("  asha r ")
    other = _complete_scholar("Bala K")
    everyone = [first, second, other]

    assert has_name_duplicate(first, everyone)
    assert check_eligibility(first, everyone) == "Not Eligible"
    assert check_eligibility(second, everyone) == "Not Eligible"
    assert check_eligibility(other, everyone) == "Eligible"


def test_apply_eligibility_filter_emits_reason_codes() -> None:
    df = pd.DataFrame(
        [
            _complete_scholar("Asha R", id="a"),
            _complete_scholar("Bala K", id="b", pg_cgpa=None, ug_month_year="n/a"),
            _complete_scholar("Chitra S", id="c"),
            _complete_scholar("chitra s ", id="d"),
        ]
    )

    eligible_df, ineligible_df = apply_eligibility_filter(df)

    assert eligible_df["id"].tolist() == ["a"]
    reasons = dict(zip(ineligible_df["id"], ineligible_df["reasons"]))
    assert reasons["b"] == ["MISSING_UG_MONTH_YEAR", "MISSING_PG_CGPA"]
    assert reasons["c"] == ["DUPLICATE_NAME"]
    assert reasons["d"] == ["DUPLICATE_NAME"]


def test_apply_eligibility_filter_handles_empty_frames() -> None:
    eligible_df, ineligible_df = apply_eligibility_filter(pd.DataFrame())

    assert eligible_df.empty
    assert ineligible_df.empty
    assert "reasons" in eligible_df.columns
