from __future__ import annotations

from src.capacity.ledger import (
    ScholarType,
    decrement_current,
    has_vacancy,
    increment_current,
    scholar_type_from_label,
    vacancy,
    vacancy_summary,
)
from src.normalize.schema import SupervisorRecord


def test_scholar_type_from_label_maps_labels_and_codes() -> None:
    assert scholar_type_from_label("Full Time") is ScholarType.FULL_TIME
    assert scholar_type_from_label("ft") is ScholarType.FULL_TIME
    assert scholar_type_from_label("Part Time External (Industry)") is ScholarType.PART_TIME_INDUSTRY
    assert scholar_type_from_label("pte(industry)") is ScholarType.PART_TIME_INDUSTRY
    assert scholar_type_from_label("Part Time Industry") is ScholarType.PART_TIME_INDUSTRY
    assert scholar_type_from_label("PTE") is ScholarType.PART_TIME_EXTERNAL
    assert scholar_type_from_label("pti") is ScholarType.PART_TIME_INTERNAL
    assert scholar_type_from_label(ScholarType.FULL_TIME) is ScholarType.FULL_TIME


def test_generic_part_time_has_no_bucket() -> None:
    assert scholar_type_from_label("Part Time") is None
    assert scholar_type_from_label("") is None
    assert scholar_type_from_label(None) is None
    assert scholar_type_from_label("Visiting Fellow") is None


def test_bucket_column_names() -> None:
    assert ScholarType.PART_TIME_INDUSTRY.max_column == "max_part_time_industry_scholars"
    assert ScholarType.FULL_TIME.current_column == "current_full_time_scholars"


def test_vacancy_is_never_negative() -> None:
    for maximum in range(0, 4):
        for current in range(0, 6):
            supervisor = {
                "max_full_time_scholars": maximum,
                "current_full_time_scholars": current,
            }
            assert vacancy(supervisor, ScholarType.FULL_TIME) == max(0, maximum - current)
            assert vacancy(supervisor, ScholarType.FULL_TIME) >= 0


def test_full_supervisor_has_no_vacancy() -> None:
    supervisor = {"max_full_time_scholars": 2, "current_full_time_scholars": 2}

    assert not has_vacancy(supervisor, ScholarType.FULL_TIME)
    assert not has_vacancy({}, ScholarType.PART_TIME_EXTERNAL)


def test_increment_and_decrement_return_column_updates() -> None:
    supervisor = {"current_part_time_internal_scholars": None}

    assert increment_current(supervisor, ScholarType.PART_TIME_INTERNAL) == {
        "current_part_time_internal_scholars": 1
    }
    assert decrement_current(supervisor, ScholarType.PART_TIME_INTERNAL) == {
        "current_part_time_internal_scholars": 0
    }
    assert decrement_current(
        {"current_part_time_internal_scholars": 3}, ScholarType.PART_TIME_INTERNAL
    ) == {"current_part_time_internal_scholars": 2}


def test_vacancy_summary_clips_drifted_counters() -> None:
    summary = vacancy_summary(
        [
            {"id": "s1", "name": "Dr. Rao", "max_full_time_scholars": 1, "current_full_time_scholars": 3},
            {
                "id": "s2",
                "name": "Dr. Iyer",
                "max_part_time_external_scholars": "4",
                "current_part_time_external_scholars": None,
            },
        ]
    )

    assert summary["vacancy_full_time"].tolist() == [0, 0]
    assert summary["vacancy_part_time_external"].tolist() == [0, 4]
    for bucket in ScholarType:
        assert (summary[bucket.vacancy_column] >= 0).all()


def test_vacancy_summary_of_no_supervisors_is_empty() -> None:
    summary = vacancy_summary([])

    assert summary.empty
    assert "vacancy_part_time_industry" in summary.columns


def test_supervisor_record_coerces_missing_counters() -> None:
    record = SupervisorRecord.from_row(
        {"id": 7, "name": "Dr. Rao", "max_full_time_scholars": "2", "current_full_time_scholars": None}
    )

    assert record.id == "7"
    assert record.current_full_time_scholars == 0
    assert record.max_full_time_scholars == 2
    assert record.current_part_time_industry_scholars == 0
    assert record.vacancy(ScholarType.FULL_TIME) == 2
