from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from src.normalize.labels import (
    FULL_TIME,
    PART_TIME_EXTERNAL,
    PART_TIME_EXTERNAL_INDUSTRY,
    PART_TIME_INTERNAL,
    recognised_type,
)
from src.normalize.schema import coerce_count


class ScholarType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME_INTERNAL = "part_time_internal"
    PART_TIME_EXTERNAL = "part_time_external"
    PART_TIME_INDUSTRY = "part_time_industry"

    @property
    def max_column(self) -> str:
        return f"max_{self.value}_scholars"

    @property
    def current_column(self) -> str:
        return f"current_{self.value}_scholars"

    @property
    def vacancy_column(self) -> str:
        return f"vacancy_{self.value}"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ScholarType.FULL_TIME: FULL_TIME,
    ScholarType.PART_TIME_INTERNAL: PART_TIME_INTERNAL,
    ScholarType.PART_TIME_EXTERNAL: PART_TIME_EXTERNAL,
    ScholarType.PART_TIME_INDUSTRY: PART_TIME_EXTERNAL_INDUSTRY,
}

_BUCKETS_BY_LABEL = {
    FULL_TIME.lower(): ScholarType.FULL_TIME,
    PART_TIME_INTERNAL.lower(): ScholarType.PART_TIME_INTERNAL,
    PART_TIME_EXTERNAL.lower(): ScholarType.PART_TIME_EXTERNAL,
    PART_TIME_EXTERNAL_INDUSTRY.lower(): ScholarType.PART_TIME_INDUSTRY,
    "part time industry": ScholarType.PART_TIME_INDUSTRY,
}


def scholar_type_from_label(label: Any) -> ScholarType | None:
    """Capacity bucket for a display label or abbreviation; generic "Part Time" has none."""

    if isinstance(label, ScholarType):
        return label
    text = " ".join(str(label or "").split()).lower()
    if not text:
        return None
    if text in _BUCKETS_BY_LABEL:
        return _BUCKETS_BY_LABEL[text]
    # Industry before external: the industry label contains the external one.
    if "industry" in text:
        return ScholarType.PART_TIME_INDUSTRY
    return _BUCKETS_BY_LABEL.get((recognised_type(text) or "").lower())


def _count(supervisor: Mapping[str, Any], column: str) -> int:
    return coerce_count(supervisor.get(column))


def vacancy(supervisor: Mapping[str, Any], scholar_type: ScholarType) -> int:
    return max(0, _count(supervisor, scholar_type.max_column) - _count(supervisor, scholar_type.current_column))


def has_vacancy(supervisor: Mapping[str, Any], scholar_type: ScholarType) -> bool:
    return vacancy(supervisor, scholar_type) > 0


def increment_current(supervisor: Mapping[str, Any], scholar_type: ScholarType) -> dict[str, int]:
    column = scholar_type.current_column
    return {column: _count(supervisor, column) + 1}


def decrement_current(supervisor: Mapping[str, Any], scholar_type: ScholarType) -> dict[str, int]:
    column = scholar_type.current_column
    return {column: max(0, _count(supervisor, column) - 1)}


def vacancy_summary(supervisors: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Per-supervisor max/current/vacancy for every bucket."""

    rows = [dict(row) for row in supervisors]
    columns = ["id", "name"]
    for bucket in ScholarType:
        columns.extend([bucket.max_column, bucket.current_column, bucket.vacancy_column])
    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows)
    for column in ("id", "name"):
        if column not in df.columns:
            df[column] = None
    for bucket in ScholarType:
        for column in (bucket.max_column, bucket.current_column):
            if column not in df.columns:
                df[column] = 0
            df[column] = pd.to_numeric(df[column], errors="coerce").fillna(0).astype(int)
        df[bucket.vacancy_column] = np.clip(
            df[bucket.max_column].to_numpy() - df[bucket.current_column].to_numpy(),
            0,
            None,
        )
    return df[columns].reset_index(drop=True)
