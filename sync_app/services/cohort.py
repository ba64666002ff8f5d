"""Before/after cohort comparison of health records."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from sync_app.services.formatting import to_number


# Position of the first record logged after the user started using Sync.
# This is product policy, not derived from any adoption timestamp.
SYNC_START_INDEX = 2

Record = Mapping[str, Any]


@dataclass(frozen=True)
class CohortSplit:
    """Records before and after the split index."""

    before: list[Record]
    after: list[Record]
    split_index: int

    def averages(self, field: str = "readiness_score") -> tuple[float, float]:
        return average(self.before, field), average(self.after, field)


def clamp_split_index(split_index: int, record_count: int) -> int:
    return max(0, min(split_index, record_count))


def split_cohorts(records: Sequence[Record], split_index: int = SYNC_START_INDEX) -> CohortSplit:
    """Partition date-ordered records into ``records[:k]`` and ``records[k:]``.

    The caller is responsible for ordering; records are not re-sorted here.
    """
    k = clamp_split_index(split_index, len(records))
    return CohortSplit(before=list(records[:k]), after=list(records[k:]), split_index=k)


def average(cohort: Sequence[Record], field: str) -> float:
    """Arithmetic mean of ``field`` over the cohort; ``0.0`` for an empty cohort."""
    if not cohort:
        return 0.0
    total = sum(to_number(record.get(field)) for record in cohort)
    return total / len(cohort)


def split_start_date(records: Sequence[Record], split_index: int = SYNC_START_INDEX) -> Any | None:
    """Date of the record at the split index, or ``None`` when there is no such record."""
    if 0 <= split_index < len(records):
        return records[split_index].get("date")
    return None
