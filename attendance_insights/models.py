"""
Data structures shared by the aggregation, view, ranking and pivot stages.

Plain dataclasses: they live for one in-memory session and are exposed to
the presentation layer as serializable dictionaries via ``as_dict``.
Every field has a single stored type; ``coerce_number`` and
``display_value`` are the only conversions the stages use.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np

NOT_AVAILABLE = "N/A"

DIMENSION_FIELDS = (
    "cleaned_class",
    "day_of_week",
    "class_time",
    "location",
    "teacher_name",
    "period",
)

METRIC_FIELDS = (
    "total_occurrences",
    "total_cancelled",
    "total_checkins",
    "total_empty",
    "total_non_empty",
    "class_average_including_empty",
    "class_average_excluding_empty",
    "total_revenue",
    "total_time",
    "total_non_paid",
)

SUMMARY_FIELDS = ("unique_id",) + DIMENSION_FIELDS + METRIC_FIELDS

# Monetary and hour totals are shown with two decimals everywhere
DECIMAL_FIELDS = frozenset({"total_revenue", "total_time"})

# Field names used by the original dashboard and in saved filter sets
FIELD_ALIASES = {
    "uniqueID": "unique_id",
    "cleanedClass": "cleaned_class",
    "dayOfWeek": "day_of_week",
    "classTime": "class_time",
    "teacherName": "teacher_name",
    "totalOccurrences": "total_occurrences",
    "totalCancelled": "total_cancelled",
    "totalCheckins": "total_checkins",
    "totalEmpty": "total_empty",
    "totalNonEmpty": "total_non_empty",
    "classAverageIncludingEmpty": "class_average_including_empty",
    "classAverageExcludingEmpty": "class_average_excluding_empty",
    "totalRevenue": "total_revenue",
    "totalTime": "total_time",
    "totalNonPaid": "total_non_paid",
}


def resolve_field(name: str) -> str:
    """
    Resolve a summary field name, accepting the camelCase aliases.

    Raises:
        ValueError: If the name is not a summary field
    """
    resolved = FIELD_ALIASES.get(name, name)
    if resolved not in SUMMARY_FIELDS:
        raise ValueError(
            f"Unknown summary field '{name}'. Valid fields: {', '.join(SUMMARY_FIELDS)}"
        )
    return resolved


def coerce_number(value: Any) -> float:
    """
    Convert a string-or-number field value to float.

    Returns NaN for None, empty strings, the "N/A" sentinel and anything
    else that does not parse as a number.
    """
    if value is None or isinstance(value, bool):
        return float("nan")
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)
    text = str(value).strip()
    if not text:
        return float("nan")
    try:
        return float(text)
    except ValueError:
        return float("nan")


def is_finite_number(value: float) -> bool:
    return bool(np.isfinite(value))


def _format_average(numerator: int, denominator: int, empty: str) -> str:
    if denominator <= 0:
        return empty
    return f"{numerator / denominator:.1f}"


@dataclass(frozen=True)
class RawOccurrence:
    """A single scheduled class event parsed from one export row."""

    class_date: Optional[datetime]
    cleaned_class: str
    day_of_week: str  # "Monday" .. "Sunday"
    class_time: str  # "HH:MM"
    location: str
    teacher_name: str
    period: str  # "Jan-24"
    checked_in: int = 0
    late_cancelled: int = 0
    revenue: float = 0.0
    duration_hours: float = 0.0
    non_paid: int = 0

    @property
    def grouping_key(self) -> str:
        return f"{self.cleaned_class}-{self.day_of_week}-{self.class_time}"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "class_date": self.class_date.isoformat() if self.class_date else None,
            "cleaned_class": self.cleaned_class,
            "day_of_week": self.day_of_week,
            "class_time": self.class_time,
            "location": self.location,
            "teacher_name": self.teacher_name,
            "period": self.period,
            "checked_in": self.checked_in,
            "late_cancelled": self.late_cancelled,
            "revenue": self.revenue,
            "duration_hours": self.duration_hours,
            "non_paid": self.non_paid,
        }


@dataclass
class SummaryEntity:
    """
    Aggregate of every occurrence sharing a (class, day, time) slot.

    Location, instructor and period come from the first occurrence seen;
    the counters accumulate over all of them.
    """

    unique_id: str
    cleaned_class: str
    day_of_week: str
    class_time: str
    location: str
    teacher_name: str
    period: str
    total_occurrences: int = 0
    total_cancelled: int = 0
    total_checkins: int = 0
    total_empty: int = 0
    total_revenue: float = 0.0
    total_time: float = 0.0
    total_non_paid: int = 0
    occurrences: List[RawOccurrence] = field(default_factory=list, repr=False)

    @classmethod
    def from_occurrence(cls, occurrence: RawOccurrence) -> "SummaryEntity":
        """Create an empty summary carrying the occurrence's descriptive fields."""
        return cls(
            unique_id=occurrence.grouping_key,
            cleaned_class=occurrence.cleaned_class,
            day_of_week=occurrence.day_of_week,
            class_time=occurrence.class_time,
            location=occurrence.location,
            teacher_name=occurrence.teacher_name,
            period=occurrence.period,
        )

    def add(self, occurrence: RawOccurrence) -> None:
        self.total_occurrences += 1
        self.total_cancelled += occurrence.late_cancelled
        self.total_checkins += occurrence.checked_in
        self.total_empty += 1 if occurrence.checked_in == 0 else 0
        self.total_revenue += occurrence.revenue
        self.total_time += occurrence.duration_hours
        self.total_non_paid += occurrence.non_paid
        self.occurrences.append(occurrence)

    @property
    def total_non_empty(self) -> int:
        return self.total_occurrences - self.total_empty

    @property
    def class_average_including_empty(self) -> str:
        return _format_average(self.total_checkins, self.total_occurrences, "0.0")

    @property
    def class_average_excluding_empty(self) -> str:
        return _format_average(self.total_checkins, self.total_non_empty, NOT_AVAILABLE)

    def field_value(self, name: str) -> Any:
        """Typed value of a summary field (aliases accepted)."""
        return getattr(self, resolve_field(name))

    def as_dict(self, include_occurrences: bool = False) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in SUMMARY_FIELDS}
        if include_occurrences:
            data["occurrences"] = [occurrence.as_dict() for occurrence in self.occurrences]
        return data


def display_value(entity: SummaryEntity, name: str) -> str:
    """
    Text form of a summary field as shown in tables, labels and exports.

    Revenue and hours are rendered with two decimals; everything else is
    the plain string form of the stored value.
    """
    resolved = resolve_field(name)
    value = getattr(entity, resolved)
    if resolved in DECIMAL_FIELDS:
        return f"{value:.2f}"
    return str(value)
