"""Shared builders for attendance insights tests."""

from datetime import datetime

import pytest

from attendance_insights.models import RawOccurrence, SummaryEntity


def make_occurrence(**overrides) -> RawOccurrence:
    """RawOccurrence for a Monday 09:00 Mat 57 class, with overrides."""
    values = dict(
        class_date=datetime(2024, 1, 8, 9, 0),
        cleaned_class="Studio Mat 57",
        day_of_week="Monday",
        class_time="09:00",
        location="Kwality House",
        teacher_name="Anisha Shah",
        period="Jan-24",
        checked_in=10,
        late_cancelled=0,
        revenue=1000.0,
        duration_hours=1.0,
        non_paid=0,
    )
    values.update(overrides)
    return RawOccurrence(**values)


def make_entity(checkins=(10,), **overrides) -> SummaryEntity:
    """
    SummaryEntity folded from one occurrence per check-in count.

    Overrides apply to every occurrence (e.g. cleaned_class, revenue).
    """
    occurrences = [make_occurrence(checked_in=count, **overrides) for count in checkins]
    entity = SummaryEntity.from_occurrence(occurrences[0])
    for occurrence in occurrences:
        entity.add(occurrence)
    return entity


@pytest.fixture
def raw_rows():
    return [
        {
            "Class name": "Mat 57",
            "Class date": "2024-01-08T09:00",
            "Location": "Kwality House",
            "Teacher First Name": "Anisha",
            "Teacher Last Name": "Shah",
            "Checked in": "10",
            "Late cancellations": "1",
            "Total Revenue": "1500.50",
            "Time (h)": "1",
            "Non Paid Customers": "2",
        },
        {
            "Class name": "Mat 57 Express",
            "Class date": "2024-01-08T09:00",
            "Location": "Kwality House",
            "Teacher First Name": "Karan",
            "Teacher Last Name": "Mehta",
            "Checked in": "5",
            "Late cancellations": "0",
            "Total Revenue": "800",
            "Time (h)": "0.5",
            "Non Paid Customers": "0",
        },
    ]
