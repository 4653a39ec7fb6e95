"""
Headline metrics for the working view.

Totals and ratios shown above every view; all derived from the same
summary counters as the tables, rankings and pivots.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Iterable

from attendance_insights.models import SummaryEntity

logger = logging.getLogger(__name__)


@dataclass
class DatasetMetrics:
    total_classes: int = 0
    total_checkins: int = 0
    total_revenue: float = 0.0
    revenue_per_class: float = 0.0
    average_attendance: float = 0.0
    utilization_rate: float = 0.0  # Percentage of classes with at least one check-in
    total_cancelled: int = 0
    total_hours: float = 0.0
    total_non_paid: int = 0
    unique_class_types: int = 0
    unique_instructors: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def calculate_metrics(entities: Iterable[SummaryEntity]) -> DatasetMetrics:
    """
    Calculate headline metrics over summary entities.

    Ratios are 0 when there are no classes.

    Args:
        entities: Summary entities of the working view

    Returns:
        DatasetMetrics
    """
    entities = list(entities)
    if not entities:
        return DatasetMetrics()

    total_classes = sum(entity.total_occurrences for entity in entities)
    total_checkins = sum(entity.total_checkins for entity in entities)
    total_revenue = sum(entity.total_revenue for entity in entities)
    total_empty = sum(entity.total_empty for entity in entities)

    metrics = DatasetMetrics(
        total_classes=total_classes,
        total_checkins=total_checkins,
        total_revenue=total_revenue,
        total_cancelled=sum(entity.total_cancelled for entity in entities),
        total_hours=sum(entity.total_time for entity in entities),
        total_non_paid=sum(entity.total_non_paid for entity in entities),
        unique_class_types=len({entity.cleaned_class for entity in entities}),
        unique_instructors=len({entity.teacher_name for entity in entities}),
    )

    if total_classes > 0:
        metrics.average_attendance = total_checkins / total_classes
        metrics.revenue_per_class = total_revenue / total_classes
        metrics.utilization_rate = (total_classes - total_empty) / total_classes * 100

    logger.debug(f"Metrics over {len(entities)} summaries: {total_classes} classes")
    return metrics
