"""
Chart-ready series built from the working view.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from attendance_insights.config import Config
from attendance_insights.models import SummaryEntity
from attendance_insights.pivot import group_values

logger = logging.getLogger(__name__)


@dataclass
class ChartPoint:
    label: str
    value: float
    count: int


def project_chart(
    entities: Iterable[SummaryEntity],
    group_by: str,
    metric: str,
    limit: Optional[int] = None,
) -> List[ChartPoint]:
    """
    Collapse entities along one dimension into a bounded series.

    Groups by the text of ``group_by``, sums ``metric`` per group with
    the pivot coercion rules, and keeps the largest groups.

    Args:
        entities: Summary entities of the working view
        group_by: Dimension field
        metric: Numeric measure field
        limit: Number of groups to keep (Config.CHART_TOP_K by default)

    Returns:
        ChartPoints sorted by value, largest first
    """
    limit = Config.CHART_TOP_K if limit is None else limit
    groups = group_values(entities, group_by, metric)

    points = [
        ChartPoint(label=label, value=cell.value, count=cell.count)
        for label, cell in groups.items()
    ]
    points.sort(key=lambda point: point.value, reverse=True)

    logger.debug(f"Chart of {metric} by {group_by}: {len(points)} groups, keeping {limit}")
    return points[:limit]
