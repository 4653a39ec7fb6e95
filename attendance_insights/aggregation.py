"""
Aggregation of class occurrences to class slot level.

Transforms individual class occurrences into one summary per
(class, day of week, time) slot.
"""

import logging
from typing import Dict, Iterable, List

import pandas as pd

from attendance_insights.models import SUMMARY_FIELDS, RawOccurrence, SummaryEntity

logger = logging.getLogger(__name__)


def aggregate_occurrences(occurrences: Iterable[RawOccurrence]) -> Dict[str, SummaryEntity]:
    """
    Aggregate class occurrences to slot level in a single pass.

    One summary per unique slot (cleaned_class + day_of_week + class_time).
    Location, instructor and period are taken from the first occurrence of
    a slot; every occurrence adds to the counters and is retained for
    drill-down in input order.

    Args:
        occurrences: Parsed class occurrences

    Returns:
        Mapping of unique_id to SummaryEntity, in order of first appearance
    """
    summaries: Dict[str, SummaryEntity] = {}
    count = 0

    for occurrence in occurrences:
        key = occurrence.grouping_key
        summary = summaries.get(key)
        if summary is None:
            summary = SummaryEntity.from_occurrence(occurrence)
            summaries[key] = summary
        summary.add(occurrence)
        count += 1

    logger.info(f"Aggregated {count} occurrences to {len(summaries)} class slots")
    if summaries:
        total_checkins = sum(summary.total_checkins for summary in summaries.values())
        logger.info(f"Total check-ins across all slots: {total_checkins}")

    return summaries


def summaries_to_frame(entities: Iterable[SummaryEntity]) -> pd.DataFrame:
    """
    Build a DataFrame of summary fields, one row per entity.

    Args:
        entities: Summary entities in display order

    Returns:
        DataFrame with one column per summary field
    """
    records: List[dict] = [entity.as_dict() for entity in entities]
    return pd.DataFrame(records, columns=list(SUMMARY_FIELDS))
