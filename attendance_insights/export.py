"""
CSV export of the working view.

Writes the values the engine computed, in a fixed column order under a
fixed header row.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd

from attendance_insights.models import SummaryEntity, display_value

logger = logging.getLogger(__name__)


# (header, summary field) in export order
EXPORT_COLUMNS = [
    ("Unique ID", "unique_id"),
    ("Cleaned Class", "cleaned_class"),
    ("Day of the Week", "day_of_week"),
    ("Class Time", "class_time"),
    ("Location", "location"),
    ("Trainer Name", "teacher_name"),
    ("Period", "period"),
    ("Total Occurrences", "total_occurrences"),
    ("Total Cancelled", "total_cancelled"),
    ("Total Checkins", "total_checkins"),
    ("Total Empty", "total_empty"),
    ("Total Non-Empty", "total_non_empty"),
    ("Class Average (Including Empty)", "class_average_including_empty"),
    ("Class Average (Excluding Empty)", "class_average_excluding_empty"),
    ("Total Revenue", "total_revenue"),
    ("Total Time", "total_time"),
    ("Total Non-Paid", "total_non_paid"),
]

EXPORT_HEADER = [header for header, _ in EXPORT_COLUMNS]


def build_export_frame(entities: Iterable[SummaryEntity]) -> pd.DataFrame:
    """
    Build the export table as text columns.

    Args:
        entities: Summary entities in view order

    Returns:
        DataFrame with the export header as columns
    """
    records = [
        [display_value(entity, name) for _, name in EXPORT_COLUMNS]
        for entity in entities
    ]
    return pd.DataFrame(records, columns=EXPORT_HEADER)


def export_summaries(
    entities: Iterable[SummaryEntity],
    path: Optional[Union[str, Path]] = None,
) -> str:
    """
    Serialize summaries to CSV.

    Args:
        entities: Summary entities in view order
        path: Optional file to write the CSV to

    Returns:
        The CSV text
    """
    frame = build_export_frame(entities)
    content = frame.to_csv(index=False)

    if path is not None:
        Path(path).write_text(content, encoding="utf-8")
        logger.info(f"Exported {len(frame)} summaries to {path}")

    return content
