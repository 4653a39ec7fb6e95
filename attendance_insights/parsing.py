"""
Parsing of raw attendance export rows into typed occurrence records.

Derives weekday, time slot and period from the class date, coerces the
numeric columns and normalizes class names.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from attendance_insights.models import RawOccurrence
from attendance_insights.normalization import normalize_class_name

logger = logging.getLogger(__name__)


# Column names fixed by the attendance export
CLASS_NAME = "Class name"
CLASS_DATE = "Class date"
LOCATION = "Location"
TEACHER_FIRST_NAME = "Teacher First Name"
TEACHER_LAST_NAME = "Teacher Last Name"
CHECKED_IN = "Checked in"
LATE_CANCELLATIONS = "Late cancellations"
TOTAL_REVENUE = "Total Revenue"
TIME_HOURS = "Time (h)"
NON_PAID_CUSTOMERS = "Non Paid Customers"

INPUT_COLUMNS = [
    CLASS_NAME,
    CLASS_DATE,
    LOCATION,
    TEACHER_FIRST_NAME,
    TEACHER_LAST_NAME,
    CHECKED_IN,
    LATE_CANCELLATIONS,
    TOTAL_REVENUE,
    TIME_HOURS,
    NON_PAID_CUSTOMERS,
]

INTEGER_COLUMNS = [CHECKED_IN, LATE_CANCELLATIONS, NON_PAID_CUSTOMERS]
DECIMAL_COLUMNS = [TOTAL_REVENUE, TIME_HOURS]

# First float that no longer fits an int64 count
INTEGER_LIMIT = float(np.iinfo(np.int64).max)

Rows = Union[pd.DataFrame, Iterable[Mapping[str, object]]]


def load_csv_rows(paths: Sequence[Union[str, Path]]) -> pd.DataFrame:
    """
    Read one or more attendance CSV exports into a single DataFrame.

    Every cell is read as text so that numeric coercion happens in one
    place (``parse_rows``).

    Args:
        paths: CSV file paths

    Returns:
        DataFrame with the concatenated rows of every file
    """
    frames = []
    for path in paths:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False)
        logger.info(f"Read {len(frame)} rows from {path}")
        frames.append(frame)

    if not frames:
        return pd.DataFrame(columns=INPUT_COLUMNS)

    return pd.concat(frames, ignore_index=True)


def _text_column(df: pd.DataFrame, column: str) -> pd.Series:
    return df[column].fillna("").astype(str)


def _numeric_column(df: pd.DataFrame, column: str, integer: bool) -> pd.Series:
    """
    Coerce a column to non-negative numbers with 0 as the fallback.

    Missing and unparseable values both become 0; integer columns are
    truncated toward zero and counts too large for an int64 become 0.
    """
    values = pd.to_numeric(df[column], errors="coerce")
    values = values.replace([np.inf, -np.inf], np.nan).fillna(0).clip(lower=0)
    if integer:
        values = values.where(values < INTEGER_LIMIT, 0)
        return values.astype(np.int64)
    return values.astype(float)


def _parse_date(value: str) -> pd.Timestamp:
    """
    Parse one class date, keeping the wall-clock time of offset stamps.

    Dates are parsed one at a time so that rows with different UTC offsets
    (or a mix of offset and naive stamps) do not fail the whole column.
    """
    if not value.strip():
        return pd.NaT
    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        return pd.NaT
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed


def _date_column(df: pd.DataFrame, column: str) -> pd.Series:
    parsed = _text_column(df, column).map(_parse_date)
    return pd.Series(list(parsed), index=df.index, dtype="datetime64[ns]")


def build_occurrence_frame(rows: Rows) -> pd.DataFrame:
    """
    Build a typed occurrence DataFrame from raw export rows.

    Rows without a class name are dropped. Columns missing from the input
    are treated as empty.

    Args:
        rows: DataFrame or iterable of field-maps keyed by the export columns

    Returns:
        DataFrame with one row per occurrence and the RawOccurrence columns
    """
    df = rows.copy() if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))

    for column in INPUT_COLUMNS:
        if column not in df.columns:
            df[column] = ""

    names = _text_column(df, CLASS_NAME)
    keep = names.str.strip() != ""
    dropped = int((~keep).sum())
    if dropped:
        logger.debug(f"Dropped {dropped} rows without a class name")

    df = df.loc[keep].reset_index(drop=True)

    dates = _date_column(df, CLASS_DATE)
    teacher = _text_column(df, TEACHER_FIRST_NAME) + " " + _text_column(df, TEACHER_LAST_NAME)

    occurrences = pd.DataFrame({
        "class_date": dates,
        "cleaned_class": _text_column(df, CLASS_NAME).map(normalize_class_name),
        "day_of_week": dates.dt.day_name().fillna(""),
        "class_time": dates.dt.strftime("%H:%M").fillna(""),
        "location": _text_column(df, LOCATION),
        "teacher_name": teacher.str.strip(),
        "period": dates.dt.strftime("%b-%y").fillna(""),
        "checked_in": _numeric_column(df, CHECKED_IN, integer=True),
        "late_cancelled": _numeric_column(df, LATE_CANCELLATIONS, integer=True),
        "revenue": _numeric_column(df, TOTAL_REVENUE, integer=False),
        "duration_hours": _numeric_column(df, TIME_HOURS, integer=False),
        "non_paid": _numeric_column(df, NON_PAID_CUSTOMERS, integer=True),
    })

    unparsed = int(dates.isna().sum())
    if unparsed:
        logger.warning(f"{unparsed} rows have an unparseable class date")

    return occurrences


def parse_rows(rows: Rows) -> List[RawOccurrence]:
    """
    Convert raw export rows into RawOccurrence records.

    One record per row with a class name, in input order. Numeric fields
    that are missing or invalid default to 0.

    Args:
        rows: DataFrame or iterable of field-maps keyed by the export columns

    Returns:
        List of RawOccurrence
    """
    frame = build_occurrence_frame(rows)

    records = []
    for row in frame.itertuples(index=False):
        class_date = None if pd.isna(row.class_date) else row.class_date.to_pydatetime()
        records.append(
            RawOccurrence(
                class_date=class_date,
                cleaned_class=row.cleaned_class,
                day_of_week=row.day_of_week,
                class_time=row.class_time,
                location=row.location,
                teacher_name=row.teacher_name,
                period=row.period,
                checked_in=int(row.checked_in),
                late_cancelled=int(row.late_cancelled),
                revenue=float(row.revenue),
                duration_hours=float(row.duration_hours),
                non_paid=int(row.non_paid),
            )
        )

    logger.info(f"Parsed {len(records)} class occurrences")
    return records
