"""
Pivot tables over the working view.

Cross-tabulates summary entities over two dimensions and one numeric
measure. Cells keep the entities that contributed to them so the table
supports drill-down and min/max evaluated from the raw values.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd

from attendance_insights.filtering import unique_values
from attendance_insights.models import (
    SummaryEntity,
    coerce_number,
    display_value,
    is_finite_number,
    resolve_field,
)

logger = logging.getLogger(__name__)


AGGREGATIONS = ("sum", "average", "count", "min", "max")

TOTAL_LABEL = "Total"


@dataclass
class PivotCell:
    """Running sum, contributor count and contributing entities of one cell."""

    value: float = 0.0
    count: int = 0
    entities: List[SummaryEntity] = field(default_factory=list, repr=False)

    def add(self, entity: SummaryEntity, value: float) -> None:
        self.value += value
        self.count += 1
        self.entities.append(entity)


def validate_aggregation(aggregation: str) -> str:
    if aggregation not in AGGREGATIONS:
        raise ValueError(
            f"Unknown aggregation '{aggregation}'. Valid aggregations: {', '.join(AGGREGATIONS)}"
        )
    return aggregation


def measure(entity: SummaryEntity, value_field: str) -> float:
    """Numeric value of the measure for one entity (NaN when not numeric)."""
    return coerce_number(entity.field_value(value_field))


def calculate_aggregated_value(cell: PivotCell, aggregation: str, value_field: str) -> float:
    """
    Reduce a cell to a single number.

    Min and max are evaluated over the cell's retained entities at call
    time, so row, column and grand totals are each derived from their own
    contributors. Empty cells are 0 for every aggregation.

    Args:
        cell: Pivot cell (or total)
        aggregation: One of sum, average, count, min, max
        value_field: Measure field the cell was built from

    Returns:
        Aggregated value
    """
    validate_aggregation(aggregation)

    if cell.count == 0:
        return 0.0

    if aggregation == "sum":
        return cell.value
    if aggregation == "average":
        return cell.value / cell.count
    if aggregation == "count":
        return float(cell.count)

    values = [measure(entity, value_field) for entity in cell.entities]
    if not values:
        return 0.0
    if aggregation == "min":
        return float(np.min(values))
    return float(np.max(values))


def group_values(
    entities: Iterable[SummaryEntity],
    group_field: str,
    value_field: str,
) -> Dict[str, PivotCell]:
    """
    Group entities by the text of one field and fold the measure per group.

    Every observed label gets a cell, in order of first appearance.
    Entities whose measure is not numeric contribute to no cell.

    Args:
        entities: Summary entities
        group_field: Dimension to group by
        value_field: Measure to accumulate

    Returns:
        Mapping of group label to PivotCell
    """
    group_field = resolve_field(group_field)
    value_field = resolve_field(value_field)

    cells: Dict[str, PivotCell] = {}
    for entity in entities:
        cell = cells.setdefault(display_value(entity, group_field), PivotCell())
        value = measure(entity, value_field)
        if not is_finite_number(value):
            continue
        cell.add(entity, value)

    return cells


@dataclass
class PivotTable:
    """Dense row x column matrix with row, column and grand totals."""

    row_field: str
    column_field: str
    value_field: str
    aggregation: str
    row_labels: List[str]
    column_labels: List[str]
    cells: Dict[str, Dict[str, PivotCell]]
    row_totals: Dict[str, PivotCell]
    column_totals: Dict[str, PivotCell]
    grand_total: PivotCell

    def _aggregate(self, cell: PivotCell) -> float:
        return calculate_aggregated_value(cell, self.aggregation, self.value_field)

    def value(self, row: str, column: str) -> float:
        return self._aggregate(self.cells[row][column])

    def row_total(self, row: str) -> float:
        return self._aggregate(self.row_totals[row])

    def column_total(self, column: str) -> float:
        return self._aggregate(self.column_totals[column])

    def grand_total_value(self) -> float:
        return self._aggregate(self.grand_total)

    def max_cell_value(self) -> float:
        """Largest aggregated cell value (0 when the table is empty)."""
        values = [
            self.value(row, column)
            for row in self.row_labels
            for column in self.column_labels
        ]
        return max([0.0] + values)

    def column_series(self) -> List[Tuple[str, float]]:
        """(column label, aggregated column total) pairs in column order."""
        return [(column, self.column_total(column)) for column in self.column_labels]

    def to_frame(self, include_totals: bool = True) -> pd.DataFrame:
        """
        Aggregated values as a DataFrame indexed by row label.

        With ``include_totals`` a "Total" column and row are appended.
        """
        data = {
            column: [self.value(row, column) for row in self.row_labels]
            for column in self.column_labels
        }
        frame = pd.DataFrame(data, index=self.row_labels, columns=self.column_labels)

        if include_totals:
            frame[TOTAL_LABEL] = [self.row_total(row) for row in self.row_labels]
            totals = [self.column_total(column) for column in self.column_labels]
            frame.loc[TOTAL_LABEL] = totals + [self.grand_total_value()]

        frame.index.name = self.row_field
        return frame


def build_pivot(
    entities: Iterable[SummaryEntity],
    row_field: str,
    column_field: str,
    value_field: str,
    aggregation: str = "sum",
) -> PivotTable:
    """
    Cross-tabulate entities over two dimensions.

    Labels are the sorted distinct text values of the row and column
    fields. Cells, row totals, column totals and the grand total are all
    accumulated in one pass; entities with a non-numeric measure are
    skipped.

    Args:
        entities: Summary entities of the working view
        row_field: Dimension for rows
        column_field: Dimension for columns
        value_field: Numeric measure
        aggregation: One of sum, average, count, min, max

    Returns:
        PivotTable with a cell for every row/column pair

    Raises:
        ValueError: If a field or the aggregation is unknown
    """
    row_field = resolve_field(row_field)
    column_field = resolve_field(column_field)
    value_field = resolve_field(value_field)
    validate_aggregation(aggregation)

    entities = list(entities)
    row_labels = unique_values(entities, row_field)
    column_labels = unique_values(entities, column_field)

    cells = {row: {column: PivotCell() for column in column_labels} for row in row_labels}
    row_totals = {row: PivotCell() for row in row_labels}
    column_totals = {column: PivotCell() for column in column_labels}
    grand_total = PivotCell()

    skipped = 0
    for entity in entities:
        value = measure(entity, value_field)
        if not is_finite_number(value):
            skipped += 1
            continue

        row = display_value(entity, row_field)
        column = display_value(entity, column_field)

        cells[row][column].add(entity, value)
        row_totals[row].add(entity, value)
        column_totals[column].add(entity, value)
        grand_total.add(entity, value)

    logger.info(
        f"Built {len(row_labels)}x{len(column_labels)} pivot of {value_field} "
        f"({aggregation}) by {row_field} and {column_field}"
    )
    if skipped:
        logger.debug(f"Skipped {skipped} entities with a non-numeric {value_field}")

    return PivotTable(
        row_field=row_field,
        column_field=column_field,
        value_field=value_field,
        aggregation=aggregation,
        row_labels=row_labels,
        column_labels=column_labels,
        cells=cells,
        row_totals=row_totals,
        column_totals=column_totals,
        grand_total=grand_total,
    )
