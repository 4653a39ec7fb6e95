"""
Filtering, sorting and search over summary entities.

Produces the working view that drives every downstream display. Filter
predicates are plain data so they can be saved and restored as named
filter sets.
"""

import json
import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Optional, Sequence

from attendance_insights.models import (
    SUMMARY_FIELDS,
    SummaryEntity,
    coerce_number,
    display_value,
    is_finite_number,
    resolve_field,
)

logger = logging.getLogger(__name__)


OPERATORS = ("contains", "equals", "starts", "ends", "greater", "less")

OPERATOR_ALIASES = {
    "starts-with": "starts",
    "ends-with": "ends",
    "greater-than": "greater",
    "less-than": "less",
}

DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class FilterPredicate:
    """A single field-level condition; all predicates of a view must pass."""

    field: str
    operator: str
    value: str

    def __post_init__(self) -> None:
        operator = OPERATOR_ALIASES.get(self.operator, self.operator)
        if operator not in OPERATORS:
            raise ValueError(
                f"Unknown filter operator '{self.operator}'. Valid operators: {', '.join(OPERATORS)}"
            )
        object.__setattr__(self, "field", resolve_field(self.field))
        object.__setattr__(self, "operator", operator)
        object.__setattr__(self, "value", str(self.value))

    def matches(self, entity: SummaryEntity) -> bool:
        """
        Evaluate the predicate against one entity.

        String operators compare display text case-insensitively.
        ``greater`` and ``less`` compare numerically; when either side is
        not a number both operators evaluate to False.
        """
        if self.operator in ("greater", "less"):
            left = coerce_number(entity.field_value(self.field))
            right = coerce_number(self.value)
            if self.operator == "greater":
                return left > right
            return left < right

        text = display_value(entity, self.field).lower()
        literal = self.value.lower()

        if self.operator == "contains":
            return literal in text
        if self.operator == "equals":
            return text == literal
        if self.operator == "starts":
            return text.startswith(literal)
        return text.endswith(literal)

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "operator": self.operator, "value": self.value}


@dataclass(frozen=True)
class SortKey:
    field: str
    direction: str = "asc"

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise ValueError(f"Unknown sort direction '{self.direction}'. Use 'asc' or 'desc'.")
        object.__setattr__(self, "field", resolve_field(self.field))


def matches_search(entity: SummaryEntity, search_text: str) -> bool:
    """True if any summary field's text contains the search text (case-insensitive)."""
    query = search_text.lower()
    return any(query in display_value(entity, name).lower() for name in SUMMARY_FIELDS)


def compare_values(left: Any, right: Any) -> int:
    """
    Three-way comparison used by multi-key sorting.

    Numeric when both sides coerce to finite numbers, otherwise a
    case-sensitive string comparison.
    """
    left_number = coerce_number(left)
    right_number = coerce_number(right)

    if is_finite_number(left_number) and is_finite_number(right_number):
        return (left_number > right_number) - (left_number < right_number)

    left_text = str(left)
    right_text = str(right)
    return (left_text > right_text) - (left_text < right_text)


def sort_entities(entities: Iterable[SummaryEntity], sort_keys: Sequence[SortKey]) -> List[SummaryEntity]:
    """
    Stable lexicographic sort over a ranked list of sort keys.

    Entities tied on every key keep their relative input order.
    """
    def compare(a: SummaryEntity, b: SummaryEntity) -> int:
        for key in sort_keys:
            comparison = compare_values(a.field_value(key.field), b.field_value(key.field))
            if comparison != 0:
                return comparison if key.direction == "asc" else -comparison
        return 0

    return sorted(entities, key=cmp_to_key(compare))


def apply_view(
    entities: Iterable[SummaryEntity],
    predicates: Sequence[FilterPredicate] = (),
    sort_keys: Sequence[SortKey] = (),
    search_text: Optional[str] = None,
) -> List[SummaryEntity]:
    """
    Build the working view: search, then filter, then sort.

    The input is never mutated; a new list is returned.

    Args:
        entities: Summary entities
        predicates: Filter predicates, all of which must pass
        sort_keys: Sort keys in priority order
        search_text: Optional free-text search across every summary field

    Returns:
        Filtered and ordered list of entities
    """
    result = list(entities)
    total = len(result)

    if search_text:
        result = [entity for entity in result if matches_search(entity, search_text)]

    if predicates:
        result = [
            entity for entity in result
            if all(predicate.matches(entity) for predicate in predicates)
        ]

    if sort_keys:
        result = sort_entities(result, sort_keys)

    logger.debug(f"Working view: {len(result)}/{total} entities")
    return result


def range_predicates(
    field: str,
    minimum: Optional[str] = None,
    maximum: Optional[str] = None,
) -> List[FilterPredicate]:
    """Greater-than / less-than pair for a numeric range; blank bounds are skipped."""
    predicates = []
    if minimum:
        predicates.append(FilterPredicate(field, "greater", minimum))
    if maximum:
        predicates.append(FilterPredicate(field, "less", maximum))
    return predicates


def replace_field_predicates(
    predicates: Sequence[FilterPredicate],
    field: str,
    replacements: Sequence[FilterPredicate],
) -> List[FilterPredicate]:
    """Drop every predicate on ``field`` and append the replacements."""
    resolved = resolve_field(field)
    kept = [predicate for predicate in predicates if predicate.field != resolved]
    return kept + list(replacements)


def unique_values(entities: Iterable[SummaryEntity], field: str) -> List[str]:
    """Sorted distinct display values of a field."""
    return sorted({display_value(entity, field) for entity in entities})


def serialize_predicates(predicates: Sequence[FilterPredicate]) -> str:
    return json.dumps([predicate.to_dict() for predicate in predicates])


def deserialize_predicates(payload: str) -> List[FilterPredicate]:
    """
    Restore predicates serialized by ``serialize_predicates``.

    Raises:
        ValueError: If the payload is not a list of predicate objects
    """
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError("Serialized filter predicates must be a JSON list")
    try:
        return [
            FilterPredicate(item["field"], item["operator"], item["value"])
            for item in data
        ]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed serialized filter predicate: {e}") from e
