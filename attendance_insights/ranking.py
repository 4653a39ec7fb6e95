"""
Top and bottom class rankings.

Regroups the working view into class slots (optionally per instructor)
and ranks them by average attendance.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

from attendance_insights.config import Config
from attendance_insights.models import SummaryEntity

logger = logging.getLogger(__name__)


@dataclass
class RankingOptions:
    group_by_instructor: bool = False
    min_occurrences: int = Config.RANKING_MIN_OCCURRENCES
    excluded_name_substrings: Tuple[str, ...] = Config.RANKING_EXCLUDED_NAMES
    list_size: int = Config.RANKING_LIST_SIZE
    search_text: Optional[str] = None


@dataclass
class RankingEntry:
    """One ranked class slot and the summaries folded into it."""

    key: str
    cleaned_class: str
    day_of_week: str
    class_time: str
    teacher_name: str
    location: str
    average_attendance: float
    total_occurrences: int
    total_checkins: int
    total_revenue: float
    total_non_empty: int
    is_top_performer: bool = False
    entities: List[SummaryEntity] = field(default_factory=list, repr=False)

    def as_dict(self) -> dict:
        return {
            "key": self.key,
            "cleaned_class": self.cleaned_class,
            "day_of_week": self.day_of_week,
            "class_time": self.class_time,
            "teacher_name": self.teacher_name,
            "location": self.location,
            "average_attendance": self.average_attendance,
            "total_occurrences": self.total_occurrences,
            "total_checkins": self.total_checkins,
            "total_revenue": self.total_revenue,
            "total_non_empty": self.total_non_empty,
            "is_top_performer": self.is_top_performer,
        }


@dataclass
class RankingResult:
    top: List[RankingEntry]
    bottom: List[RankingEntry]
    max_average: float = 0.0  # Scale for attendance bars


def ranking_key(entity: SummaryEntity, group_by_instructor: bool) -> str:
    key = f"{entity.cleaned_class}-{entity.day_of_week}-{entity.class_time}"
    if group_by_instructor:
        key = f"{key}-{entity.teacher_name}"
    return key


def _is_rankable(entity: SummaryEntity, options: RankingOptions) -> bool:
    name = entity.cleaned_class.lower()
    if any(excluded in name for excluded in options.excluded_name_substrings):
        return False
    return entity.total_occurrences >= options.min_occurrences


def _matches_ranking_search(entity: SummaryEntity, search_text: str) -> bool:
    query = search_text.lower()
    return any(
        query in value.lower()
        for value in (entity.cleaned_class, entity.teacher_name, entity.day_of_week, entity.location)
    )


def _build_entry(key: str, members: List[SummaryEntity]) -> RankingEntry:
    first = members[0]
    total_occurrences = sum(member.total_occurrences for member in members)
    total_checkins = sum(member.total_checkins for member in members)

    # Groups without occurrences rank as 0
    average = total_checkins / total_occurrences if total_occurrences > 0 else 0.0

    return RankingEntry(
        key=key,
        cleaned_class=first.cleaned_class,
        day_of_week=first.day_of_week,
        class_time=first.class_time,
        teacher_name=first.teacher_name,
        location=first.location,
        average_attendance=average,
        total_occurrences=total_occurrences,
        total_checkins=total_checkins,
        total_revenue=sum(member.total_revenue for member in members),
        total_non_empty=sum(member.total_non_empty for member in members),
        entities=list(members),
    )


def rank_classes(
    entities: Iterable[SummaryEntity],
    options: Optional[RankingOptions] = None,
) -> RankingResult:
    """
    Rank class slots by average attendance.

    Excluded categories and slots with fewer than ``min_occurrences``
    occurrences are removed before regrouping. The top list holds the
    best ``list_size`` groups; the bottom list holds the worst groups that
    are not already in the top list, worst first. When the ranking is no
    longer than ``list_size`` the bottom list mirrors the whole ranking.

    Args:
        entities: Summary entities of the working view
        options: Ranking options (defaults from Config)

    Returns:
        RankingResult with top and bottom entries
    """
    options = options or RankingOptions()
    candidates = list(entities)

    if options.search_text and options.search_text.strip():
        candidates = [
            entity for entity in candidates
            if _matches_ranking_search(entity, options.search_text)
        ]

    eligible = [entity for entity in candidates if _is_rankable(entity, options)]
    logger.debug(f"{len(eligible)}/{len(candidates)} summaries eligible for ranking")

    groups: Dict[str, List[SummaryEntity]] = {}
    for entity in eligible:
        groups.setdefault(ranking_key(entity, options.group_by_instructor), []).append(entity)

    entries = [_build_entry(key, members) for key, members in groups.items()]
    ranked = sorted(entries, key=lambda entry: entry.average_attendance, reverse=True)

    max_average = ranked[0].average_attendance if ranked else 0.0
    if options.list_size < 1 or not ranked:
        return RankingResult(top=[], bottom=[], max_average=max_average)

    top = [replace(entry, is_top_performer=True) for entry in ranked[:options.list_size]]

    # A zero count slices the whole ranking, so short rankings overlap fully
    bottom_count = min(options.list_size, max(0, len(ranked) - options.list_size))
    bottom = [
        replace(entry, is_top_performer=False)
        for entry in reversed(ranked[-bottom_count:])
    ]

    logger.info(f"Ranked {len(ranked)} class groups: {len(top)} top, {len(bottom)} bottom")
    return RankingResult(top=top, bottom=bottom, max_average=max_average)
