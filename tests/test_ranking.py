"""Tests for attendance_insights.ranking: top/bottom class lists."""

import pytest

from attendance_insights.ranking import RankingOptions, rank_classes

from conftest import make_entity


def _slot(name, checkins, time="09:00", **overrides):
    return make_entity(checkins=checkins, cleaned_class=name, class_time=time, **overrides)


@pytest.fixture
def slots():
    return [
        _slot("Studio Mat 57", (10, 12)),  # 11.0
        _slot("Studio HIIT", (4, 6)),  # 5.0
        _slot("Studio Barre 57", (20, 18)),  # 19.0
        _slot("Studio FIT", (1, 1)),  # 1.0
        _slot("Studio Cardio Barre", (8, 8)),  # 8.0
    ]


class TestRankClasses:

    def test_top_sorted_descending(self, slots) -> None:
        result = rank_classes(slots, RankingOptions(list_size=2))

        assert [e.cleaned_class for e in result.top] == ["Studio Barre 57", "Studio Mat 57"]
        assert all(e.is_top_performer for e in result.top)

    def test_top_first_is_global_maximum(self, slots) -> None:
        result = rank_classes(slots, RankingOptions(list_size=3))

        assert result.top[0].average_attendance == pytest.approx(19.0)
        assert all(result.top[0].average_attendance >= e.average_attendance for e in result.top)
        assert result.max_average == pytest.approx(19.0)

    def test_bottom_lists_worst_first(self, slots) -> None:
        result = rank_classes(slots, RankingOptions(list_size=2))

        assert [e.cleaned_class for e in result.bottom] == ["Studio FIT", "Studio HIIT"]
        assert not any(e.is_top_performer for e in result.bottom)
        assert all(result.bottom[0].average_attendance <= e.average_attendance for e in result.bottom)

    def test_bottom_limited_to_groups_outside_top(self, slots) -> None:
        result = rank_classes(slots, RankingOptions(list_size=3))

        assert len(result.top) == 3
        assert [e.cleaned_class for e in result.bottom] == ["Studio FIT", "Studio HIIT"]

    def test_short_ranking_overlaps_entirely(self, slots) -> None:
        """Open question decision: with too few groups, bottom mirrors the whole ranking."""
        result = rank_classes(slots, RankingOptions(list_size=10))

        assert len(result.top) == 5
        assert [e.key for e in result.bottom] == [e.key for e in reversed(result.top)]

    def test_excluded_categories(self) -> None:
        slots = [
            _slot("Studio Recovery", (30, 30)),
            _slot("Studio powerCycle", (25, 25)),
            _slot("Studio Hosted Class", (40, 40)),
            _slot("Studio Mat 57", (5, 5)),
        ]
        result = rank_classes(slots, RankingOptions(list_size=5))

        assert [e.cleaned_class for e in result.top] == ["Studio Mat 57"]

    def test_custom_exclusions(self, slots) -> None:
        options = RankingOptions(list_size=1, excluded_name_substrings=("barre",))
        assert rank_classes(slots, options).top[0].cleaned_class == "Studio Mat 57"

    def test_min_occurrences(self, slots) -> None:
        slots.append(_slot("Studio Sweat in 30", (50,)))

        result = rank_classes(slots, RankingOptions(list_size=1, min_occurrences=2))
        assert result.top[0].cleaned_class == "Studio Barre 57"

        result = rank_classes(slots, RankingOptions(list_size=1, min_occurrences=1))
        assert result.top[0].cleaned_class == "Studio Sweat in 30"

    def test_group_by_instructor(self) -> None:
        slots = [
            _slot("Studio Mat 57", (10, 10), location="A", teacher_name="Anisha Shah"),
            _slot("Studio Mat 57", (2, 2), location="B", teacher_name="Karan Mehta"),
        ]

        merged = rank_classes(slots, RankingOptions(list_size=5))
        split = rank_classes(slots, RankingOptions(list_size=5, group_by_instructor=True))

        assert len(merged.top) == 1
        assert merged.top[0].average_attendance == pytest.approx(6.0)
        assert merged.top[0].total_occurrences == 4
        assert merged.top[0].location == "A"
        assert len(merged.top[0].entities) == 2
        assert [e.teacher_name for e in split.top] == ["Anisha Shah", "Karan Mehta"]

    def test_zero_occurrence_group_ranks_as_zero(self) -> None:
        hollow = _slot("Studio HIIT", (0,))
        hollow.total_occurrences = 0
        result = rank_classes([hollow, _slot("Studio Mat 57", (3,))], RankingOptions(list_size=1, min_occurrences=0))

        assert result.top[0].cleaned_class == "Studio Mat 57"
        assert result.bottom[0].average_attendance == 0.0

    def test_equal_averages_keep_input_order(self) -> None:
        slots = [
            _slot("Studio HIIT", (6, 6)),
            _slot("Studio Mat 57", (6, 6)),
        ]
        result = rank_classes(slots, RankingOptions(list_size=2))

        assert [e.cleaned_class for e in result.top] == ["Studio HIIT", "Studio Mat 57"]

    def test_search_text(self, slots) -> None:
        result = rank_classes(slots, RankingOptions(list_size=5, search_text="barre"))
        assert {e.cleaned_class for e in result.top} == {"Studio Barre 57", "Studio Cardio Barre"}

    def test_empty(self) -> None:
        result = rank_classes([])
        assert (result.top, result.bottom, result.max_average) == ([], [], 0.0)

    def test_entries_serializable(self, slots) -> None:
        data = rank_classes(slots, RankingOptions(list_size=1)).top[0].as_dict()
        assert data["total_checkins"] == 38
        assert "entities" not in data
