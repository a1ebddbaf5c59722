"""Tests for the side-by-side column layout of concurrent events."""

from datetime import date, time

from studio_engine.scheduling.overlap_layout import layout_by_date, layout_day, max_concurrency
from tests.conftest import make_event


def _columns(placed):
    return {ev.id: ev.column_index for ev in placed}


def _assert_no_shared_column_overlap(placed):
    for a in placed:
        for b in placed:
            if a.id < b.id and a.column_index == b.column_index:
                assert a.end_minute <= b.start_minute or b.end_minute <= a.start_minute


class TestLayoutDay:
    def test_three_events_two_columns(self):
        events = [
            make_event(1, time(9), 60),
            make_event(2, time(9, 30), 60),
            make_event(3, time(10, 30), 30),
        ]
        placed = layout_day(events)
        assert _columns(placed) == {1: 0, 2: 1, 3: 0}
        assert {ev.total_columns for ev in placed} == {2}

    def test_empty_day(self):
        assert layout_day([]) == []

    def test_single_event(self):
        placed = layout_day([make_event(1, time(14), 45)])
        assert placed[0].column_index == 0
        assert placed[0].total_columns == 1

    def test_back_to_back_share_column(self):
        placed = layout_day([make_event(1, time(9), 60), make_event(2, time(10), 60)])
        assert _columns(placed) == {1: 0, 2: 0}
        assert placed[0].total_columns == 1

    def test_input_order_does_not_matter(self):
        events = [
            make_event(3, time(10, 30), 30),
            make_event(2, time(9, 30), 60),
            make_event(1, time(9), 60),
        ]
        assert _columns(layout_day(events)) == {1: 0, 2: 1, 3: 0}

    def test_ties_keep_input_order(self):
        events = [make_event(7, time(9), 30), make_event(4, time(9), 30)]
        placed = layout_day(events)
        assert [ev.id for ev in placed] == [7, 4]
        assert _columns(placed) == {7: 0, 4: 1}

    def test_leftmost_free_column_reused(self):
        events = [
            make_event(1, time(9), 120),
            make_event(2, time(9), 30),
            make_event(3, time(9), 60),
            make_event(4, time(9, 45), 30),
        ]
        placed = layout_day(events)
        assert _columns(placed) == {1: 0, 2: 1, 3: 2, 4: 1}
        assert placed[0].total_columns == 3

    def test_event_fields_are_carried(self):
        placed = layout_day([make_event(5, time(11), 20)])
        assert placed[0].title == "Event 5"
        assert placed[0].date == date(2026, 3, 9)
        assert placed[0].duration_minutes == 20


class TestLayoutProperties:
    def _busy_day(self):
        return [
            make_event(1, time(8), 90),
            make_event(2, time(8, 30), 30),
            make_event(3, time(9), 60),
            make_event(4, time(9), 15),
            make_event(5, time(9, 15), 120),
            make_event(6, time(10), 30),
            make_event(7, time(12), 60),
            make_event(8, time(12, 30), 15),
        ]

    def test_no_overlap_within_column(self):
        _assert_no_shared_column_overlap(layout_day(self._busy_day()))

    def test_columns_equal_peak_concurrency(self):
        events = self._busy_day()
        placed = layout_day(events)
        assert placed[0].total_columns == max_concurrency(events)

    def test_column_indexes_within_total(self):
        for ev in layout_day(self._busy_day()):
            assert 0 <= ev.column_index < ev.total_columns


class TestMaxConcurrency:
    def test_touching_events_do_not_overlap(self):
        events = [make_event(1, time(9), 60), make_event(2, time(10), 60)]
        assert max_concurrency(events) == 1

    def test_nested_events(self):
        events = [make_event(1, time(9), 180), make_event(2, time(10), 30)]
        assert max_concurrency(events) == 2

    def test_empty(self):
        assert max_concurrency([]) == 0


class TestLayoutByDate:
    def test_days_are_independent(self):
        monday = date(2026, 3, 9)
        tuesday = date(2026, 3, 10)
        events = [
            make_event(1, time(9), 60, monday),
            make_event(2, time(9), 60, tuesday),
            make_event(3, time(9, 30), 60, monday),
        ]
        by_date = layout_by_date(events)
        assert list(by_date) == [monday, tuesday]
        assert {ev.total_columns for ev in by_date[monday]} == {2}
        assert by_date[tuesday][0].total_columns == 1

    def test_no_events(self):
        assert layout_by_date([]) == {}
