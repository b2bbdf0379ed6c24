from __future__ import annotations

import random
from datetime import date, datetime, timedelta

import pytest

from paging.date_range import CalendarEvent, DateTimeRange
from paging.date_range_indexer import Month, range_for_index
from paging.event_layout import layout, layout_days, layout_month, layout_week_row

DAY = DateTimeRange(datetime(2024, 1, 2), datetime(2024, 1, 3))


def at(hour: int, minute: int = 0, day: int = 2) -> datetime:
    return datetime(2024, 1, day, hour, minute)


def event(event_id, start: datetime, end: datetime) -> CalendarEvent:
    return CalendarEvent(event_id, DateTimeRange(start, end))


def columns(placements) -> dict:
    return {p.event_id: (p.column, p.column_count) for p in placements}


def test_overlapping_events_share_one_cluster():
    events = [
        event("c", at(10), at(11)),
        event("a", at(9), at(10)),
        event("b", at(9, 30), at(10, 30)),
    ]

    placements = layout(DAY, events)

    assert columns(placements) == {"a": (0, 2), "b": (1, 2), "c": (0, 2)}
    assert [p.event_id for p in placements] == ["a", "b", "c"]


def test_event_crossing_range_start_is_clipped():
    placements = layout(DAY, [event("late", at(22, day=1), at(2))])

    assert len(placements) == 1
    placement = placements[0]
    assert placement.visible_slice == DateTimeRange(at(0), at(2))
    assert placement.continues_before
    assert not placement.continues_after


def test_event_crossing_range_end_continues_after():
    placement = layout(DAY, [event("night", at(23), at(1, day=3))])[0]
    assert placement.visible_slice == DateTimeRange(at(23), DAY.end)
    assert not placement.continues_before
    assert placement.continues_after


def test_each_cluster_gets_its_own_column_count():
    events = [
        event("a", at(9), at(11)),
        event("b", at(9), at(10)),
        event("c", at(10), at(12)),
        event("d", at(13), at(14)),
    ]

    assert columns(layout(DAY, events)) == {
        "a": (0, 2),
        "b": (1, 2),
        "c": (1, 2),
        "d": (0, 1),
    }


def test_touching_events_do_not_overlap():
    events = [event("a", at(9), at(10)), event("b", at(10), at(11))]
    assert columns(layout(DAY, events)) == {"a": (0, 1), "b": (0, 1)}


def test_identical_ranges_break_ties_by_id():
    events = [event("y", at(9), at(10)), event("x", at(9), at(10))]
    assert columns(layout(DAY, events)) == {"x": (0, 2), "y": (1, 2)}


def test_zero_duration_event_claims_a_column():
    events = [event("reminder", at(9), at(9)), event("call", at(9, 10), at(9, 20))]

    placements = layout(DAY, events)

    assert columns(placements) == {"reminder": (0, 2), "call": (1, 2)}
    reminder = next(p for p in placements if p.event_id == "reminder")
    assert reminder.visible_slice == DateTimeRange(at(9), at(9))


def test_min_tile_duration_is_configurable():
    events = [event("reminder", at(9), at(9)), event("call", at(9, 10), at(9, 20))]
    placements = layout(DAY, events, min_tile_duration=timedelta(minutes=5))
    assert columns(placements) == {"reminder": (0, 1), "call": (0, 1)}


def test_zero_duration_event_at_range_end_is_not_visible():
    assert layout(DAY, [event("midnight", DAY.end, DAY.end)]) == []


def test_malformed_events_are_dropped():
    class NotAnEvent:
        id = "broken"

    events = [
        event("inverted", at(11), at(10)),
        NotAnEvent(),
        event("outside", at(9, day=5), at(10, day=5)),
        event("ok", at(9), at(10)),
    ]

    assert columns(layout(DAY, events)) == {"ok": (0, 1)}


def test_empty_input():
    assert layout(DAY, []) == []


def test_layout_is_independent_of_input_order():
    rng = random.Random(7)
    events = []
    for i in range(40):
        start = at(rng.randrange(0, 22), rng.choice([0, 15, 30, 45]))
        events.append(event(f"e{i:02d}", start, start + timedelta(minutes=rng.choice([0, 15, 45, 90, 180]))))

    expected = layout(DAY, events)
    for _ in range(5):
        shuffled = list(events)
        rng.shuffle(shuffled)
        assert layout(DAY, shuffled) == expected


def test_tiles_in_one_column_never_overlap():
    rng = random.Random(11)
    events = []
    for i in range(60):
        start = at(rng.randrange(0, 23), rng.choice([0, 20, 40]))
        events.append(event(i, start, start + timedelta(minutes=rng.choice([10, 30, 60, 150]))))

    placements = layout(DAY, events)
    by_id = {e.id: e for e in events}

    assert len(placements) == len(events)
    for p in placements:
        assert 0 <= p.column < p.column_count
    for i, p in enumerate(placements):
        for q in placements[i + 1:]:
            if p.column == q.column:
                assert not by_id[p.event_id].date_time_range.intersects(by_id[q.event_id].date_time_range)


def test_layout_days_splits_events_crossing_midnight():
    days = layout_days(
        [date(2024, 1, 1), date(2024, 1, 2)],
        [event("late", at(22, day=1), at(2))],
    )

    first, second = days[date(2024, 1, 1)], days[date(2024, 1, 2)]
    assert first[0].visible_slice == DateTimeRange(at(22, day=1), at(0))
    assert first[0].continues_after and not first[0].continues_before
    assert second[0].visible_slice == DateTimeRange(at(0), at(2))
    assert second[0].continues_before and not second[0].continues_after


def test_week_row_snaps_bars_to_days():
    row = DateTimeRange(datetime(2021, 8, 2), datetime(2021, 8, 9))
    events = [
        event("trip", datetime(2021, 8, 2), datetime(2021, 8, 4)),
        event("lunch", datetime(2021, 8, 4, 12), datetime(2021, 8, 4, 13)),
        event("conference", datetime(2021, 8, 3, 9), datetime(2021, 8, 5, 17)),
    ]

    result = layout_week_row(row, events)

    assert len(result.dates) == 7
    assert columns(result.placements) == {
        "trip": (0, 2),
        "conference": (1, 2),
        "lunch": (0, 2),
    }


@pytest.mark.parametrize(("month_index", "rows"), [(1, 4), (2, 5), (7, 6)])
def test_month_layout_row_count_follows_month(month_index, rows):
    # 2021: February starts on Monday, August on Sunday
    page = range_for_index(Month(), datetime(2021, 1, 1), month_index)
    assert len(layout_month(page, [])) == rows


def test_month_layout_places_events_in_their_rows():
    page = range_for_index(Month(), datetime(2021, 1, 1), 7)
    spanning = event("spanning", datetime(2021, 8, 7, 10), datetime(2021, 8, 10, 10))

    rows = layout_month(page, [spanning])

    assert [len(r.placements) for r in rows] == [0, 1, 1, 0, 0, 0]
    first, second = rows[1].placements[0], rows[2].placements[0]
    assert first.continues_after and not first.continues_before
    assert second.continues_before and not second.continues_after
