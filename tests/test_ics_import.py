from __future__ import annotations

from datetime import datetime

import pytz

from paging.date_range import DateTimeRange
from paging.ics_import import events_from_ical

CALENDAR = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//kalpager//tests//EN
BEGIN:VEVENT
UID:standup-1
DTSTAMP:20240101T000000Z
DTSTART:20240102T080000Z
DTEND:20240102T083000Z
SUMMARY:Standup
END:VEVENT
BEGIN:VEVENT
UID:holiday-1
DTSTAMP:20240101T000000Z
DTSTART;VALUE=DATE:20240103
DTEND;VALUE=DATE:20240104
SUMMARY:Holiday
END:VEVENT
BEGIN:VEVENT
UID:review-1
DTSTAMP:20240101T000000Z
DTSTART:20240101T140000
DURATION:PT1H
RRULE:FREQ=WEEKLY;COUNT=3
SUMMARY:Review
END:VEVENT
END:VCALENDAR
"""

WINDOW = (datetime(2024, 1, 1), datetime(2024, 2, 1))


def by_id(events) -> dict:
    return {e.id: e for e in events}


def test_single_event_is_converted_to_local_time():
    events = by_id(events_from_ical(CALENDAR, *WINDOW))

    standup = events["standup-1"]
    assert standup.date_time_range == DateTimeRange(datetime(2024, 1, 2, 9, 0), datetime(2024, 1, 2, 9, 30))
    assert str(standup.payload.get("SUMMARY")) == "Standup"


def test_all_day_event_spans_local_midnights():
    holiday = by_id(events_from_ical(CALENDAR, *WINDOW))["holiday-1"]
    assert holiday.date_time_range == DateTimeRange(datetime(2024, 1, 3), datetime(2024, 1, 4))


def test_recurring_event_expands_to_occurrences_with_unique_ids():
    events = [e for e in events_from_ical(CALENDAR, *WINDOW) if e.id.startswith("review-1")]

    assert sorted(e.start for e in events) == [
        datetime(2024, 1, 1, 14, 0),
        datetime(2024, 1, 8, 14, 0),
        datetime(2024, 1, 15, 14, 0),
    ]
    assert "review-1@2024-01-08T14:00:00" in {e.id for e in events}
    assert all(e.end - e.start == datetime(2024, 1, 1, 15) - datetime(2024, 1, 1, 14) for e in events)


def test_window_limits_expansion():
    events = events_from_ical(CALENDAR, datetime(2024, 1, 5), datetime(2024, 1, 10))
    assert [e.id for e in events] == ["review-1@2024-01-08T14:00:00"]


def test_aware_mode_localizes_times():
    events = by_id(events_from_ical(CALENDAR, *WINDOW, aware=True))

    amsterdam = pytz.timezone("Europe/Amsterdam")
    standup = events["standup-1"]
    assert standup.start == amsterdam.localize(datetime(2024, 1, 2, 9, 0))
    assert standup.start.tzinfo is not None
    assert events["holiday-1"].start == amsterdam.localize(datetime(2024, 1, 3))
