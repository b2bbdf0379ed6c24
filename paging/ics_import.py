"""
Import of iCalendar data as CalendarEvent objects.

Recurring events are expanded with recurring_ical_events for the requested
window; each occurrence becomes its own CalendarEvent with the VEVENT as
payload.
"""

from datetime import datetime, date, timedelta
from typing import Union

from icalendar import Calendar as ICalCalendar, Event as ICalEvent
from recurring_ical_events import of as recurring_events_of

from .date_range import CalendarEvent, DateTimeRange
from .diagnostics import debug_print
from .timezone_utils import local_midnight, local_naive_to_aware, utc_to_local_naive

_TAG = "ICS"


def _to_datetime(value: Union[date, datetime], aware: bool) -> datetime:
    """Normalise an iCalendar DATE or DATE-TIME to the view's datetime flavour."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return local_midnight(value, aware)
    if aware:
        return local_naive_to_aware(value)
    return utc_to_local_naive(value)


def _recurring_uids(calendar: ICalCalendar) -> set[str]:
    """UIDs of source events that expand to more than one occurrence."""
    return {
        str(component.get('UID', ''))
        for component in calendar.walk('VEVENT')
        if any(key in component for key in ('RRULE', 'RDATE', 'RECURRENCE-ID'))
    }


def _event_range(component: ICalEvent, aware: bool) -> DateTimeRange:
    raw_start = component.get('DTSTART').dt
    start = _to_datetime(raw_start, aware)

    dtend = component.get('DTEND')
    duration = component.get('DURATION')
    if dtend is not None:
        end = _to_datetime(dtend.dt, aware)
    elif duration is not None:
        end = start + duration.dt
    elif isinstance(raw_start, date) and not isinstance(raw_start, datetime):
        # All-day event without end lasts one day
        end = local_midnight(raw_start + timedelta(days=1), aware)
    else:
        end = start
    return DateTimeRange(start, end)


def events_from_ical(
    ical_text: str,
    start: Union[date, datetime],
    end: Union[date, datetime],
    aware: bool = False,
) -> list[CalendarEvent]:
    """
    Parse VCALENDAR text into events occurring in [start, end).

    Args:
        ical_text: Raw iCalendar text.
        start, end: Expansion window for recurring events.
        aware: Produce timezone-aware datetimes in the local timezone; by
            default naive local wall-clock datetimes are produced.

    Returns:
        Events ordered as expanded; ids are the UID, suffixed with the
        occurrence start for recurring events.
    """
    calendar = ICalCalendar.from_ical(ical_text)
    recurring = _recurring_uids(calendar)
    events: list[CalendarEvent] = []
    seen: set[str] = set()

    for component in recurring_events_of(calendar).between(start, end):
        uid = str(component.get('UID', ''))
        if component.get('DTSTART') is None:
            debug_print(_TAG, f"skipping event {uid!r} without DTSTART")
            continue

        event_range = _event_range(component, aware)
        event_id = uid
        if uid in recurring or not uid or uid in seen:
            event_id = f"{uid}@{event_range.start.isoformat()}"
        seen.add(event_id)

        events.append(CalendarEvent(id=event_id, date_time_range=event_range, payload=component))

    debug_print(_TAG, f"imported {len(events)} events between {start} and {end}")
    return events
