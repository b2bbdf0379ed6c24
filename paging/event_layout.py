"""
Event layout engine.

Arranges possibly-overlapping events into non-overlapping columns for a
visible range. Layout is a pure function of (visible range, events): it is
recomputed from scratch on every call and never raises for malformed events,
which are dropped instead since they come from an external store.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from .date_range import CalendarEvent, DateTimeRange
from .date_range_indexer import month_grid_rows
from .diagnostics import debug_print
from .timezone_utils import local_date, local_midnight

_TAG = "LAYOUT"

# Occupancy given to zero-duration events in time grids
DEFAULT_MIN_TILE_DURATION = timedelta(minutes=30)


@dataclass(frozen=True)
class TilePlacement:
    """Position of one event within a rendered range."""
    event_id: Any
    visible_slice: DateTimeRange  # Event clipped to the visible range
    column: int                   # 0-based column within its overlap cluster
    column_count: int             # Columns used by that cluster
    continues_before: bool        # Event starts before the visible range
    continues_after: bool         # Event ends after the visible range


@dataclass(frozen=True)
class WeekRowLayout:
    """All-day-bar layout of one week row of a month page."""
    row_range: DateTimeRange
    dates: list[date]
    placements: list[TilePlacement]


@dataclass
class _Candidate:
    event: CalendarEvent
    visible_slice: DateTimeRange
    # Interval used for overlap tests; differs from visible_slice for
    # zero-duration events and for day-snapped bars
    occupied_start: Any
    occupied_end: Any


def _tie_break_key(event_id: Any):
    return (type(event_id).__name__, event_id)


def _clip(event: Any, visible_range: DateTimeRange) -> Optional[DateTimeRange]:
    """Visible slice of event, or None if it is malformed or outside the range."""
    try:
        event_id = event.id
        event_range = event.date_time_range
        if event_range.start > event_range.end:
            debug_print(_TAG, f"dropping event {event_id}: start after end ({event_range})")
            return None
        return event_range.clip(visible_range)
    except (AttributeError, TypeError) as e:
        debug_print(_TAG, f"dropping malformed event {getattr(event, 'id', event)!r}: {e}")
        return None


def _sort_candidates(candidates: list[_Candidate]) -> list[_Candidate]:
    try:
        return sorted(candidates, key=lambda c: (c.occupied_start, c.visible_slice.start, _tie_break_key(c.event.id)))
    except TypeError:
        # Ids of one type that cannot be ordered
        return sorted(candidates, key=lambda c: (c.occupied_start, c.visible_slice.start, repr(c.event.id)))


def _assign_columns(candidates: list[_Candidate], visible_range: DateTimeRange) -> list[TilePlacement]:
    """
    Greedy interval colouring.

    Each candidate takes the lowest column whose occupant ended at or before
    its start, or opens a new one. A cluster ends when the next candidate
    starts at or after the end of everything in it; each cluster gets its
    own column_count.
    """
    placements: list[TilePlacement] = []
    cluster: list[tuple[_Candidate, int]] = []
    columns: list[Any] = []  # end of the occupant of each column
    cluster_end = None

    def _close_cluster():
        for candidate, column in cluster:
            event_range = candidate.event.date_time_range
            placements.append(TilePlacement(
                event_id=candidate.event.id,
                visible_slice=candidate.visible_slice,
                column=column,
                column_count=len(columns),
                continues_before=event_range.start < visible_range.start,
                continues_after=event_range.end > visible_range.end,
            ))

    for candidate in _sort_candidates(candidates):
        if cluster and candidate.occupied_start >= cluster_end:
            _close_cluster()
            cluster = []
            columns = []
            cluster_end = None

        for index, column_end in enumerate(columns):
            if column_end <= candidate.occupied_start:
                columns[index] = candidate.occupied_end
                break
        else:
            index = len(columns)
            columns.append(candidate.occupied_end)

        cluster.append((candidate, index))
        if cluster_end is None or candidate.occupied_end > cluster_end:
            cluster_end = candidate.occupied_end

    if cluster:
        _close_cluster()
    return placements


def layout(
    visible_range: DateTimeRange,
    events: Iterable[CalendarEvent],
    min_tile_duration: timedelta = DEFAULT_MIN_TILE_DURATION,
) -> list[TilePlacement]:
    """
    Place events on a time axis covering visible_range.

    Returns placements sorted by (slice start, event id). Zero-duration
    events keep their empty visible slice but occupy min_tile_duration for
    overlap purposes, so they still claim a column.
    """
    candidates = []
    for event in events:
        visible_slice = _clip(event, visible_range)
        if visible_slice is None:
            continue
        occupied_end = visible_slice.end
        if visible_slice.is_empty:
            occupied_end = visible_slice.start + max(min_tile_duration, timedelta(microseconds=1))
        candidates.append(_Candidate(event, visible_slice, visible_slice.start, occupied_end))
    return _assign_columns(candidates, visible_range)


def layout_days(
    dates: Iterable[date],
    events: Iterable[CalendarEvent],
    aware: bool = False,
    min_tile_duration: timedelta = DEFAULT_MIN_TILE_DURATION,
) -> dict[date, list[TilePlacement]]:
    """
    Per-day time-axis layout for day and multi-day grids.

    Every date is laid out independently, so an event crossing midnight
    appears on each day it touches with the matching continuation flags.
    """
    events = list(events)
    result = {}
    for d in dates:
        day_range = DateTimeRange(local_midnight(d, aware), local_midnight(d + timedelta(days=1), aware))
        result[d] = layout(day_range, events, min_tile_duration)
    return result


def _day_index(moment: datetime, row_start: date) -> int:
    return (local_date(moment) - row_start).days


def layout_week_row(row_range: DateTimeRange, events: Iterable[CalendarEvent]) -> WeekRowLayout:
    """
    All-day-bar layout for one week row.

    Bars are snapped to whole day cells: an event occupies every day it
    touches. column is the bar's lane within the row.
    """
    row_start = local_date(row_range.start)
    candidates = []
    for event in events:
        visible_slice = _clip(event, row_range)
        if visible_slice is None:
            continue
        first_day = _day_index(visible_slice.start, row_start)
        last_day = first_day
        if not visible_slice.is_empty:
            last_day = _day_index(visible_slice.end, row_start)
            # An end at midnight does not touch that day
            if visible_slice.end == local_midnight(row_start + timedelta(days=last_day), visible_slice.end.tzinfo is not None):
                last_day -= 1
            last_day = max(first_day, last_day)
        candidates.append(_Candidate(event, visible_slice, first_day, last_day + 1))
    return WeekRowLayout(
        row_range=row_range,
        dates=row_range.dates(),
        placements=_assign_columns(candidates, row_range),
    )


def layout_month(
    page_range: DateTimeRange,
    events: Iterable[CalendarEvent],
    first_weekday: int = 0,
) -> list[WeekRowLayout]:
    """Layout every week row of a month page; the row count follows the month."""
    events = list(events)
    return [layout_week_row(row, events) for row in month_grid_rows(page_range, first_weekday)]
