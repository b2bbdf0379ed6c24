"""
In-memory event store.

Reference implementation of the external events store the layout engine
reads from. Events are indexed in an interval tree so that
events_intersecting() is exact at range boundaries.
"""

from typing import Any, Iterable, Optional

from PySide6.QtCore import QObject, Signal

from .date_range import CalendarEvent, DateTimeRange
from .diagnostics import debug_print
from .interval_tree import IntervalHandle, IntervalTree

_TAG = "EVENTS"


class EventsController(QObject):
    """
    Stores CalendarEvent objects by id.

    version increases with every change, so callers can memoize layouts by
    (visible range, version).
    """

    events_changed = Signal()

    def __init__(self, events: Optional[Iterable[CalendarEvent]] = None, parent=None):
        super().__init__(parent)
        self._tree: IntervalTree = IntervalTree()
        self._handles: dict[Any, IntervalHandle] = {}
        self._version = 0
        if events is not None:
            self.add_events(events)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, event_id: Any) -> bool:
        return event_id in self._handles

    def get(self, event_id: Any) -> Optional[CalendarEvent]:
        handle = self._handles.get(event_id)
        return handle.data if handle is not None else None

    @property
    def events(self) -> list[CalendarEvent]:
        """All events ordered by start."""
        return [handle.data for handle in self._tree]

    # ==================== Mutation ====================

    def _insert(self, event: CalendarEvent):
        if event.id in self._handles:
            self._remove(event.id)
        self._handles[event.id] = self._tree.insert(event.start, event.end, event)

    def _remove(self, event_id: Any) -> Optional[CalendarEvent]:
        handle = self._handles.pop(event_id, None)
        if handle is None:
            return None
        event = handle.data
        moved = self._tree.delete(handle)
        if moved is not None:
            # The tree moved another event into this handle
            self._handles[moved.data.id] = moved
        return event

    def _changed(self):
        self._version += 1
        self.events_changed.emit()

    def add_event(self, event: CalendarEvent):
        """Add event, replacing a stored event with the same id."""
        self._insert(event)
        self._changed()

    def add_events(self, events: Iterable[CalendarEvent]):
        count = 0
        for event in events:
            self._insert(event)
            count += 1
        debug_print(_TAG, f"added {count} events, {len(self)} stored")
        self._changed()

    def remove_event(self, event_id: Any) -> Optional[CalendarEvent]:
        event = self._remove(event_id)
        if event is not None:
            self._changed()
        return event

    def update_event(
        self,
        event_id: Any,
        date_time_range: Optional[DateTimeRange] = None,
        payload: Any = None,
    ) -> Optional[CalendarEvent]:
        """
        Move/resize an event or replace its payload.

        Returns the updated event, or None if event_id is unknown.
        """
        event = self._remove(event_id)
        if event is None:
            return None
        updated = CalendarEvent(
            id=event.id,
            date_time_range=date_time_range or event.date_time_range,
            payload=payload if payload is not None else event.payload,
        )
        self._insert(updated)
        self._changed()
        return updated

    def clear(self):
        self._tree.clear()
        self._handles.clear()
        self._changed()

    # ==================== Queries ====================

    def events_intersecting(self, date_time_range: DateTimeRange) -> list[CalendarEvent]:
        """Events overlapping the half-open range, ordered by start."""
        return [handle.data for handle in self._tree.find_intersecting(date_time_range.start, date_time_range.end)]
