"""
Value types shared by the paging core: DateTimeRange and CalendarEvent.
"""

from dataclasses import dataclass, field
from datetime import datetime, date, timedelta
from typing import Any, Generic, Optional, TypeVar

from .timezone_utils import local_date, local_midnight


T = TypeVar('T')


@dataclass(frozen=True)
class DateTimeRange:
    """
    Half-open interval [start, end).

    Construction does not validate start <= end: ranges coming from an
    external event store may be inconsistent and are filtered by the code
    that consumes them. Use is_valid to check.
    """
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_valid(self) -> bool:
        return self.start <= self.end

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def intersects(self, other: 'DateTimeRange') -> bool:
        """
        Half-open overlap test.

        A zero-length range at instant t intersects other iff t lies in other.
        """
        if self.is_empty:
            return other.contains(self.start)
        if other.is_empty:
            return self.contains(other.start)
        return self.start < other.end and other.start < self.end

    def clip(self, other: 'DateTimeRange') -> Optional['DateTimeRange']:
        """Part of self inside other, or None if they do not intersect."""
        if not self.intersects(other):
            return None
        return DateTimeRange(max(self.start, other.start), min(self.end, other.end))

    def dates(self) -> list[date]:
        """Local calendar dates touched by the range (end exclusive)."""
        first = local_date(self.start)
        last = local_date(self.end)
        if self.end > self.start and self.end == local_midnight(last, self.end.tzinfo is not None):
            last = last - timedelta(days=1)
        if last < first:
            last = first
        return [first + timedelta(days=i) for i in range((last - first).days + 1)]

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"


@dataclass
class CalendarEvent(Generic[T]):
    """
    An event owned by an external store.

    The paging core only reads it; payload is opaque application data.
    """
    id: Any
    date_time_range: DateTimeRange
    payload: Optional[T] = field(default=None, compare=False)

    @property
    def start(self) -> datetime:
        return self.date_time_range.start

    @property
    def end(self) -> datetime:
        return self.date_time_range.end
