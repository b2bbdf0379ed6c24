"""
Mapping between page indices and date-time ranges.

A page is one unit of calendar navigation: a day, a window of N days or a
calendar month. Index 0 is the page containing the (page-aligned) start of
the overall range. All arithmetic is done on local calendar dates and page
boundaries are local midnights, so a day page is 23 or 25 hours long across
a DST change and a month page is 28-31 days long.
"""

import calendar
from datetime import datetime, date, timedelta
from typing import Optional

from .date_range import DateTimeRange
from .timezone_utils import local_date, local_midnight, local_naive_to_aware, utc_to_local_naive


class RangeError(ValueError):
    """A page index or date lies outside the navigable range."""


# ==================== Granularities ====================

class PageGranularity:
    """Policy mapping page index <-> date-time range."""

    # Views with a vertical time axis support zoom and time scrolling
    has_time_axis: bool = True
    name: str = "page"

    def adjusted_start_date(self, start: date) -> date:
        """First date of the page containing start."""
        return start

    def page_start_date(self, origin: date, index: int) -> date:
        raise NotImplementedError

    def index_for_local_date(self, origin: date, d: date) -> int:
        raise NotImplementedError

    def visible_dates(self, page_range: DateTimeRange) -> list[date]:
        """Dates rendered for a page."""
        return page_range.dates()

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def __hash__(self):
        return hash((type(self), tuple(sorted(vars(self).items()))))

    def __repr__(self):
        return f"{type(self).__name__}()"


class SingleDay(PageGranularity):
    name = "day"

    def page_start_date(self, origin: date, index: int) -> date:
        return origin + timedelta(days=index)

    def index_for_local_date(self, origin: date, d: date) -> int:
        return (d - origin).days


class FixedDayWindow(PageGranularity):
    """
    A window of size days.

    With first_weekday set (0=Monday .. 6=Sunday) the overall start is moved
    back to that weekday so that pages line up with calendar weeks.
    """

    name = "days"

    def __init__(self, size: int, first_weekday: Optional[int] = None):
        if not 1 <= size <= 7:
            raise ValueError(f"window size must be 1..7, got {size}")
        if first_weekday is not None and not 0 <= first_weekday <= 6:
            raise ValueError(f"first_weekday must be 0..6, got {first_weekday}")
        self.size = size
        self.first_weekday = first_weekday

    def adjusted_start_date(self, start: date) -> date:
        if self.first_weekday is None:
            return start
        return start - timedelta(days=(start.weekday() - self.first_weekday) % 7)

    def page_start_date(self, origin: date, index: int) -> date:
        return origin + timedelta(days=index * self.size)

    def index_for_local_date(self, origin: date, d: date) -> int:
        return (d - origin).days // self.size

    def __repr__(self):
        return f"FixedDayWindow(size={self.size}, first_weekday={self.first_weekday})"


class WorkWeek(FixedDayWindow):
    """
    Week window that only shows Monday to Friday.

    Indexing still advances by whole weeks; weekends are dropped from
    visible_dates only.
    """

    name = "work-week"

    def __init__(self, first_weekday: int = 0):
        super().__init__(7, first_weekday)

    def visible_dates(self, page_range: DateTimeRange) -> list[date]:
        return [d for d in page_range.dates() if d.weekday() < 5]

    def __repr__(self):
        return f"WorkWeek(first_weekday={self.first_weekday})"


class Month(PageGranularity):
    """Calendar month pages; page length varies with the month."""

    has_time_axis = False
    name = "month"

    def adjusted_start_date(self, start: date) -> date:
        return start.replace(day=1)

    def page_start_date(self, origin: date, index: int) -> date:
        month_index = origin.month - 1 + index
        return date(origin.year + month_index // 12, month_index % 12 + 1, 1)

    def index_for_local_date(self, origin: date, d: date) -> int:
        return (d.year - origin.year) * 12 + (d.month - origin.month)


def week(first_weekday: int = 0) -> FixedDayWindow:
    return FixedDayWindow(7, first_weekday)


def three_day() -> FixedDayWindow:
    return FixedDayWindow(3)


# ==================== Pure index functions ====================

def adjusted_start(granularity: PageGranularity, overall_start: datetime) -> datetime:
    """Local midnight starting the page that contains overall_start."""
    return local_midnight(
        granularity.adjusted_start_date(local_date(overall_start)),
        overall_start.tzinfo is not None,
    )


def range_for_index(
    granularity: PageGranularity,
    overall_start: datetime,
    index: int,
    page_count: Optional[int] = None,
) -> DateTimeRange:
    """
    Date-time range shown by page index.

    Raises:
        RangeError: index is negative, or not below page_count when given.
    """
    if index < 0 or (page_count is not None and index >= page_count):
        raise RangeError(f"page {index} outside [0, {page_count})")
    aware = overall_start.tzinfo is not None
    origin = granularity.adjusted_start_date(local_date(overall_start))
    return DateTimeRange(
        local_midnight(granularity.page_start_date(origin, index), aware),
        local_midnight(granularity.page_start_date(origin, index + 1), aware),
    )


def index_for_date(
    granularity: PageGranularity,
    overall_start: datetime,
    moment: datetime,
) -> int:
    """
    Index of the page containing moment.

    Raises:
        RangeError: moment lies before the first page.
    """
    origin = granularity.adjusted_start_date(local_date(overall_start))
    index = granularity.index_for_local_date(origin, local_date(moment))
    if index < 0:
        raise RangeError(f"{moment.isoformat()} is before the first page ({origin.isoformat()})")
    return index


def number_of_pages(granularity: PageGranularity, overall_range: DateTimeRange) -> int:
    return index_for_date(granularity, overall_range.start, overall_range.end) + 1


def default_overall_range(today: datetime, span_days: int) -> DateTimeRange:
    """Range used when a view is created without one: today +/- span_days."""
    aware = today.tzinfo is not None
    today_date = local_date(today)
    return DateTimeRange(
        local_midnight(today_date - timedelta(days=span_days), aware),
        local_midnight(today_date + timedelta(days=span_days), aware),
    )


# ==================== Month grid ====================

def month_grid_weeks(year: int, month: int, first_weekday: int = 0) -> int:
    """Number of week rows (4-6) needed to show the month."""
    offset = (date(year, month, 1).weekday() - first_weekday) % 7
    days = calendar.monthrange(year, month)[1]
    return -(-(offset + days) // 7)


def month_grid_rows(page_range: DateTimeRange, first_weekday: int = 0) -> list[DateTimeRange]:
    """
    Week rows of a month page.

    The first row starts on first_weekday on or before the 1st; rows may
    include days of the neighbouring months.
    """
    aware = page_range.start.tzinfo is not None
    first = local_date(page_range.start)
    grid_start = first - timedelta(days=(first.weekday() - first_weekday) % 7)
    rows = []
    for row in range(month_grid_weeks(first.year, first.month, first_weekday)):
        row_start = grid_start + timedelta(days=row * 7)
        rows.append(DateTimeRange(
            local_midnight(row_start, aware),
            local_midnight(row_start + timedelta(days=7), aware),
        ))
    return rows


# ==================== Bound indexer ====================

class PageIndexer:
    """
    The index functions bound to one granularity and overall range.

    The navigable dates are [adjusted start, overall_range.end]; the page
    containing overall_range.end is the last page.
    """

    def __init__(self, granularity: PageGranularity, overall_range: DateTimeRange):
        if overall_range.start > overall_range.end:
            raise ValueError(f"overall range start after end: {overall_range}")
        self.granularity = granularity
        self.overall_range = overall_range
        self.start = adjusted_start(granularity, overall_range.start)
        self.page_count = number_of_pages(granularity, overall_range)

    def range_for_index(self, index: int) -> DateTimeRange:
        return range_for_index(self.granularity, self.start, index, self.page_count)

    def _normalise(self, moment: datetime) -> datetime:
        # Match the awareness of the overall range
        if self.start.tzinfo is None:
            return utc_to_local_naive(moment)
        return local_naive_to_aware(moment)

    def contains(self, moment: datetime) -> bool:
        moment = self._normalise(moment)
        return self.start <= moment <= self.overall_range.end

    def index_for_date(self, moment: datetime) -> int:
        """
        Raises:
            RangeError: moment is outside the navigable range.
        """
        moment = self._normalise(moment)
        if not self.contains(moment):
            raise RangeError(
                f"{moment.isoformat()} outside [{self.start.isoformat()}, {self.overall_range.end.isoformat()}]"
            )
        return index_for_date(self.granularity, self.start, moment)

    def is_valid_index(self, index: int) -> bool:
        return 0 <= index < self.page_count
