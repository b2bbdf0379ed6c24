"""
kalpager paging core

This package provides the UI-agnostic core of a paged calendar view:
- Page index <-> date-time range mapping (date_range_indexer.py)
- Navigation state with observable values (navigation_state.py)
- Application-facing view controller (view_controller.py)
- Event layout engine (event_layout.py)
- In-memory event store and iCalendar import (events_controller.py, ics_import.py)
- Configuration parsing (config.py)
"""

from .config import Config, ConfigError, NavigationConfig, LayoutConfig
from .date_range import DateTimeRange, CalendarEvent
from .date_range_indexer import (
    RangeError, PageGranularity, SingleDay, FixedDayWindow, WorkWeek, Month,
    PageIndexer, range_for_index, index_for_date, number_of_pages,
)
from .diagnostics import PreconditionError
from .scrollers import Curve, ScrollPhysics, PageScroller, TimeScroller
from .navigation_state import NavigationState, NavigationSnapshot, ObservableValue
from .view_controller import ViewController, EventNavigation, EventNavigationPhase
from .event_layout import TilePlacement, WeekRowLayout, layout, layout_days, layout_month
from .events_controller import EventsController
from .ics_import import events_from_ical

__all__ = [
    'Config',
    'ConfigError',
    'NavigationConfig',
    'LayoutConfig',
    'DateTimeRange',
    'CalendarEvent',
    'RangeError',
    'PageGranularity',
    'SingleDay',
    'FixedDayWindow',
    'WorkWeek',
    'Month',
    'PageIndexer',
    'range_for_index',
    'index_for_date',
    'number_of_pages',
    'PreconditionError',
    'Curve',
    'ScrollPhysics',
    'PageScroller',
    'TimeScroller',
    'NavigationState',
    'NavigationSnapshot',
    'ObservableValue',
    'ViewController',
    'EventNavigation',
    'EventNavigationPhase',
    'TilePlacement',
    'WeekRowLayout',
    'layout',
    'layout_days',
    'layout_month',
    'EventsController',
    'events_from_ical',
]
