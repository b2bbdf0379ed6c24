"""
ViewController - the application-facing navigation API of a calendar view.

The controller is created detached. attach() binds it to the
NavigationState of a live view; every operation checks the link first and
reports a precondition failure (strict mode: raises, otherwise no-op) when
there is no view. Operations never leave the state half-updated.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from PySide6.QtCore import QObject, Signal

from .date_range import CalendarEvent
from .date_range_indexer import RangeError
from .diagnostics import debug_print, report_precondition
from .navigation_state import NavigationState, ObservableValue, Notify
from .scrollers import Curve, ScrollPhysics
from .timezone_utils import local_date

_TAG = "CTRL"


@dataclass(frozen=True)
class Detached:
    """No view is attached."""


@dataclass(frozen=True)
class Attached:
    """Bound to the navigation state of a live view."""
    state: NavigationState


ControllerLink = Union[Detached, Attached]


class EventNavigationPhase(Enum):
    IDLE = "idle"
    ANIMATING_PAGE = "animating_page"
    ANIMATING_OFFSET = "animating_offset"
    DONE = "done"
    CANCELLED = "cancelled"


class EventNavigation:
    """
    Two-stage animation to an event.

    Stage 1 animates the pager to the page holding the event's start.
    Stage 2, only for views with a time axis, animates the time scroller to
    the event's start time at the current zoom; it starts after stage 1
    has settled. Being superseded in either stage ends in CANCELLED.
    """

    def __init__(
        self,
        state: NavigationState,
        event: CalendarEvent,
        page_index: int,
        duration_ms: int,
        curve: Curve,
        notify: Optional[Notify] = None,
    ):
        self.state = state
        self.event = event
        self.page_index = page_index
        self.duration_ms = duration_ms
        self.curve = curve
        self._notify = notify
        self.phase = EventNavigationPhase.IDLE

    @property
    def is_active(self) -> bool:
        return self.phase in (EventNavigationPhase.ANIMATING_PAGE, EventNavigationPhase.ANIMATING_OFFSET)

    def start(self) -> 'EventNavigation':
        if self.phase is not EventNavigationPhase.IDLE:
            return self
        self.phase = EventNavigationPhase.ANIMATING_PAGE
        ticket = self.state.set_page_index_animated(
            self.page_index, self.duration_ms, self.curve, self._on_page_settled
        )
        if ticket is None:
            self._finish(EventNavigationPhase.CANCELLED)
        return self

    def _on_page_settled(self, completed: bool):
        if self.phase is not EventNavigationPhase.ANIMATING_PAGE:
            return
        if not completed:
            self._finish(EventNavigationPhase.CANCELLED)
            return
        if not self.state.granularity.has_time_axis:
            self._finish(EventNavigationPhase.DONE)
            return
        self.phase = EventNavigationPhase.ANIMATING_OFFSET
        offset = self.state.time_offset_for(self.event.start)
        debug_print(_TAG, f"event {self.event.id}: scrolling to offset {offset:.1f}")
        ticket = self.state.animate_time_offset(offset, self.duration_ms, self.curve, self._on_offset_settled)
        if ticket is None:
            self._finish(EventNavigationPhase.CANCELLED)

    def _on_offset_settled(self, completed: bool):
        if self.phase is not EventNavigationPhase.ANIMATING_OFFSET:
            return
        self._finish(EventNavigationPhase.DONE if completed else EventNavigationPhase.CANCELLED)

    def cancel(self):
        """Stop the running stage; no-op once finished."""
        phase = self.phase
        if not self.is_active:
            return
        self._finish(EventNavigationPhase.CANCELLED)
        if phase is EventNavigationPhase.ANIMATING_PAGE:
            self.state.cancel_page_animation()
        else:
            self.state.cancel_offset_animation()

    def _finish(self, phase: EventNavigationPhase):
        self.phase = phase
        debug_print(_TAG, f"event {self.event.id}: navigation {phase.value}")
        if self._notify is not None:
            self._notify(phase is EventNavigationPhase.DONE)


class ViewController(QObject):
    """
    Controls one calendar view.

    * Jump or animate to a page, a date or an event.
    * Change the height per minute (zoom) of time-axis views.
    * Lock or unlock vertical scrolling.
    """

    # Emitted after every successful operation
    changed = Signal()
    selected_date_changed = Signal(object)

    def __init__(
        self,
        initial_date: Optional[datetime] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._initial_date = initial_date or datetime.now()
        self._selected_date = self._initial_date
        self._link: ControllerLink = Detached()
        self._event_navigation: Optional[EventNavigation] = None

    # ==================== Lifecycle ====================

    def attach(self, state: NavigationState):
        """
        Bind to the navigation state of a view, replacing any previous one.

        The view is moved to the page of selected_date when that date is in
        its navigable range.
        """
        self._cancel_event_navigation()
        self._link = Attached(state)
        debug_print(_TAG, f"attached to {state.granularity!r}")
        if state.indexer.contains(self._selected_date):
            state.set_page_index(state.indexer.index_for_date(self._selected_date))

    def detach(self):
        self._cancel_event_navigation()
        self._link = Detached()
        debug_print(_TAG, "detached")

    @property
    def link(self) -> ControllerLink:
        return self._link

    @property
    def is_attached(self) -> bool:
        return isinstance(self._link, Attached)

    @property
    def state(self) -> Optional[NavigationState]:
        return self._link.state if isinstance(self._link, Attached) else None

    def _require_state(self, operation: str) -> Optional[NavigationState]:
        if isinstance(self._link, Attached):
            return self._link.state
        report_precondition(_TAG, f"{operation}: controller is not attached to a view")
        return None

    # ==================== Observables ====================

    @property
    def initial_date(self) -> datetime:
        return self._initial_date

    @property
    def selected_date(self) -> datetime:
        return self._selected_date

    @selected_date.setter
    def selected_date(self, value: datetime):
        self._selected_date = value
        self.selected_date_changed.emit(value)
        self.changed.emit()

    @property
    def visible_date_time_range(self) -> Optional[ObservableValue]:
        state = self.state
        return state.visible_date_time_range if state is not None else None

    @property
    def height_per_minute(self) -> Optional[ObservableValue]:
        """Zoom of the attached view; None while detached or for month views."""
        state = self.state
        return state.height_per_minute if state is not None else None

    @property
    def visible_month(self) -> Optional[date]:
        """First day of the month of the first visible date."""
        state = self.state
        if state is None:
            return None
        return local_date(state.visible_range.start).replace(day=1)

    @property
    def visible_year(self) -> Optional[date]:
        state = self.state
        if state is None:
            return None
        return local_date(state.visible_range.start).replace(month=1, day=1)

    # ==================== Navigation ====================

    def _cancel_event_navigation(self):
        navigation, self._event_navigation = self._event_navigation, None
        if navigation is not None:
            navigation.cancel()

    def _wrap_notify(self, notify: Optional[Notify]) -> Notify:
        def _settled(completed: bool):
            if completed:
                self.changed.emit()
            if notify is not None:
                notify(completed)
        return _settled

    def _index_for_date(self, state: NavigationState, moment: datetime) -> Optional[int]:
        try:
            return state.indexer.index_for_date(moment)
        except RangeError as e:
            report_precondition(_TAG, f"date must be within the calendar range: {e}")
            return None

    def jump_to_page(self, page: int) -> bool:
        """Jump to page; it must be within [0, page_count - 1]."""
        state = self._require_state("jump_to_page")
        if state is None:
            return False
        self._cancel_event_navigation()
        if not state.set_page_index(page):
            return False
        self.changed.emit()
        return True

    def jump_to_date(self, moment: datetime) -> bool:
        """Jump to the page containing moment; fails without mutation outside the range."""
        state = self._require_state("jump_to_date")
        if state is None:
            return False
        index = self._index_for_date(state, moment)
        if index is None:
            return False
        return self.jump_to_page(index)

    def animate_to_page(
        self,
        page: int,
        duration_ms: Optional[int] = None,
        curve: Optional[Curve] = None,
        notify: Optional[Notify] = None,
    ) -> Optional[str]:
        """
        Animate to page.

        Returns the animation ticket, or None if the call failed. notify is
        called with True once the pager settles, or with False if a later
        navigation supersedes this one.
        """
        state = self._require_state("animate_to_page")
        if state is None:
            return None
        self._cancel_event_navigation()
        return state.set_page_index_animated(page, duration_ms, curve, self._wrap_notify(notify))

    def animate_to_date(
        self,
        moment: datetime,
        duration_ms: Optional[int] = None,
        curve: Optional[Curve] = None,
        notify: Optional[Notify] = None,
    ) -> Optional[str]:
        state = self._require_state("animate_to_date")
        if state is None:
            return None
        index = self._index_for_date(state, moment)
        if index is None:
            return None
        return self.animate_to_page(index, duration_ms, curve, notify)

    def animate_to_next_page(
        self,
        duration_ms: Optional[int] = None,
        curve: Optional[Curve] = None,
        notify: Optional[Notify] = None,
    ) -> Optional[str]:
        state = self._require_state("animate_to_next_page")
        if state is None:
            return None
        return self.animate_to_page(state.page_index + 1, duration_ms, curve, notify)

    def animate_to_previous_page(
        self,
        duration_ms: Optional[int] = None,
        curve: Optional[Curve] = None,
        notify: Optional[Notify] = None,
    ) -> Optional[str]:
        state = self._require_state("animate_to_previous_page")
        if state is None:
            return None
        return self.animate_to_page(state.page_index - 1, duration_ms, curve, notify)

    def animate_to_event(
        self,
        event: CalendarEvent,
        duration_ms: Optional[int] = None,
        curve: Optional[Curve] = None,
        notify: Optional[Notify] = None,
    ) -> Optional[EventNavigation]:
        """
        Animate to the page of the event, then (time-axis views only) to its start time.

        Returns the running EventNavigation, or None if the call failed.
        """
        state = self._require_state("animate_to_event")
        if state is None:
            return None
        index = self._index_for_date(state, event.start)
        if index is None:
            return None
        self._cancel_event_navigation()
        navigation = EventNavigation(
            state,
            event,
            index,
            state.config.animation_duration_ms if duration_ms is None else duration_ms,
            curve or state.config.animation_curve,
            self._wrap_notify(notify),
        )
        self._event_navigation = navigation
        return navigation.start()

    # ==================== Zoom & scrolling ====================

    def adjust_zoom(self, height_per_minute: float) -> bool:
        """
        Change the height per minute of the view.

        Only available for day and multi-day views; the value must be > 0.
        """
        state = self._require_state("adjust_zoom")
        if state is None:
            return False
        if not state.set_zoom(height_per_minute):
            return False
        self.changed.emit()
        return True

    def lock_scroll(self) -> bool:
        """Lock the vertical scroll of the view."""
        state = self._require_state("lock_scroll")
        if state is None:
            return False
        state.set_scroll_lock(True)
        self.changed.emit()
        return True

    def unlock_scroll(self, physics: Optional[ScrollPhysics] = None) -> bool:
        """Unlock the vertical scroll; physics replaces the default if given."""
        state = self._require_state("unlock_scroll")
        if state is None:
            return False
        state.set_scroll_lock(False, physics)
        self.changed.emit()
        return True
