"""
Navigation state of one calendar view.

NavigationState is the single source of truth for the current page, the
zoom (height per minute) and the scroll lock of an attached view. It owns
the page-scroller and time-scroller handles and publishes every atomic
transition once, after all fields have been updated.
"""

import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, Signal

from .config import NavigationConfig
from .date_range import DateTimeRange
from .date_range_indexer import PageGranularity, PageIndexer, default_overall_range
from .diagnostics import debug_print, report_precondition
from .scrollers import Curve, PageScroller, TimeScroller, ScrollPhysics, DEFAULT_SCROLL_PHYSICS
from .timezone_utils import minutes_since_midnight

_TAG = "NAV"

Notify = Callable[[bool], None]


class ObservableValue(QObject):
    """
    A value that notifies listeners when it changes.

    Only the owner writes it; listeners connect to `changed`.
    """

    changed = Signal(object)

    def __init__(self, value: Any, parent=None):
        super().__init__(parent)
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    def _store(self, value: Any) -> bool:
        """Store without notifying; returns True if the value changed."""
        if value == self._value:
            return False
        self._value = value
        return True


@dataclass(frozen=True)
class NavigationSnapshot:
    """Consistent view of a NavigationState at one point in time."""
    page_index: int
    visible_range: DateTimeRange
    zoom: Optional[float]
    scroll_locked: bool
    scroll_physics: Optional[ScrollPhysics]


@dataclass
class _PendingAnimation:
    ticket: str
    target: Any
    notify: Optional[Notify]


class NavigationState(QObject):
    """
    Mutable navigation state of one view.

    visible_range is recomputed and stored on every index change, so readers
    always get a consistent snapshot without touching the indexer.
    """

    # Emitted once per atomic transition with a NavigationSnapshot
    state_changed = Signal(object)

    def __init__(
        self,
        granularity: PageGranularity,
        overall_range: Optional[DateTimeRange] = None,
        initial_date: Optional[datetime] = None,
        config: Optional[NavigationConfig] = None,
        page_scroller: Optional[PageScroller] = None,
        time_scroller: Optional[TimeScroller] = None,
        today: Optional[datetime] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._config = config or NavigationConfig()
        today = today or datetime.now()
        if overall_range is None:
            overall_range = default_overall_range(today, self._config.fallback_range_span_days)

        # Raises ValueError for start > end
        self.indexer = PageIndexer(granularity, overall_range)

        index = 0
        for candidate in (initial_date, today):
            if candidate is not None and self.indexer.contains(candidate):
                index = self.indexer.index_for_date(candidate)
                break

        self._page_index = index
        self._visible_range = self.indexer.range_for_index(index)
        self._scroll_locked = False

        self.visible_date_time_range = ObservableValue(self._visible_range, self)
        self.height_per_minute: Optional[ObservableValue] = None
        if granularity.has_time_axis:
            self.height_per_minute = ObservableValue(self._config.height_per_minute, self)
        self.scroll_physics = ObservableValue(DEFAULT_SCROLL_PHYSICS, self)

        self._page_scroller: Optional[PageScroller] = None
        self._time_scroller: Optional[TimeScroller] = None
        self._page_animation: Optional[_PendingAnimation] = None
        self._offset_animation: Optional[_PendingAnimation] = None

        self.set_scrollers(page_scroller, time_scroller)
        debug_print(_TAG, f"created {granularity!r}: {self.indexer.page_count} pages, page {index} = {self._visible_range}")

    # ==================== Read access ====================

    @property
    def config(self) -> NavigationConfig:
        return self._config

    @property
    def granularity(self) -> PageGranularity:
        return self.indexer.granularity

    @property
    def overall_range(self) -> DateTimeRange:
        return self.indexer.overall_range

    @property
    def page_count(self) -> int:
        return self.indexer.page_count

    @property
    def page_index(self) -> int:
        return self._page_index

    @property
    def visible_range(self) -> DateTimeRange:
        return self._visible_range

    @property
    def zoom(self) -> Optional[float]:
        return self.height_per_minute.value if self.height_per_minute is not None else None

    @property
    def scroll_locked(self) -> bool:
        return self._scroll_locked

    @property
    def page_scroller(self) -> Optional[PageScroller]:
        return self._page_scroller

    @property
    def time_scroller(self) -> Optional[TimeScroller]:
        return self._time_scroller

    def snapshot(self) -> NavigationSnapshot:
        return NavigationSnapshot(
            page_index=self._page_index,
            visible_range=self._visible_range,
            zoom=self.zoom,
            scroll_locked=self._scroll_locked,
            scroll_physics=self.scroll_physics.value,
        )

    def set_scrollers(
        self,
        page_scroller: Optional[PageScroller] = None,
        time_scroller: Optional[TimeScroller] = None,
    ):
        """Hand the scroller handles of the rendered view to this state."""
        if page_scroller is not None:
            self._page_scroller = page_scroller
            page_scroller.jump_to_page(self._page_index)
        if time_scroller is not None and self.granularity.has_time_axis:
            self._time_scroller = time_scroller
            time_scroller.set_scroll_enabled(not self._scroll_locked, self.scroll_physics.value)

    # ==================== Publishing ====================

    def _publish(self, changed: list[ObservableValue]):
        """Notify listeners after all fields of a transition have been stored."""
        snapshot = self.snapshot()
        for observable in changed:
            observable.changed.emit(observable.value)
        self.state_changed.emit(snapshot)

    def _apply_page_index(self, index: int):
        if index == self._page_index:
            return
        self._page_index = index
        self._visible_range = self.indexer.range_for_index(index)
        self.visible_date_time_range._store(self._visible_range)
        debug_print(_TAG, f"page {index} = {self._visible_range}")
        self._publish([self.visible_date_time_range])

    def _check_index(self, index: int) -> bool:
        if not self.indexer.is_valid_index(index):
            report_precondition(_TAG, f"page {index} outside [0, {self.page_count - 1}]")
            return False
        return True

    # ==================== Page navigation ====================

    def _supersede(self, pending: Optional[_PendingAnimation]):
        if pending is not None:
            debug_print(_TAG, f"animation {pending.ticket[:8]} superseded")
            if pending.notify is not None:
                pending.notify(False)

    def set_page_index(self, index: int) -> bool:
        """Jump to page index; returns False (state unchanged) if it is out of range."""
        if not self._check_index(index):
            return False
        pending, self._page_animation = self._page_animation, None
        self._supersede(pending)
        if self._page_scroller is not None:
            self._page_scroller.jump_to_page(index)
        self._apply_page_index(index)
        return True

    def set_page_index_animated(
        self,
        index: int,
        duration_ms: Optional[int] = None,
        curve: Optional[Curve] = None,
        notify: Optional[Notify] = None,
    ) -> Optional[str]:
        """
        Animate the page scroller to index, then update the state.

        The last call wins: a running page animation is superseded and its
        notify receives False. Returns a ticket, or None if index is out of
        range.
        """
        if not self._check_index(index):
            return None
        duration_ms = self._config.animation_duration_ms if duration_ms is None else duration_ms
        curve = curve or self._config.animation_curve

        ticket = str(uuid.uuid4())
        pending, self._page_animation = self._page_animation, _PendingAnimation(ticket, index, notify)
        self._supersede(pending)

        if self._page_scroller is None:
            self._on_page_animation_finished(ticket)
        else:
            self._page_scroller.animate_to_page(
                index, duration_ms, curve,
                lambda: self._on_page_animation_finished(ticket),
            )
        return ticket

    def _on_page_animation_finished(self, ticket: str):
        pending = self._page_animation
        # Superseded animations are ignored
        if pending is None or pending.ticket != ticket:
            return
        self._page_animation = None
        self._apply_page_index(pending.target)
        if pending.notify is not None:
            pending.notify(True)

    def on_external_page_changed(self, index: int) -> bool:
        """Called by the page scroller after the user moved it."""
        if not self._check_index(index):
            return False
        pending, self._page_animation = self._page_animation, None
        self._supersede(pending)
        self._apply_page_index(index)
        return True

    def is_animating(self) -> bool:
        return self._page_animation is not None or self._offset_animation is not None

    def cancel_page_animation(self):
        """Stop the pager; a pending notify receives False."""
        pending, self._page_animation = self._page_animation, None
        if pending is not None and self._page_scroller is not None:
            self._page_scroller.stop()
        self._supersede(pending)

    def cancel_offset_animation(self):
        pending, self._offset_animation = self._offset_animation, None
        if pending is not None and self._time_scroller is not None:
            self._time_scroller.stop()
        self._supersede(pending)

    def cancel_animations(self):
        self.cancel_page_animation()
        self.cancel_offset_animation()

    # ==================== Time axis ====================

    def time_offset_for(self, moment: datetime) -> float:
        """Vertical offset of moment's wall-clock time at the current zoom."""
        return minutes_since_midnight(moment) * (self.zoom or 0.0)

    def _check_time_axis(self, operation: str) -> bool:
        if self.height_per_minute is None:
            report_precondition(_TAG, f"{operation} needs a time axis, {self.granularity!r} has none")
            return False
        return True

    def animate_time_offset(
        self,
        offset: float,
        duration_ms: Optional[int] = None,
        curve: Optional[Curve] = None,
        notify: Optional[Notify] = None,
    ) -> Optional[str]:
        """Animate the time scroller to offset; same last-call-wins rules as pages."""
        if not self._check_time_axis("animate_time_offset"):
            return None
        duration_ms = self._config.animation_duration_ms if duration_ms is None else duration_ms
        curve = curve or self._config.animation_curve

        ticket = str(uuid.uuid4())
        pending, self._offset_animation = self._offset_animation, _PendingAnimation(ticket, offset, notify)
        self._supersede(pending)

        if self._time_scroller is None:
            self._on_offset_animation_finished(ticket)
        else:
            self._time_scroller.animate_to_offset(
                offset, duration_ms, curve,
                lambda: self._on_offset_animation_finished(ticket),
            )
        return ticket

    def _on_offset_animation_finished(self, ticket: str):
        pending = self._offset_animation
        if pending is None or pending.ticket != ticket:
            return
        self._offset_animation = None
        if pending.notify is not None:
            pending.notify(True)

    def jump_time_offset(self, offset: float) -> bool:
        if not self._check_time_axis("jump_time_offset"):
            return False
        pending, self._offset_animation = self._offset_animation, None
        self._supersede(pending)
        if self._time_scroller is not None:
            self._time_scroller.jump_to_offset(offset)
        return True

    def set_zoom(self, value: float) -> bool:
        """Set the height per minute; value must be a finite number > 0."""
        if not self._check_time_axis("set_zoom"):
            return False
        if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
            report_precondition(_TAG, f"zoom must be greater than 0, got {value!r}")
            return False
        if self.height_per_minute._store(float(value)):
            self._publish([self.height_per_minute])
        return True

    def set_scroll_lock(self, locked: bool, physics: Optional[ScrollPhysics] = None) -> bool:
        """
        Lock or unlock vertical scrolling.

        Unlocking uses physics if given, the default physics otherwise.
        """
        lock_changed = locked != self._scroll_locked
        self._scroll_locked = locked
        changed = []
        new_physics = None if locked else (physics or DEFAULT_SCROLL_PHYSICS)
        if self.scroll_physics._store(new_physics):
            changed.append(self.scroll_physics)
        if self._time_scroller is not None:
            self._time_scroller.set_scroll_enabled(not locked, new_physics)
        if lock_changed or changed:
            self._publish(changed)
        return True
