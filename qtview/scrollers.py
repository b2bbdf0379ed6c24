"""
PySide6 scrollers for the paging core.

QtPageScroller animates a float page position; a pager widget renders the
pages around it. ScrollBarTimeScroller drives the vertical scroll bar of a
time grid (e.g. QScrollArea.verticalScrollBar()).
"""

from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal, Property, QPropertyAnimation, QEasingCurve
from PySide6.QtWidgets import QScrollBar

from paging.diagnostics import debug_print
from paging.navigation_state import NavigationState
from paging.scrollers import Curve, PageScroller, TimeScroller, ScrollPhysics

_TAG = "QT"

_EASING = {
    Curve.LINEAR: QEasingCurve.Type.Linear,
    Curve.EASE: QEasingCurve.Type.InOutQuad,
    Curve.EASE_IN: QEasingCurve.Type.InQuad,
    Curve.EASE_OUT: QEasingCurve.Type.OutQuad,
    Curve.EASE_IN_OUT: QEasingCurve.Type.InOutCubic,
}


def easing_curve(curve: Curve) -> QEasingCurve:
    return QEasingCurve(_EASING[curve])


class _Animator:
    """Runs at most one QPropertyAnimation; a replaced one never completes."""

    def __init__(self, target: QObject, property_name: bytes):
        self._target = target
        self._property_name = property_name
        self._animation: Optional[QPropertyAnimation] = None

    @property
    def is_running(self) -> bool:
        return self._animation is not None

    def start(self, start_value, end_value, duration_ms: int, curve: Curve, on_finished: Callable[[], None]):
        self.stop()
        animation = QPropertyAnimation(self._target, self._property_name, self._target)
        animation.setStartValue(start_value)
        animation.setEndValue(end_value)
        animation.setDuration(duration_ms)
        animation.setEasingCurve(easing_curve(curve))
        animation.finished.connect(lambda: self._on_finished(animation, on_finished))
        self._animation = animation
        animation.start()

    def _on_finished(self, animation: QPropertyAnimation, on_finished: Callable[[], None]):
        if animation is not self._animation:
            return
        self._animation = None
        animation.deleteLater()
        on_finished()

    def stop(self):
        animation, self._animation = self._animation, None
        if animation is not None:
            animation.stop()
            animation.deleteLater()


class PagePosition(QObject):
    """Float page position of a pager; 2.5 is halfway between pages 2 and 3."""

    position_changed = Signal(float)
    # Emitted when the user settled the pager on a page
    page_changed = Signal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._position = 0.0

    def _get_position(self) -> float:
        return self._position

    def _set_position(self, value: float):
        value = float(value)
        if value == self._position:
            return
        self._position = value
        self.position_changed.emit(value)

    position = Property(float, _get_position, _set_position, notify=position_changed)


class QtPageScroller(PageScroller):
    """PageScroller animating a PagePosition with QPropertyAnimation."""

    def __init__(self, parent: Optional[QObject] = None):
        self.model = PagePosition(parent)
        self._animator = _Animator(self.model, b"position")

    @property
    def page_changed(self):
        return self.model.page_changed

    @property
    def position(self) -> float:
        return self.model.position

    @property
    def current_page(self) -> int:
        return round(self.model.position)

    @property
    def is_animating(self) -> bool:
        return self._animator.is_running

    def jump_to_page(self, index: int) -> None:
        self._animator.stop()
        self.model.position = float(index)

    def animate_to_page(self, index: int, duration_ms: int, curve: Curve, on_finished: Callable[[], None]) -> None:
        if duration_ms <= 0:
            self.jump_to_page(index)
            on_finished()
            return
        debug_print(_TAG, f"pager {self.model.position:.2f} -> {index} in {duration_ms}ms")
        self._animator.start(self.model.position, float(index), duration_ms, curve, on_finished)

    def stop(self) -> None:
        self._animator.stop()

    def settle_at(self, index: int):
        """Called by the pager widget when a user swipe settles on index."""
        self._animator.stop()
        self.model.position = float(index)
        self.model.page_changed.emit(index)

    def bind(self, state: NavigationState):
        """Hand this scroller to state and report user page changes to it."""
        state.set_scrollers(page_scroller=self)
        self.page_changed.connect(state.on_external_page_changed)


class ScrollBarTimeScroller(TimeScroller):
    """TimeScroller over a QScrollBar; offsets are scroll bar values."""

    def __init__(self, scroll_bar: QScrollBar):
        self.scroll_bar = scroll_bar
        self._animator = _Animator(scroll_bar, b"value")

    @property
    def offset(self) -> int:
        return self.scroll_bar.value()

    @property
    def is_animating(self) -> bool:
        return self._animator.is_running

    @property
    def scroll_enabled(self) -> bool:
        return self.scroll_bar.isEnabled()

    def jump_to_offset(self, offset: float) -> None:
        self._animator.stop()
        self.scroll_bar.setValue(round(offset))

    def animate_to_offset(self, offset: float, duration_ms: int, curve: Curve, on_finished: Callable[[], None]) -> None:
        if duration_ms <= 0:
            self.jump_to_offset(offset)
            on_finished()
            return
        self._animator.start(self.scroll_bar.value(), round(offset), duration_ms, curve, on_finished)

    def stop(self) -> None:
        self._animator.stop()

    def set_scroll_enabled(self, enabled: bool, physics: Optional[ScrollPhysics] = None) -> None:
        # A disabled scroll bar ignores the wheel but still accepts setValue()
        self.scroll_bar.setEnabled(enabled)
        if physics is not None:
            self.scroll_bar.setSingleStep(physics.single_step)
            if physics.page_step is not None:
                self.scroll_bar.setPageStep(physics.page_step)
