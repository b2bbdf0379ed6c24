"""
Contracts of the external page-scroller and time-scroller.

The paging core never animates anything itself. It drives these interfaces;
qtview provides PySide6 implementations and tests use recording fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class Curve(Enum):
    """Easing curves understood by scroller implementations."""
    LINEAR = "linear"
    EASE = "ease"
    EASE_IN = "ease_in"
    EASE_OUT = "ease_out"
    EASE_IN_OUT = "ease_in_out"


@dataclass(frozen=True)
class ScrollPhysics:
    """Scroll behaviour of the time axis when it is not locked."""
    single_step: int = 20
    page_step: Optional[int] = None


DEFAULT_SCROLL_PHYSICS = ScrollPhysics()


class PageScroller(ABC):
    """Horizontal pager showing one page at a time."""

    @abstractmethod
    def jump_to_page(self, index: int) -> None:
        """Move to index without animation."""

    @abstractmethod
    def animate_to_page(
        self,
        index: int,
        duration_ms: int,
        curve: Curve,
        on_finished: Callable[[], None],
    ) -> None:
        """
        Animate to index and call on_finished once settled.

        Starting another animation or jump replaces the running one; a
        replaced animation never calls its on_finished.
        """

    @abstractmethod
    def stop(self) -> None:
        """Stop the running animation, if any, without calling on_finished."""


class TimeScroller(ABC):
    """Vertical scroller of a time-axis view; offsets are in pixels."""

    @abstractmethod
    def jump_to_offset(self, offset: float) -> None:
        pass

    @abstractmethod
    def animate_to_offset(
        self,
        offset: float,
        duration_ms: int,
        curve: Curve,
        on_finished: Callable[[], None],
    ) -> None:
        """Same replacement rules as PageScroller.animate_to_page."""

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def set_scroll_enabled(self, enabled: bool, physics: Optional[ScrollPhysics] = None) -> None:
        """Lock (enabled=False) or unlock user scrolling, optionally with new physics."""
