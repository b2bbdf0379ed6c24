from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from paging import diagnostics, timezone_utils
from paging.scrollers import Curve, PageScroller, ScrollPhysics, TimeScroller


class FakePageScroller(PageScroller):
    """Records calls; animations complete only when a test calls finish()."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.finishers: list[Callable[[], None]] = []

    def jump_to_page(self, index: int) -> None:
        self.calls.append(("jump", index))

    def animate_to_page(self, index: int, duration_ms: int, curve: Curve, on_finished: Callable[[], None]) -> None:
        self.calls.append(("animate", index, duration_ms, curve))
        self.finishers.append(on_finished)

    def stop(self) -> None:
        self.calls.append(("stop",))

    def finish(self, position: int = -1) -> None:
        self.finishers[position]()


class FakeTimeScroller(TimeScroller):
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.finishers: list[Callable[[], None]] = []
        self.enabled: bool | None = None
        self.physics: ScrollPhysics | None = None

    def jump_to_offset(self, offset: float) -> None:
        self.calls.append(("jump", offset))

    def animate_to_offset(self, offset: float, duration_ms: int, curve: Curve, on_finished: Callable[[], None]) -> None:
        self.calls.append(("animate", offset, duration_ms, curve))
        self.finishers.append(on_finished)

    def stop(self) -> None:
        self.calls.append(("stop",))

    def set_scroll_enabled(self, enabled: bool, physics: ScrollPhysics | None = None) -> None:
        self.enabled = enabled
        self.physics = physics

    def finish(self, position: int = -1) -> None:
        self.finishers[position]()


@pytest.fixture(autouse=True)
def reset_diagnostics():
    diagnostics.set_debug(False)
    diagnostics.set_strict(False)
    timezone_utils.set_timezone("Europe/Amsterdam")
    yield
    diagnostics.set_debug(False)
    diagnostics.set_strict(False)
    timezone_utils.set_timezone("Europe/Amsterdam")


@pytest.fixture
def strict():
    diagnostics.set_strict(True)


@pytest.fixture
def page_scroller() -> FakePageScroller:
    return FakePageScroller()


@pytest.fixture
def time_scroller() -> FakeTimeScroller:
    return FakeTimeScroller()


@pytest.fixture
def today() -> datetime:
    return datetime(2024, 3, 13, 10, 0)


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])
