from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
import pytz

from paging.config import NavigationConfig
from paging.date_range import CalendarEvent, DateTimeRange
from paging.date_range_indexer import Month, SingleDay, week
from paging.diagnostics import PreconditionError
from paging.navigation_state import NavigationState
from paging.scrollers import Curve, ScrollPhysics
from paging.view_controller import Attached, Detached, EventNavigationPhase, ViewController

OVERALL = DateTimeRange(datetime(2024, 1, 1), datetime(2024, 12, 31))


def make_state(granularity=None, page_scroller=None, time_scroller=None) -> NavigationState:
    return NavigationState(
        granularity or week(),
        overall_range=OVERALL,
        today=datetime(2024, 1, 1),
        page_scroller=page_scroller,
        time_scroller=time_scroller,
    )


def make_event(event_id="meeting", start=datetime(2024, 3, 14, 9, 30), hours=1) -> CalendarEvent:
    return CalendarEvent(event_id, DateTimeRange(start, start + timedelta(hours=hours)))


@pytest.fixture
def controller() -> ViewController:
    return ViewController(initial_date=datetime(2024, 1, 1))


def test_detached_operations_are_no_ops(controller):
    assert isinstance(controller.link, Detached)
    assert not controller.jump_to_page(1)
    assert not controller.jump_to_date(datetime(2024, 2, 1))
    assert controller.animate_to_page(1) is None
    assert controller.animate_to_date(datetime(2024, 2, 1)) is None
    assert controller.animate_to_next_page() is None
    assert controller.animate_to_event(make_event()) is None
    assert not controller.adjust_zoom(2.0)
    assert not controller.lock_scroll()
    assert not controller.unlock_scroll()
    assert controller.visible_date_time_range is None
    assert controller.height_per_minute is None
    assert controller.visible_month is None
    assert controller.visible_year is None


@pytest.mark.parametrize(
    "operation",
    [
        lambda c: c.jump_to_page(1),
        lambda c: c.animate_to_date(datetime(2024, 2, 1)),
        lambda c: c.adjust_zoom(2.0),
        lambda c: c.lock_scroll(),
    ],
)
def test_detached_operations_raise_in_strict_mode(controller, strict, operation):
    with pytest.raises(PreconditionError):
        operation(controller)


def test_attach_moves_to_selected_date(page_scroller):
    controller = ViewController(initial_date=datetime(2024, 3, 14))
    state = make_state(page_scroller=page_scroller)

    controller.attach(state)

    assert isinstance(controller.link, Attached)
    assert controller.state is state
    assert state.visible_range.start == datetime(2024, 3, 11)
    assert page_scroller.calls[-1] == ("jump", 10)


def test_detach_clears_the_link(controller):
    controller.attach(make_state())
    controller.detach()
    assert not controller.is_attached
    assert controller.visible_date_time_range is None


def test_jump_to_date_moves_to_containing_page(controller):
    state = make_state()
    controller.attach(state)
    changes = []
    controller.changed.connect(lambda: changes.append(True))

    assert controller.jump_to_date(datetime(2024, 2, 15, 18, 0))

    assert controller.visible_date_time_range.value == DateTimeRange(datetime(2024, 2, 12), datetime(2024, 2, 19))
    assert controller.visible_month == date(2024, 2, 1)
    assert controller.visible_year == date(2024, 1, 1)
    assert changes == [True]


def test_jump_to_date_outside_range_changes_nothing(controller):
    state = make_state()
    controller.attach(state)
    before = state.snapshot()
    snapshots = []
    state.state_changed.connect(snapshots.append)

    assert not controller.jump_to_date(OVERALL.end + timedelta(days=1))
    assert not controller.jump_to_date(datetime(2023, 12, 31))

    assert state.snapshot() == before
    assert snapshots == []


def test_jump_to_date_outside_range_raises_in_strict_mode(controller, strict):
    controller.attach(make_state())
    with pytest.raises(PreconditionError):
        controller.jump_to_date(OVERALL.end + timedelta(days=1))


def test_animate_to_date_superseded_by_second_call(controller, page_scroller):
    state = make_state(page_scroller=page_scroller)
    controller.attach(state)
    first, second = [], []

    controller.animate_to_date(datetime(2024, 2, 1), notify=first.append)
    controller.animate_to_date(datetime(2024, 3, 1), notify=second.append)
    page_scroller.finish()

    assert first == [False]
    assert second == [True]
    assert state.visible_range.start == datetime(2024, 2, 26)


def test_next_and_previous_page(controller):
    state = make_state()
    controller.attach(state)

    assert controller.animate_to_previous_page() is None
    assert controller.animate_to_next_page() is not None
    assert state.page_index == 1
    assert controller.animate_to_previous_page() is not None
    assert state.page_index == 0

    controller.jump_to_page(state.page_count - 1)
    assert controller.animate_to_next_page() is None


def test_animate_to_event_scrolls_after_page_settles(controller, page_scroller, time_scroller):
    state = make_state(page_scroller=page_scroller, time_scroller=time_scroller)
    controller.attach(state)
    controller.adjust_zoom(2.0)
    results = []

    navigation = controller.animate_to_event(make_event(), notify=results.append)

    assert navigation.phase is EventNavigationPhase.ANIMATING_PAGE
    assert page_scroller.calls[-1][:2] == ("animate", 10)
    assert time_scroller.calls == []

    page_scroller.finish()

    assert state.page_index == 10
    assert navigation.phase is EventNavigationPhase.ANIMATING_OFFSET
    assert time_scroller.calls[-1][:2] == ("animate", 570 * 2.0)

    time_scroller.finish()

    assert navigation.phase is EventNavigationPhase.DONE
    assert results == [True]


def test_animate_to_event_in_month_view_has_one_stage(controller, page_scroller, time_scroller):
    state = make_state(Month(), page_scroller=page_scroller, time_scroller=time_scroller)
    controller.attach(state)
    results = []

    navigation = controller.animate_to_event(make_event(), notify=results.append)
    page_scroller.finish()

    assert navigation.phase is EventNavigationPhase.DONE
    assert results == [True]
    assert state.visible_range.start == datetime(2024, 3, 1)
    assert time_scroller.calls == []


def test_new_event_navigation_cancels_previous(controller, page_scroller, time_scroller):
    state = make_state(SingleDay(), page_scroller=page_scroller, time_scroller=time_scroller)
    controller.attach(state)
    first_results, second_results = [], []

    first = controller.animate_to_event(make_event("a"), notify=first_results.append)
    second = controller.animate_to_event(make_event("b", datetime(2024, 5, 1, 8, 0)), notify=second_results.append)

    assert first.phase is EventNavigationPhase.CANCELLED
    assert first_results == [False]

    page_scroller.finish(0)
    assert second.phase is EventNavigationPhase.ANIMATING_PAGE

    page_scroller.finish(1)
    time_scroller.finish()
    assert second.phase is EventNavigationPhase.DONE
    assert second_results == [True]
    assert state.visible_range.start == datetime(2024, 5, 1)


def test_page_navigation_cancels_event_navigation_in_scroll_stage(controller, page_scroller, time_scroller):
    state = make_state(page_scroller=page_scroller, time_scroller=time_scroller)
    controller.attach(state)

    navigation = controller.animate_to_event(make_event())
    page_scroller.finish()
    assert navigation.phase is EventNavigationPhase.ANIMATING_OFFSET

    controller.jump_to_page(2)

    assert navigation.phase is EventNavigationPhase.CANCELLED
    assert time_scroller.calls[-1] == ("stop",)


def test_swipe_cancels_event_navigation_in_page_stage(controller, page_scroller, time_scroller):
    state = make_state(page_scroller=page_scroller, time_scroller=time_scroller)
    controller.attach(state)
    results = []

    navigation = controller.animate_to_event(make_event(), notify=results.append)
    state.on_external_page_changed(5)

    assert navigation.phase is EventNavigationPhase.CANCELLED
    assert results == [False]
    assert state.page_index == 5

    page_scroller.finish()
    assert state.page_index == 5
    assert time_scroller.calls == []


def test_animate_to_event_uses_state_animation_defaults(controller, page_scroller):
    state = NavigationState(
        week(),
        overall_range=OVERALL,
        today=datetime(2024, 1, 1),
        page_scroller=page_scroller,
        config=NavigationConfig(animation_duration_ms=120, animation_curve=Curve.LINEAR),
    )
    controller.attach(state)

    controller.animate_to_event(make_event())

    assert page_scroller.calls[-1] == ("animate", 10, 120, Curve.LINEAR)


def test_jump_to_naive_date_in_aware_range(controller):
    amsterdam = pytz.timezone("Europe/Amsterdam")
    state = NavigationState(
        week(),
        overall_range=DateTimeRange(amsterdam.localize(datetime(2024, 1, 1)), amsterdam.localize(datetime(2024, 12, 31))),
        today=datetime(2024, 1, 1),
    )
    controller.attach(state)

    assert controller.jump_to_date(datetime(2024, 2, 15, 18, 0))
    assert state.visible_range.start == amsterdam.localize(datetime(2024, 2, 12))
    assert controller.jump_to_date(pytz.utc.localize(datetime(2024, 3, 14, 9, 0)))
    assert state.page_index == 10


def test_animate_to_event_outside_range_fails(controller):
    controller.attach(make_state())
    assert controller.animate_to_event(make_event(start=datetime(2025, 6, 1))) is None


def test_zoom_only_for_time_axis_views(controller):
    controller.attach(make_state(Month()))
    assert not controller.adjust_zoom(2.0)
    assert controller.height_per_minute is None

    controller.attach(make_state())
    assert controller.adjust_zoom(1.5)
    assert controller.height_per_minute.value == 1.5
    assert not controller.adjust_zoom(0)


def test_lock_and_unlock_scroll(controller, time_scroller):
    state = make_state(time_scroller=time_scroller)
    controller.attach(state)
    physics = ScrollPhysics(single_step=10)

    assert controller.lock_scroll()
    assert state.scroll_locked
    assert time_scroller.enabled is False

    assert controller.unlock_scroll(physics)
    assert not state.scroll_locked
    assert time_scroller.physics == physics


def test_selected_date_is_observable(controller):
    seen = []
    controller.selected_date_changed.connect(seen.append)

    controller.selected_date = datetime(2024, 6, 1)

    assert controller.selected_date == datetime(2024, 6, 1)
    assert controller.initial_date == datetime(2024, 1, 1)
    assert seen == [datetime(2024, 6, 1)]
