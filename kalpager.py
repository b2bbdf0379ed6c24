#!/usr/bin/env python3
"""
kalpager - preview the paging and tile layout of a calendar view.

Prints the page containing a date and, given an ICS file, the column layout
of its events on that page.
"""

import sys
import argparse
import tomllib
from datetime import datetime, timedelta
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from paging.config import Config, ConfigError
from paging.date_range import DateTimeRange
from paging.date_range_indexer import SingleDay, FixedDayWindow, WorkWeek, Month, PageGranularity, month_grid_rows
from paging.diagnostics import set_debug, set_strict, debug_print
from paging.event_layout import TilePlacement, layout_days, layout_month
from paging.events_controller import EventsController
from paging.ics_import import events_from_ical
from paging.navigation_state import NavigationState
from paging.timezone_utils import set_timezone
from paging.view_controller import ViewController

VIEWS = ["day", "week", "work-week", "three-day", "month"]


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="kalpager - page and lay out calendar events the way a calendar view shows them"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    parser.add_argument(
        "--view",
        choices=VIEWS,
        default="week",
        help="Page granularity (default: week)"
    )
    parser.add_argument(
        "--date",
        type=lambda s: datetime.strptime(s, "%Y-%m-%d"),
        help="Date whose page is shown, YYYY-MM-DD (default: today)"
    )
    parser.add_argument(
        "--ics",
        type=Path,
        help="iCalendar file with the events to lay out"
    )
    return parser.parse_args(argv)


def load_config(path) -> Config:
    """Explicit paths must exist; a missing default file means built-in defaults."""
    if path is None and not Config.get_default_config_path().exists():
        return Config()
    return Config.load(path)


def make_granularity(view: str, first_weekday: int) -> PageGranularity:
    if view == "day":
        return SingleDay()
    if view == "three-day":
        return FixedDayWindow(3)
    if view == "work-week":
        return WorkWeek(first_weekday)
    if view == "month":
        return Month()
    return FixedDayWindow(7, first_weekday)


def _summary(event) -> str:
    payload = event.payload
    if payload is not None and payload.get('SUMMARY') is not None:
        return str(payload.get('SUMMARY'))
    return str(event.id)


def _format_tile(placement: TilePlacement, summary: str, fmt: str) -> str:
    visible = placement.visible_slice
    marks = ("<" if placement.continues_before else " ") + (">" if placement.continues_after else " ")
    return (
        f"    [{placement.column + 1}/{placement.column_count}] {marks} "
        f"{visible.start.strftime(fmt)} - {visible.end.strftime(fmt)}  {summary}"
    )


def print_page(state: NavigationState, config: Config, ics_path=None):
    granularity = state.granularity
    page_range = state.visible_range
    print(f"{granularity.name} page {state.page_index + 1}/{state.page_count}: {page_range}")
    if ics_path is None:
        return

    if granularity.has_time_axis:
        shown = page_range
    else:
        rows = month_grid_rows(page_range, config.navigation.first_weekday)
        shown = DateTimeRange(rows[0].start, rows[-1].end)

    store = EventsController(events_from_ical(ics_path.read_text(), shown.start, shown.end))
    events = store.events_intersecting(shown)
    summaries = {event.id: _summary(event) for event in events}
    debug_print("CLI", f"{len(events)} of {len(store)} events visible")

    if granularity.has_time_axis:
        min_tile = timedelta(minutes=config.layout.min_event_minutes)
        days = layout_days(granularity.visible_dates(page_range), events, min_tile_duration=min_tile)
        for day, placements in days.items():
            print(f"  {day.strftime('%a %Y-%m-%d')}")
            for placement in placements:
                print(_format_tile(placement, summaries[placement.event_id], "%H:%M"))
    else:
        for row in layout_month(page_range, events, config.navigation.first_weekday):
            print(f"  week of {row.dates[0].strftime('%Y-%m-%d')}")
            for placement in row.placements:
                print(_format_tile(placement, summaries[placement.event_id], "%a %d %H:%M"))


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    app.setApplicationName("kalpager")
    app.setApplicationVersion("0.1")

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print(f"\nThe default location is {Config.get_default_config_path()}")
        print("\nExample configuration:")
        print("""
[General]
timezone = "Europe/Amsterdam"

[Navigation]
animation_duration_ms = 300
first_weekday = 0
""")
        sys.exit(1)
    except (ConfigError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration: {e}")
        sys.exit(1)

    set_debug(args.debug or config.general.debug)
    set_strict(config.general.strict)
    set_timezone(config.general.timezone)

    moment = args.date or datetime.now()
    controller = ViewController(initial_date=moment)
    state = NavigationState(
        make_granularity(args.view, config.navigation.first_weekday),
        config=config.navigation,
        today=moment,
    )
    controller.attach(state)

    try:
        print_page(state, config, args.ics)
    except OSError as e:
        print(f"Error reading {args.ics}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
