"""Filter and position activities inside a view window - no I/O dependencies."""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from .activities import Activity
from .errors import InvalidTimestamp
from .task_types import Overrides, resolve_task_type
from .windows import (
    DEFAULT_CORE_DURATION_MINUTES,
    ActivityWindow,
    minutes_since,
    parse_instant,
    utc_midnight,
    window_for,
)

logger = logging.getLogger(__name__)

MIN_WINDOW_MINUTES = 30
MAX_WINDOW_MINUTES = 48 * 60
AXIS_NAME_LENGTH = 25


@dataclass(frozen=True)
class ViewWindow:
    """Minutes relative to 00:00 UTC of a reference date. May exceed 1440."""

    start_minute: float
    end_minute: float

    def __post_init__(self):
        if self.end_minute <= self.start_minute:
            raise ValueError(
                f"View window end ({self.end_minute}) must be after start ({self.start_minute})"
            )

    def duration_minutes(self) -> float:
        return self.end_minute - self.start_minute

    def overlaps(self, start: float, end: float) -> bool:
        """Half-open overlap: touching at a boundary is not overlapping."""
        return start < self.end_minute and end > self.start_minute

    def contains(self, minute: float) -> bool:
        return self.start_minute <= minute <= self.end_minute


FULL_DAY = ViewWindow(0, 24 * 60)


@dataclass(frozen=True)
class ChartEntry:
    """An activity placed on the time axis of a view window.

    start_minute/end_minute are the full window relative to the reference
    midnight. display_start/display_end are clipped to the view window.
    """

    activity: Activity
    window: ActivityWindow
    label: str
    start_minute: float
    end_minute: float
    display_start: float
    display_end: float

    @property
    def is_clipped(self) -> bool:
        return self.display_start != self.start_minute or self.display_end != self.end_minute

    @property
    def axis_label(self) -> str:
        name = self.label
        if len(name) > AXIS_NAME_LENGTH:
            name = name[:AXIS_NAME_LENGTH] + "..."
        return f"{name} ({self.activity.resource})"


def filter_activities(
    activities: list[Activity],
    window: ViewWindow,
    reference_date: date | datetime | str,
    overrides: Overrides | None = None,
    core_duration_minutes: int = DEFAULT_CORE_DURATION_MINUTES,
) -> list[ChartEntry]:
    """
    Select activities overlapping the window, clipped to it, sorted by start.

    Activities with an invalid core instant are skipped.
    Pure function - no I/O.
    """
    midnight = utc_midnight(reference_date)
    entries = []

    for activity in activities:
        try:
            activity_window = window_for(activity, core_duration_minutes)
        except InvalidTimestamp as e:
            logger.warning(f"Skipping activity {activity.id}: {e}")
            continue

        start = minutes_since(midnight, activity_window.window_start)
        end = minutes_since(midnight, activity_window.window_end)
        if not window.overlaps(start, end):
            continue

        display_start = max(window.start_minute, start)
        display_end = min(window.end_minute, end)
        if display_start >= display_end:
            continue

        entries.append(
            ChartEntry(
                activity=activity,
                window=activity_window,
                label=activity.display_name(resolve_task_type(activity.task_type, overrides)),
                start_minute=start,
                end_minute=end,
                display_start=display_start,
                display_end=display_end,
            )
        )

    # sorted() is stable, so ties keep input order
    return sorted(entries, key=lambda e: e.start_minute)


def adjust_view_window(previous: ViewWindow, start: float, end: float) -> ViewWindow:
    """
    Apply a requested window change, keeping it within 0-48h and at least 30 minutes wide.

    When the request is too narrow, the edge that did not move is pushed.
    """
    start = max(0, round(start))
    end = min(MAX_WINDOW_MINUTES, round(end))

    if end - start < MIN_WINDOW_MINUTES:
        if end != previous.end_minute:
            start = max(0, end - MIN_WINDOW_MINUTES)
        else:
            end = min(MAX_WINDOW_MINUTES, start + MIN_WINDOW_MINUTES)
        # Still too narrow at a bound
        if end - start < MIN_WINDOW_MINUTES:
            if start == 0:
                end = MIN_WINDOW_MINUTES
            else:
                start = MAX_WINDOW_MINUTES - MIN_WINDOW_MINUTES

    return ViewWindow(start, end)


def now_marker(
    reference_date: date | datetime | str,
    window: ViewWindow,
    now: datetime | str,
) -> float | None:
    """Minute of `now` relative to the reference midnight, if inside the window."""
    minute = minutes_since(utc_midnight(reference_date), parse_instant(now))
    return minute if window.contains(minute) else None
