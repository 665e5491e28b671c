"""Activity time window arithmetic - pure UTC math, no I/O."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from .errors import InvalidTimestamp

DEFAULT_CORE_DURATION_MINUTES = 1


@dataclass(frozen=True)
class ActivityWindow:
    """Absolute window of one activity: pre-action, core, post-action."""

    window_start: datetime
    core_start: datetime
    core_end: datetime
    window_end: datetime

    def total_minutes(self) -> float:
        return (self.window_end - self.window_start).total_seconds() / 60


def parse_instant(value: str | datetime) -> datetime:
    """
    Parse an ISO-8601 instant into an aware UTC datetime.

    Naive values are taken to be UTC already. Raises InvalidTimestamp.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        # Bare dates parse, but they are not instants
        if "T" not in text and " " not in text:
            raise InvalidTimestamp(value)
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidTimestamp(value) from None
    else:
        raise InvalidTimestamp(value)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    # Rebuild from UTC calendar fields so no foreign tzinfo leaks through
    return datetime(
        dt.year, dt.month, dt.day,
        dt.hour, dt.minute, dt.second, dt.microsecond,
        tzinfo=timezone.utc,
    )


def format_instant(dt: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision, e.g. 2024-01-01T09:00:00.000Z."""
    dt = parse_instant(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"


def compute_window(
    core_instant: str | datetime,
    pre_action_duration: int,
    post_action_duration: int,
    core_duration_minutes: int = DEFAULT_CORE_DURATION_MINUTES,
) -> ActivityWindow:
    """
    Compute the absolute window around a core instant.

    Pure function - no I/O. Raises InvalidTimestamp if the instant cannot
    be parsed, ValueError for negative durations.
    """
    if pre_action_duration < 0 or post_action_duration < 0 or core_duration_minutes < 0:
        raise ValueError("Durations must be zero or more minutes")

    core_start = parse_instant(core_instant)
    core_end = core_start + timedelta(minutes=core_duration_minutes)
    return ActivityWindow(
        window_start=core_start - timedelta(minutes=pre_action_duration),
        core_start=core_start,
        core_end=core_end,
        window_end=core_end + timedelta(minutes=post_action_duration),
    )


def window_for(activity, core_duration_minutes: int = DEFAULT_CORE_DURATION_MINUTES) -> ActivityWindow:
    """Compute the window of an Activity."""
    return compute_window(
        activity.core_instant,
        activity.pre_action_duration,
        activity.post_action_duration,
        core_duration_minutes,
    )


def utc_midnight(reference: date | datetime | str) -> datetime:
    """00:00 UTC of the day containing a reference date or instant."""
    if isinstance(reference, date) and not isinstance(reference, datetime):
        return datetime(reference.year, reference.month, reference.day, tzinfo=timezone.utc)
    dt = parse_instant(reference)
    return datetime(dt.year, dt.month, dt.day, tzinfo=timezone.utc)


def minutes_since(origin: datetime, instant: datetime) -> float:
    """Minutes from origin to instant (negative if before)."""
    return (instant - origin).total_seconds() / 60
