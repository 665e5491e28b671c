"""Named time range presets resolved to UTC offsets - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Iterable, Mapping
from zoneinfo import ZoneInfo

from .view import ViewWindow

# Local time is UTC minus this many hours
DST_UTC_OFFSET = 6
STANDARD_UTC_OFFSET = 7


@dataclass(frozen=True)
class TimeRangePreset:
    """A fixed local time range, e.g. a shift schedule.

    end_hour may be lower than start_hour (spans midnight), equal it (a
    full 24 hours) or be 24 (to the end of the day). fixed_utc presets are
    already in UTC and are not shifted.
    """

    id: str
    label: str
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    fixed_utc: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "startHour": self.start_hour,
            "startMinute": self.start_minute,
            "endHour": self.end_hour,
            "endMinute": self.end_minute,
            "fixedUtc": self.fixed_utc,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "TimeRangePreset":
        return cls(
            id=str(data["id"]),
            label=str(data.get("label", data["id"])),
            start_hour=int(data["startHour"]),
            start_minute=int(data.get("startMinute", 0)),
            end_hour=int(data["endHour"]),
            end_minute=int(data.get("endMinute", 0)),
            fixed_utc=bool(data.get("fixedUtc", False)),
        )


@dataclass(frozen=True)
class ResolvedTimeRange:
    """A preset in UTC hours relative to the reference day's midnight."""

    start_hour_utc: int
    start_minute: int
    end_hour_utc: int
    end_minute: int
    display_label: str

    @property
    def start_total_minutes(self) -> int:
        return self.start_hour_utc * 60 + self.start_minute

    @property
    def end_total_minutes(self) -> int:
        return self.end_hour_utc * 60 + self.end_minute

    def to_view_window(self) -> ViewWindow:
        return ViewWindow(self.start_total_minutes, self.end_total_minutes)


DEFAULT_PRESET = TimeRangePreset(
    id="full_day_default",
    label="Full Day",
    start_hour=0,
    start_minute=0,
    end_hour=24,
    end_minute=0,
    fixed_utc=True,
)

BUILTIN_PRESETS: tuple[TimeRangePreset, ...] = (
    DEFAULT_PRESET,
    TimeRangePreset("local_day", "Local Day", 0, 0, 24, 0),
    TimeRangePreset("day_shift", "Day Shift", 7, 0, 15, 0),
    TimeRangePreset("swing_shift", "Swing Shift", 15, 0, 23, 0),
    TimeRangePreset("night_shift", "Night Shift", 23, 0, 7, 0),
    TimeRangePreset("extended_day", "Extended Day", 6, 0, 18, 0),
    TimeRangePreset("rolling_24h", "Rolling 24h", 6, 0, 6, 0),
)


def utc_offset(dst_active: bool) -> int:
    return DST_UTC_OFFSET if dst_active else STANDARD_UTC_OFFSET


def all_presets(custom_presets: Iterable[TimeRangePreset] = ()) -> list[TimeRangePreset]:
    return [*BUILTIN_PRESETS, *custom_presets]


def find_preset(
    preset_id: str, custom_presets: Iterable[TimeRangePreset] = ()
) -> TimeRangePreset | None:
    for preset in all_presets(custom_presets):
        if preset.id == preset_id:
            return preset
    return None


def _hhmm(hour: int, minute: int, is_end: bool = False) -> str:
    # An end exactly on midnight reads as 24:00
    if is_end and hour > 0 and hour % 24 == 0 and minute == 0:
        return "24:00"
    return f"{hour % 24:02d}:{minute:02d}"


def resolve_preset(
    preset_id: str,
    dst_active: bool,
    custom_presets: Iterable[TimeRangePreset] = (),
) -> ResolvedTimeRange:
    """
    Resolve a preset into UTC hours from the reference day's midnight.

    Unknown ids fall back to the full-day UTC preset. The end hour is not
    wrapped: a 23:00-07:00 shift at UTC-7 resolves to 30:00-38:00.
    Pure function - no I/O.
    """
    preset = find_preset(preset_id, custom_presets) or DEFAULT_PRESET

    offset = 0 if preset.fixed_utc else utc_offset(dst_active)
    start_hour_utc = preset.start_hour + offset
    end_hour_utc = preset.end_hour + offset

    start = (preset.start_hour, preset.start_minute)
    end = (preset.end_hour, preset.end_minute)
    # Spans midnight; identical start and end is a full 24 hours
    if end <= start:
        end_hour_utc += 24

    utc_start = _hhmm(start_hour_utc, preset.start_minute)
    utc_end = _hhmm(end_hour_utc, preset.end_minute, is_end=True)
    utc_range = f"{utc_start}-{utc_end} UTC"
    if preset.fixed_utc:
        label = f"{preset.label} ({utc_range})"
    else:
        mode = "MDT" if dst_active else "MST"
        local_start = _hhmm(preset.start_hour, preset.start_minute)
        local_end = _hhmm(preset.end_hour, preset.end_minute, is_end=True)
        local_range = f"{local_start}-{local_end}"
        label = f"{preset.label} ({local_range} {mode} / {utc_range})"

    return ResolvedTimeRange(
        start_hour_utc=start_hour_utc,
        start_minute=preset.start_minute,
        end_hour_utc=end_hour_utc,
        end_minute=preset.end_minute,
        display_label=label,
    )


def format_tick_label(minute: float, dst_active: bool | None = None) -> str:
    """
    Axis label for a minute offset from the reference midnight.

    Without a DST flag the label is UTC. With one, the local time is shown.
    Only the label wraps at 24 hours.
    """
    total = int(minute)
    if dst_active is not None:
        total -= utc_offset(dst_active) * 60
    hours = (total // 60) % 24
    return f"{hours:02d}:{total % 60:02d}"


def is_dst_active(timezone_name: str, on_date: date) -> bool:
    """Whether daylight saving time is in effect in a zone at noon on a date."""
    zone = ZoneInfo(timezone_name)
    noon = datetime.combine(on_date, time(12, 0), tzinfo=timezone.utc).astimezone(zone)
    offset = noon.dst()
    return bool(offset and offset.total_seconds())
