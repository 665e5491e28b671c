"""Bulk CSV import with per-row validation - no I/O dependencies."""

import csv
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from .activities import RESOURCES, Activity, default_name, new_activity_id, normalize_resource
from .errors import CsvError, HeaderError, InvalidTimestamp, RowError
from .task_types import Overrides, resolve_task_type
from .windows import format_instant, parse_instant

REQUIRED_COLUMNS = ("resource", "coreTime", "type")

# Every activity needs these, whatever the caller marks as required
_ESSENTIAL = ("resource", "coretime", "type")

_ALIASES = {
    "spacecraft": "resource",
    "starttime": "coretime",
}

_TIME_ONLY = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_ISO_INSTANT = re.compile(
    r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|z|[+-]\d{2}:\d{2})?$"
)
_INTEGER = re.compile(r"^[+-]?\d+$")


class ImportOutcome(Enum):
    """What the caller should do with an import result."""

    CLEAN = "clean"  # No errors
    PARTIAL = "partial"  # Errors, but some activities parsed
    REJECTED = "rejected"  # Errors and nothing usable


@dataclass
class ImportOptions:
    """Options for parse_csv."""

    required_columns: tuple[str, ...] = REQUIRED_COLUMNS
    target_date: date | None = None
    default_mode_is_time_only: bool = False


@dataclass
class ImportResult:
    """Parsed activities plus every problem found, in row order."""

    activities: list[Activity] = field(default_factory=list)
    errors: list[CsvError] = field(default_factory=list)

    @property
    def outcome(self) -> ImportOutcome:
        if not self.errors:
            return ImportOutcome.CLEAN
        if self.activities:
            return ImportOutcome.PARTIAL
        return ImportOutcome.REJECTED

    def error_messages(self) -> list[str]:
        return [str(e) for e in self.errors]


def _column_key(name: str) -> str:
    key = name.strip().strip('"').strip("'").strip().lower()
    return _ALIASES.get(key, key)


def _non_empty_lines(text: str) -> list[str]:
    return [line for line in text.lstrip("\ufeff").splitlines() if line.strip()]


def _split_line(line: str) -> list[str]:
    """Quote-aware split of one line. Raises csv.Error for malformed quoting."""
    reader = csv.reader([line], skipinitialspace=True, strict=True)
    return [f.strip() for f in next(reader, [])]


def parse_core_time(value: str, options: ImportOptions) -> str:
    """
    Validate a coreTime field and return the normalized ISO instant.

    Raises RowError with no row number; the caller adds it.
    """
    match = _TIME_ONLY.match(value)
    if match:
        if not options.default_mode_is_time_only:
            raise RowError(f"expected a full ISO timestamp, got time-only value {value!r}")
        if options.target_date is None:
            raise RowError(f"time-only value {value!r} needs a target date")
        hour, minute = int(match.group(1)), int(match.group(2))
        second = int(match.group(3) or 0)
        if hour > 23 or minute > 59 or second > 59:
            raise RowError(f"invalid time {value!r}")
        target = options.target_date
        combined = datetime(
            target.year, target.month, target.day, hour, minute, second, tzinfo=timezone.utc
        )
        return format_instant(combined)

    if not _ISO_INSTANT.match(value):
        raise RowError(f"invalid coreTime {value!r} (expected ISO timestamp or HH:mm[:ss])")
    try:
        return format_instant(parse_instant(value))
    except InvalidTimestamp:
        raise RowError(f"invalid coreTime {value!r}") from None


def _duration(value: str | None, default: int) -> int:
    if value is None or not _INTEGER.match(value):
        return default
    return max(0, int(value))


def _parse_row(
    values: dict[str, str],
    options: ImportOptions,
    overrides: Overrides | None,
) -> Activity:
    """Build one activity from a row's column values. Raises RowError."""
    raw_resource = values["resource"]
    resource = normalize_resource(raw_resource)
    if resource is None:
        raise RowError(
            f"unknown resource {raw_resource!r} (expected one of {', '.join(RESOURCES)})"
        )

    raw_type = values["type"]
    effective = resolve_task_type(raw_type.strip().lower(), overrides)
    if effective is None:
        raise RowError(f"unknown task type {raw_type!r}")

    core_instant = parse_core_time(values["coretime"], options)

    name = values.get("name", "")
    return Activity(
        id=new_activity_id(),
        name=name or default_name(effective.label, resource),
        resource=resource,
        core_instant=core_instant,
        task_type=effective.key,
        pre_action_duration=_duration(
            values.get("preactionduration") or None, effective.pre_action_duration
        ),
        post_action_duration=_duration(
            values.get("postactionduration") or None, effective.post_action_duration
        ),
        is_completed=values.get("iscompleted", "").lower() == "true",
    )


def parse_csv(
    text: str,
    options: ImportOptions | None = None,
    overrides: Overrides | None = None,
) -> ImportResult:
    """
    Parse CSV text into validated activities.

    Row problems are collected, never raised: each bad row is skipped and
    reported with its 1-based row number (the header is row 1).
    Pure function - no I/O.
    """
    options = options or ImportOptions()
    result = ImportResult()

    lines = _non_empty_lines(text)
    if len(lines) < 2:
        result.errors.append(HeaderError("missing header or data"))
        return result

    try:
        header = [_column_key(name) for name in _split_line(lines[0])]
    except csv.Error as e:
        result.errors.append(HeaderError(f"malformed header: {e}"))
        return result

    for column in options.required_columns:
        if _column_key(column) not in header:
            result.errors.append(HeaderError(f"missing required column {column!r}"))

    missing = [column for column in _ESSENTIAL if column not in header]
    if missing:
        reported = {_column_key(c) for c in options.required_columns}
        for column in missing:
            if column not in reported:
                result.errors.append(HeaderError(f"missing column {column!r}, rows cannot be imported"))
        return result

    for row_number, line in enumerate(lines[1:], start=2):
        try:
            record = _split_line(line)
        except csv.Error as e:
            result.errors.append(RowError(f"malformed quoting: {e}", row=row_number))
            continue
        if len(record) != len(header):
            result.errors.append(
                RowError(f"expected {len(header)} columns, found {len(record)}", row=row_number)
            )
            continue
        try:
            activity = _parse_row(dict(zip(header, record)), options, overrides)
        except RowError as e:
            result.errors.append(RowError(e.message, row=row_number))
            continue
        result.activities.append(activity)

    return result
