"""Functional core - pure scheduling logic with no I/O."""

from .errors import (
    CsvError,
    HeaderError,
    InvalidTimestamp,
    RowError,
    TimeflowError,
    UnknownTaskType,
)
from .task_types import (
    DEFAULT_TASK_TYPES,
    EffectiveTaskType,
    TaskTypeDefault,
    TaskTypeOverride,
    effective_task_types,
    resolve_task_type,
    require_task_type,
)
from .activities import RESOURCES, Activity, create_activity
from .windows import ActivityWindow, compute_window, format_instant, parse_instant
from .view import ChartEntry, ViewWindow, filter_activities
from .presets import ResolvedTimeRange, TimeRangePreset, resolve_preset
from .csv_import import ImportOptions, ImportOutcome, ImportResult, parse_csv
from .csv_export import EXPORT_COLUMNS, escape_field, serialize_csv

__all__ = [
    # Errors
    "TimeflowError",
    "CsvError",
    "HeaderError",
    "RowError",
    "InvalidTimestamp",
    "UnknownTaskType",
    # Task types
    "DEFAULT_TASK_TYPES",
    "TaskTypeDefault",
    "TaskTypeOverride",
    "EffectiveTaskType",
    "resolve_task_type",
    "require_task_type",
    "effective_task_types",
    # Activities
    "RESOURCES",
    "Activity",
    "create_activity",
    # Windows
    "ActivityWindow",
    "compute_window",
    "parse_instant",
    "format_instant",
    # View
    "ViewWindow",
    "ChartEntry",
    "filter_activities",
    # Presets
    "TimeRangePreset",
    "ResolvedTimeRange",
    "resolve_preset",
    # CSV
    "ImportOptions",
    "ImportOutcome",
    "ImportResult",
    "parse_csv",
    "EXPORT_COLUMNS",
    "escape_field",
    "serialize_csv",
]
