"""Shared workflow layer between the CLI and the stores.

Each function reads whole values from a ConfigStore, runs the pure core,
and writes whole values back.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date

from .adapters.json_store import JsonFileStore
from .config import Config
from .core import activities as act
from .core.activities import Activity
from .core.csv_export import EXPORT_COLUMNS, serialize_csv
from .core.csv_import import ImportOptions, ImportOutcome, ImportResult, parse_csv
from .core.presets import (
    ResolvedTimeRange,
    TimeRangePreset,
    find_preset,
    is_dst_active,
    resolve_preset,
)
from .core.task_types import (
    TaskTypeOverride,
    overrides_from_dict,
    overrides_to_dict,
    require_task_type,
)
from .core.view import ChartEntry, ViewWindow, filter_activities
from .ports import ConfigStore

logger = logging.getLogger(__name__)

TASKS_FILE = "tasks.json"
TASK_TYPES_FILE = "task-types.json"
CHART_SETTINGS_FILE = "chart-settings.json"


@dataclass
class Stores:
    """The persisted values Timeflow reads and writes."""

    tasks: ConfigStore
    task_types: ConfigStore
    chart_settings: ConfigStore


def open_stores(config: Config) -> Stores:
    """JSON file stores under the configured data directory."""
    data = config.data_path
    return Stores(
        tasks=JsonFileStore(data / TASKS_FILE, default=[]),
        task_types=JsonFileStore(data / TASK_TYPES_FILE, default={}),
        chart_settings=JsonFileStore(data / CHART_SETTINGS_FILE, default={}),
    )


# ============== Activities ==============


def load_activities(stores: Stores) -> list[Activity]:
    """Load stored activities, skipping records that cannot be read."""
    data = stores.tasks.get() or []
    if not isinstance(data, list):
        logger.warning(f"Stored activities are not a list, ignoring: {type(data).__name__}")
        return []

    loaded = []
    for item in data:
        try:
            loaded.append(Activity.from_dict(item))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping unreadable stored activity {item!r}: {e}")
    return loaded


def save_activities(stores: Stores, activities: list[Activity]) -> None:
    stores.tasks.set([a.to_dict() for a in activities])


def add_activity(
    stores: Stores,
    resource: str,
    core_time: str,
    task_type: str,
    name: str | None = None,
    pre_action_duration: int | None = None,
    post_action_duration: int | None = None,
) -> Activity:
    """Create an activity from manual entry and store it.

    Raises ValueError for an unknown resource, UnknownTaskType for an
    unknown type and InvalidTimestamp for a bad time.
    """
    return add_batch(
        stores, [resource], [core_time], task_type, name, pre_action_duration, post_action_duration
    )[0]


def add_batch(
    stores: Stores,
    resources: list[str],
    core_times: list[str],
    task_type: str,
    name: str | None = None,
    pre_action_duration: int | None = None,
    post_action_duration: int | None = None,
) -> list[Activity]:
    """
    Create one activity per resource and core time, all of one task type.

    Every entry is validated before anything is stored, so one bad value
    stores nothing. Raises like add_activity.
    """
    canonical = []
    for resource in resources:
        normalized = act.normalize_resource(resource)
        if normalized is None:
            raise ValueError(f"Unknown resource {resource!r}")
        canonical.append(normalized)
    effective = require_task_type(task_type.lower(), load_overrides(stores))

    created = [
        act.create_activity(
            resource,
            core_time,
            effective,
            name=name,
            pre_action_duration=pre_action_duration,
            post_action_duration=post_action_duration,
        )
        for resource in canonical
        for core_time in core_times
    ]
    save_activities(stores, act.add_activities(load_activities(stores), created))
    for activity in created:
        logger.info(f"Added activity {activity.id} ({activity.name})")
    return created


def edit_activity(stores: Stores, activity_id: str, **changes) -> Activity:
    """Update fields of a stored activity. Raises KeyError for unknown ids."""
    activities = load_activities(stores)
    if act.find_activity(activities, activity_id) is None:
        raise KeyError(activity_id)
    updated = act.update_activity(activities, activity_id, **changes)
    save_activities(stores, updated)
    return act.find_activity(updated, activity_id)


def toggle_activity(stores: Stores, activity_id: str) -> Activity:
    activities = load_activities(stores)
    if act.find_activity(activities, activity_id) is None:
        raise KeyError(activity_id)
    updated = act.toggle_completed(activities, activity_id)
    save_activities(stores, updated)
    return act.find_activity(updated, activity_id)


def delete_activity(stores: Stores, activity_id: str) -> Activity:
    activities = load_activities(stores)
    removed = act.find_activity(activities, activity_id)
    if removed is None:
        raise KeyError(activity_id)
    save_activities(stores, act.delete_activity(activities, activity_id))
    return removed


def clear_activities(stores: Stores) -> int:
    """Delete every activity. Returns how many were removed."""
    count = len(load_activities(stores))
    save_activities(stores, [])
    return count


# ============== Task types ==============


def load_overrides(stores: Stores) -> dict[str, TaskTypeOverride]:
    data = stores.task_types.get()
    if data is not None and not isinstance(data, dict):
        logger.warning(f"Stored task type settings are not an object, ignoring: {type(data).__name__}")
        return {}
    return overrides_from_dict(data)


def save_overrides(stores: Stores, overrides: dict[str, TaskTypeOverride]) -> None:
    stores.task_types.set(overrides_to_dict(overrides))


# ============== Chart settings ==============


@dataclass
class ChartSettings:
    """Selected preset, DST flag and user-defined presets."""

    selected_preset_id: str
    dst_active: bool
    custom_presets: list[TimeRangePreset] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "selectedPresetId": self.selected_preset_id,
            "dstActive": self.dst_active,
            "customPresets": [p.to_dict() for p in self.custom_presets],
        }


def load_chart_settings(stores: Stores, config: Config, today: date | None = None) -> ChartSettings:
    """
    Load chart settings, filling gaps from config.

    With no stored DST flag, it is suggested from the configured timezone.
    """
    data = stores.chart_settings.get() or {}
    if not isinstance(data, dict):
        logger.warning(f"Stored chart settings are not an object, ignoring: {type(data).__name__}")
        data = {}

    custom = []
    presets = data.get("customPresets") or []
    for item in presets if isinstance(presets, list) else []:
        try:
            custom.append(TimeRangePreset.from_dict(item))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping unreadable custom preset {item!r}: {e}")

    dst_active = data.get("dstActive")
    if dst_active is None:
        dst_active = is_dst_active(config.timezone, today or date.today())

    return ChartSettings(
        selected_preset_id=data.get("selectedPresetId") or config.default_preset,
        dst_active=bool(dst_active),
        custom_presets=custom,
    )


def save_chart_settings(stores: Stores, settings: ChartSettings) -> None:
    stores.chart_settings.set(settings.to_dict())


def add_custom_preset(stores: Stores, config: Config, preset: TimeRangePreset) -> ChartSettings:
    """Store a user-defined preset. Raises ValueError if the id is taken."""
    settings = load_chart_settings(stores, config)
    if find_preset(preset.id, settings.custom_presets) is not None:
        raise ValueError(f"Preset id {preset.id!r} already exists")
    settings.custom_presets.append(preset)
    save_chart_settings(stores, settings)
    return settings


def update_custom_preset(stores: Stores, config: Config, preset_id: str, **changes) -> TimeRangePreset:
    """
    Change fields of a user-defined preset; None values are left as they are.

    Raises KeyError for ids that are not custom presets.
    """
    changes = {k: v for k, v in changes.items() if v is not None}
    changes.pop("id", None)
    settings = load_chart_settings(stores, config)
    for i, preset in enumerate(settings.custom_presets):
        if preset.id == preset_id:
            updated = replace(preset, **changes)
            settings.custom_presets[i] = updated
            save_chart_settings(stores, settings)
            logger.info(f"Updated preset {preset_id}")
            return updated
    raise KeyError(preset_id)


def remove_custom_preset(stores: Stores, config: Config, preset_id: str) -> ChartSettings:
    """Delete a user-defined preset; a selected one falls back to the default."""
    settings = load_chart_settings(stores, config)
    remaining = [p for p in settings.custom_presets if p.id != preset_id]
    if len(remaining) == len(settings.custom_presets):
        raise KeyError(preset_id)
    settings.custom_presets = remaining
    if settings.selected_preset_id == preset_id:
        settings.selected_preset_id = config.default_preset
    save_chart_settings(stores, settings)
    return settings


# ============== CSV ==============


def import_csv(
    stores: Stores,
    text: str,
    options: ImportOptions,
    allow_partial: bool = True,
) -> ImportResult:
    """
    Parse CSV text and store the activities.

    Clean imports are always stored; partial ones only when allowed.
    Rejected imports store nothing.
    """
    result = parse_csv(text, options, load_overrides(stores))
    outcome = result.outcome

    if outcome == ImportOutcome.CLEAN or (outcome == ImportOutcome.PARTIAL and allow_partial):
        save_activities(stores, act.add_activities(load_activities(stores), result.activities))
        logger.info(f"Imported {len(result.activities)} activities ({outcome.value})")
    else:
        logger.warning(f"Import not applied ({outcome.value}): {len(result.errors)} errors")

    return result


def export_csv(stores: Stores, time_only: bool = False, columns: tuple[str, ...] = EXPORT_COLUMNS) -> str:
    return serialize_csv(act.sort_by_core_instant(load_activities(stores)), columns, time_only)


# ============== Chart ==============


@dataclass
class ChartView:
    """Everything needed to draw one chart."""

    reference_date: date
    window: ViewWindow
    entries: list[ChartEntry]
    dst_active: bool
    time_range: ResolvedTimeRange | None = None


def build_chart(
    stores: Stores,
    config: Config,
    reference_date: date,
    preset_id: str | None = None,
    dst_active: bool | None = None,
    window: ViewWindow | None = None,
) -> ChartView:
    """
    Filter stored activities for a day and a view window.

    An explicit window wins over a preset; otherwise the given or selected
    preset is resolved with the given or stored DST flag.
    """
    settings = load_chart_settings(stores, config, reference_date)
    dst = settings.dst_active if dst_active is None else dst_active

    time_range = None
    if window is None:
        time_range = resolve_preset(
            preset_id or settings.selected_preset_id, dst, settings.custom_presets
        )
        window = time_range.to_view_window()

    entries = filter_activities(
        load_activities(stores),
        window,
        reference_date,
        load_overrides(stores),
        config.core_duration_minutes,
    )
    return ChartView(
        reference_date=reference_date,
        window=window,
        entries=entries,
        dst_active=dst,
        time_range=time_range,
    )
