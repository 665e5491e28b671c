"""Activity records and list operations - no I/O dependencies."""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Mapping

from .task_types import EffectiveTaskType, Overrides, resolve_task_type
from .windows import format_instant, parse_instant

RESOURCES: tuple[str, ...] = (
    "GE01",
    "WV01",
    "WV02",
    "WV03",
    "LG01",
    "LG02",
    "LG03",
    "LG04",
    "LG05",
    "LG06",
)


def normalize_resource(value: str) -> str | None:
    """Canonical resource tag, or None if it is not in the fixed set."""
    candidate = value.strip().upper()
    return candidate if candidate in RESOURCES else None


def new_activity_id() -> str:
    return str(uuid.uuid4())


def default_name(label: str, resource: str) -> str:
    return f"{label} - {resource}"


def _parse_completed(value) -> bool:
    """Stored flag: a bool, or the string "true" in any case."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


@dataclass(frozen=True)
class Activity:
    """A scheduled activity anchored at a core UTC instant."""

    id: str
    resource: str
    core_instant: str
    task_type: str
    pre_action_duration: int
    post_action_duration: int
    name: str | None = None
    is_completed: bool = False

    def __post_init__(self):
        if self.pre_action_duration < 0 or self.post_action_duration < 0:
            raise ValueError("Activity durations must be zero or more minutes")

    @property
    def core_datetime(self) -> datetime:
        return parse_instant(self.core_instant)

    def display_name(self, effective: EffectiveTaskType | None = None) -> str:
        """Name, or "{type label} - {resource}" when unnamed."""
        if self.name:
            return self.name
        label = effective.label if effective else self.task_type
        return default_name(label, self.resource)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "resource": self.resource,
            "coreTime": self.core_instant,
            "type": self.task_type,
            "preActionDuration": self.pre_action_duration,
            "postActionDuration": self.post_action_duration,
            "isCompleted": self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Activity":
        """Create Activity from stored data. Accepts the older spacecraft/startTime keys."""
        return cls(
            id=data.get("id") or new_activity_id(),
            name=data.get("name") or None,
            resource=data.get("resource") or data["spacecraft"],
            core_instant=data.get("coreTime") or data["startTime"],
            task_type=data["type"],
            pre_action_duration=int(data.get("preActionDuration", 0)),
            post_action_duration=int(data.get("postActionDuration", 0)),
            is_completed=_parse_completed(data.get("isCompleted")),
        )


def create_activity(
    resource: str,
    core_instant: str | datetime,
    effective: EffectiveTaskType,
    name: str | None = None,
    pre_action_duration: int | None = None,
    post_action_duration: int | None = None,
    activity_id: str | None = None,
) -> Activity:
    """
    Build a new activity, taking unspecified durations from the task type.

    Raises InvalidTimestamp for an unparseable instant.
    """
    pre = effective.pre_action_duration if pre_action_duration is None else pre_action_duration
    post = effective.post_action_duration if post_action_duration is None else post_action_duration
    return Activity(
        id=activity_id or new_activity_id(),
        name=name.strip() if name and name.strip() else default_name(effective.label, resource),
        resource=resource,
        core_instant=format_instant(parse_instant(core_instant)),
        task_type=effective.key,
        pre_action_duration=max(0, pre),
        post_action_duration=max(0, post),
    )


def find_activity(activities: list[Activity], activity_id: str) -> Activity | None:
    for activity in activities:
        if activity.id == activity_id:
            return activity
    return None


def add_activities(activities: list[Activity], new: list[Activity]) -> list[Activity]:
    return [*activities, *new]


def update_activity(activities: list[Activity], activity_id: str, **changes) -> list[Activity]:
    """Replace fields on one activity. Unknown ids leave the list unchanged."""
    if "core_instant" in changes:
        changes["core_instant"] = format_instant(parse_instant(changes["core_instant"]))
    return [replace(a, **changes) if a.id == activity_id else a for a in activities]


def toggle_completed(activities: list[Activity], activity_id: str) -> list[Activity]:
    return [
        replace(a, is_completed=not a.is_completed) if a.id == activity_id else a
        for a in activities
    ]


def delete_activity(activities: list[Activity], activity_id: str) -> list[Activity]:
    return [a for a in activities if a.id != activity_id]


def sort_by_core_instant(activities: list[Activity]) -> list[Activity]:
    """Sort by core instant; activities with invalid timestamps sort last."""

    def sort_key(a: Activity) -> tuple[int, str]:
        try:
            return (0, format_instant(a.core_datetime))
        except ValueError:
            return (1, a.core_instant)

    return sorted(activities, key=sort_key)


def label_for(activity: Activity, overrides: Overrides | None = None) -> str:
    """Display name using the effective task type label."""
    return activity.display_name(resolve_task_type(activity.task_type, overrides))
