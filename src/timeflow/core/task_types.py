"""Task type defaults and user overrides - no I/O dependencies."""

from dataclasses import dataclass, fields, replace
from typing import Mapping

from .errors import UnknownTaskType


@dataclass(frozen=True)
class TaskTypeDefault:
    """Built-in definition of a task type."""

    key: str
    label: str
    pre_action_duration: int
    post_action_duration: int
    pre_action_label: str | None = None
    post_action_label: str | None = None


@dataclass(frozen=True)
class TaskTypeOverride:
    """User-editable fields of a task type. None means "use the default"."""

    label: str | None = None
    pre_action_duration: int | None = None
    post_action_duration: int | None = None
    pre_action_label: str | None = None
    post_action_label: str | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_dict(self) -> dict:
        """Sparse camelCase dict for persistence."""
        return {
            _CAMEL[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "TaskTypeOverride":
        """Build from stored data. Unknown keys (e.g. icon, color) are ignored."""
        values = {}
        for f in fields(cls):
            raw = data.get(_CAMEL[f.name], data.get(f.name))
            if raw is None:
                continue
            if f.name.endswith("_duration"):
                try:
                    values[f.name] = max(0, int(raw))
                except (TypeError, ValueError):
                    continue
            else:
                values[f.name] = str(raw)
        return cls(**values)


@dataclass(frozen=True)
class EffectiveTaskType:
    """A task type after overrides have been applied to its default."""

    key: str
    label: str
    pre_action_duration: int
    post_action_duration: int
    pre_action_label: str | None = None
    post_action_label: str | None = None


_CAMEL = {
    "label": "label",
    "pre_action_duration": "preActionDuration",
    "post_action_duration": "postActionDuration",
    "pre_action_label": "preActionLabel",
    "post_action_label": "postActionLabel",
}


DEFAULT_TASK_TYPES: tuple[TaskTypeDefault, ...] = (
    TaskTypeDefault(
        key="fsv",
        label="FSV",
        pre_action_duration=5,
        post_action_duration=2,
        pre_action_label="Setup",
        post_action_label="Teardown",
    ),
    TaskTypeDefault(
        key="rtp",
        label="RTP",
        pre_action_duration=10,
        post_action_duration=5,
        pre_action_label="Prep",
        post_action_label="Wrap-up",
    ),
    TaskTypeDefault(
        key="tl",
        label="TL",
        pre_action_duration=15,
        post_action_duration=5,
    ),
    TaskTypeDefault(
        key="appointment",
        label="Appointment",
        pre_action_duration=15,
        post_action_duration=0,
        pre_action_label="Travel & Check-in",
    ),
)

TASK_TYPE_KEYS: tuple[str, ...] = tuple(d.key for d in DEFAULT_TASK_TYPES)

Overrides = Mapping[str, TaskTypeOverride]


def find_default(
    key: str, defaults: tuple[TaskTypeDefault, ...] = DEFAULT_TASK_TYPES
) -> TaskTypeDefault | None:
    for default in defaults:
        if default.key == key:
            return default
    return None


def resolve_task_type(
    key: str,
    overrides: Overrides | None = None,
    defaults: tuple[TaskTypeDefault, ...] = DEFAULT_TASK_TYPES,
) -> EffectiveTaskType | None:
    """
    Merge the user override for a key onto its built-in default.

    Returns None when the key has no default. Callers must treat that as a
    validation failure rather than guessing a type.
    Pure function - no I/O.
    """
    default = find_default(key, defaults)
    if default is None:
        return None

    override = (overrides or {}).get(key) or TaskTypeOverride()

    def pick(name: str):
        value = getattr(override, name)
        return getattr(default, name) if value is None else value

    return EffectiveTaskType(
        key=default.key,
        label=pick("label"),
        pre_action_duration=pick("pre_action_duration"),
        post_action_duration=pick("post_action_duration"),
        pre_action_label=pick("pre_action_label"),
        post_action_label=pick("post_action_label"),
    )


def require_task_type(
    key: str,
    overrides: Overrides | None = None,
    defaults: tuple[TaskTypeDefault, ...] = DEFAULT_TASK_TYPES,
) -> EffectiveTaskType:
    """Like resolve_task_type, but raise UnknownTaskType on a missing key."""
    effective = resolve_task_type(key, overrides, defaults)
    if effective is None:
        raise UnknownTaskType(key)
    return effective


def effective_task_types(
    overrides: Overrides | None = None,
    defaults: tuple[TaskTypeDefault, ...] = DEFAULT_TASK_TYPES,
) -> list[EffectiveTaskType]:
    """All effective task types, in default order."""
    return [require_task_type(d.key, overrides, defaults) for d in defaults]


def set_override(
    overrides: Overrides,
    key: str,
    **changes,
) -> dict[str, TaskTypeOverride]:
    """
    Return a new override map with changes merged into one key's override.

    Durations are clamped to zero or more.
    """
    if find_default(key) is None:
        raise UnknownTaskType(key)

    for name in ("pre_action_duration", "post_action_duration"):
        if changes.get(name) is not None:
            changes[name] = max(0, int(changes[name]))

    current = overrides.get(key) or TaskTypeOverride()
    updated = replace(current, **{k: v for k, v in changes.items() if v is not None})

    result = dict(overrides)
    result[key] = updated
    return result


def reset_override(overrides: Overrides, key: str | None = None) -> dict[str, TaskTypeOverride]:
    """Drop the override for one key, or all overrides when key is None."""
    if key is None:
        return {}
    return {k: v for k, v in overrides.items() if k != key}


def overrides_from_dict(data: Mapping | None) -> dict[str, TaskTypeOverride]:
    """Load the sparse persisted override map. Unknown task type keys are dropped."""
    if not data:
        return {}
    result = {}
    for key, value in data.items():
        if key in TASK_TYPE_KEYS and isinstance(value, Mapping):
            override = TaskTypeOverride.from_dict(value)
            if not override.is_empty():
                result[key] = override
    return result


def overrides_to_dict(overrides: Overrides) -> dict[str, dict]:
    return {key: o.to_dict() for key, o in overrides.items() if not o.is_empty()}
