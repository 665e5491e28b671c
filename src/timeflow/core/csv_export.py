"""CSV export of activities - no I/O dependencies."""

from .activities import Activity
from .windows import parse_instant

EXPORT_COLUMNS = (
    "name",
    "resource",
    "coreTime",
    "type",
    "preActionDuration",
    "postActionDuration",
    "isCompleted",
)


def escape_field(value: object) -> str:
    """Quote a field containing a comma, double quote or newline."""
    text = "" if value is None else str(value)
    if any(c in text for c in (",", '"', "\n", "\r")):
        return '"' + text.replace('"', '""') + '"'
    return text


def _field(activity: Activity, column: str, time_only: bool) -> object:
    match column:
        case "name":
            return activity.name or ""
        case "resource":
            return activity.resource
        case "coreTime":
            if time_only:
                return parse_instant(activity.core_instant).strftime("%H:%M:%S")
            return activity.core_instant
        case "type":
            return activity.task_type
        case "preActionDuration":
            return activity.pre_action_duration
        case "postActionDuration":
            return activity.post_action_duration
        case "isCompleted":
            return "true" if activity.is_completed else "false"
        case "id":
            return activity.id
    raise ValueError(f"Unknown export column: {column!r}")


def serialize_csv(
    activities: list[Activity],
    columns: tuple[str, ...] = EXPORT_COLUMNS,
    time_only: bool = False,
) -> str:
    """
    Serialize activities to CSV text with a header row.

    time_only renders coreTime as HH:mm:ss instead of a full ISO instant.
    """
    lines = [",".join(escape_field(c) for c in columns)]
    for activity in activities:
        lines.append(",".join(escape_field(_field(activity, c, time_only)) for c in columns))
    return "\n".join(lines)
