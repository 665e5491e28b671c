"""Presentation-only styling for task types.

Icon and colour are fixed per task type and never user-editable, so they
stay out of the core types entirely.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TaskTypeStyle:
    icon: str
    color: str


TASK_TYPE_STYLES: dict[str, TaskTypeStyle] = {
    "fsv": TaskTypeStyle(icon="◆", color="cyan"),
    "rtp": TaskTypeStyle(icon="▲", color="magenta"),
    "tl": TaskTypeStyle(icon="●", color="yellow"),
    "appointment": TaskTypeStyle(icon="■", color="green"),
}

FALLBACK_STYLE = TaskTypeStyle(icon="?", color="white")


def style_for(task_type: str) -> TaskTypeStyle:
    return TASK_TYPE_STYLES.get(task_type, FALLBACK_STYLE)
