"""Configuration management for Timeflow."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TIMEFLOW_HOME = Path(os.environ.get("TIMEFLOW_HOME", Path.home() / "timeflow"))
CONFIG_FILE = TIMEFLOW_HOME / "config" / "timeflow.conf"
DATA_DIR = TIMEFLOW_HOME / "data"


@dataclass
class Config:
    """Timeflow configuration."""

    data_dir: str = ""
    # Zone used to suggest the DST flag when no setting is stored
    timezone: str = "America/Denver"
    default_preset: str = "full_day_default"
    core_duration_minutes: int = 1
    csv_time_only: bool = False

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(path: Path | None = None) -> Config:
    """Load configuration from timeflow.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value[:1] in ('"', "'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "data_dir":
                config.data_dir = value
            case "timezone":
                config.timezone = value
            case "default_preset":
                config.default_preset = value
            case "core_duration_minutes":
                try:
                    minutes = int(value)
                except ValueError:
                    logger.warning(f"Invalid CORE_DURATION_MINUTES {value!r}, using default")
                    continue
                if minutes < 0:
                    logger.warning(f"CORE_DURATION_MINUTES must not be negative, got {minutes}")
                    continue
                config.core_duration_minutes = minutes
            case "csv_time_only":
                config.csv_time_only = _parse_bool(value)
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    return config
