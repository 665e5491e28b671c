"""JSON file store adapter."""

import copy
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    One JSON document on disk.

    Implements ConfigStore protocol. A missing or unreadable file yields a
    copy of the default, so callers never see a half-written value.
    """

    def __init__(self, path: Path | str, default: Any = None):
        self.path = Path(path).expanduser()
        self.default = default

    def get(self) -> Any:
        """Return the stored value, or the default if nothing is stored."""
        if not self.path.exists():
            return copy.deepcopy(self.default)
        try:
            return json.loads(self.path.read_text())
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {self.path}, using default: {e}")
            return copy.deepcopy(self.default)

    def set(self, value: Any) -> None:
        """Replace the stored value."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(value, indent=2))
        tmp.replace(self.path)
        logger.debug(f"Saved {self.path}")

    def exists(self) -> bool:
        return self.path.exists()


class MemoryStore:
    """In-memory ConfigStore, for tests and one-off runs."""

    def __init__(self, value: Any = None):
        self._value = copy.deepcopy(value)

    def get(self) -> Any:
        return copy.deepcopy(self._value)

    def set(self, value: Any) -> None:
        self._value = copy.deepcopy(value)
