"""Ports - interfaces/protocols for external dependencies."""

from .config_store import ConfigStore

__all__ = [
    "ConfigStore",
]
