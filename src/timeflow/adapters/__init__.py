"""Adapters - I/O implementations of ports."""

from .json_store import JsonFileStore, MemoryStore

__all__ = [
    "JsonFileStore",
    "MemoryStore",
]
