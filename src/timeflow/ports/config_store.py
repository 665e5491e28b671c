"""Persisted value store interface."""

from typing import Protocol, TypeVar

T = TypeVar("T")


class ConfigStore(Protocol[T]):
    """Interface for reading and writing one persisted value as a whole."""

    def get(self) -> T:
        """Return the stored value, or the store's default if nothing is stored."""
        ...

    def set(self, value: T) -> None:
        """Replace the stored value."""
        ...
