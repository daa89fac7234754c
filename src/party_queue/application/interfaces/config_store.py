"""Port for the runtime key-value configuration store."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ConfigRepository(ABC):
    """Persistent string key-value settings, changeable while the service runs."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key was never written."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Insert or replace a value."""
        ...

    @abstractmethod
    async def all(self) -> dict[str, str]:
        """Every stored key-value pair."""
        ...
