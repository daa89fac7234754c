"""
Prequeue Domain Repository Interfaces

Abstract base classes defining the contracts for prequeue persistence.
"""

from abc import ABC, abstractmethod

from party_queue.domain.prequeue.entities import PrequeueEntry
from party_queue.domain.prequeue.value_objects import PrequeueStatus


class PrequeueRepository(ABC):
    """Abstract repository for prequeue entries."""

    @abstractmethod
    async def add_pending(self, entry: PrequeueEntry) -> bool:
        """Insert a pending entry.

        Returns:
            False when another pending entry already exists for the same track.
        """
        ...

    @abstractmethod
    async def get(self, entry_id: str) -> PrequeueEntry | None:
        ...

    @abstractmethod
    async def has_pending_for_track(self, track_id: str) -> bool:
        ...

    @abstractmethod
    async def save_transition(self, entry: PrequeueEntry) -> bool:
        """Persist a transitioned entry, only if the stored row is still pending.

        Returns:
            False when the stored row had already left the pending state.
        """
        ...

    @abstractmethod
    async def list_by_status(self, status: PrequeueStatus) -> list[PrequeueEntry]:
        """Entries in the given state, newest first."""
        ...
