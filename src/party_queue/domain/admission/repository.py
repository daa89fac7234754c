"""
Admission Domain Repository Interfaces

Abstract base classes defining the contracts for the audit log and ban list.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from datetime import datetime

from party_queue.domain.admission.entities import BannedTrack, SubmissionAttempt


class SubmissionAttemptRepository(ABC):
    """Append-only store of submission attempts."""

    @abstractmethod
    async def add(self, attempt: SubmissionAttempt) -> SubmissionAttempt:
        """Append an attempt and return it with its row id."""
        ...

    @abstractmethod
    async def count_successes_since(self, windows: Mapping[str, datetime]) -> int:
        """Count success rows whose timestamp is after their identity's window start.

        ``windows`` maps each identity id to the start of its own window.
        """
        ...

    @abstractmethod
    async def has_success(self, track_id: str) -> bool:
        """True if the track was ever successfully submitted by a guest."""
        ...

    @abstractmethod
    async def tracks_with_success(self, track_ids: Iterable[str]) -> set[str]:
        """Subset of ``track_ids`` that have at least one success row."""
        ...

    @abstractmethod
    async def list_for_identity(self, identity_id: str, limit: int = 50) -> list[SubmissionAttempt]:
        """Most recent attempts for one identity, newest first."""
        ...

    @abstractmethod
    async def count_for_identity(self, identity_id: str) -> int:
        ...

    @abstractmethod
    async def count(self, successful_only: bool = False) -> int:
        ...


class BannedTrackRepository(ABC):
    """Moderator-managed ban list."""

    @abstractmethod
    async def is_banned(self, track_id: str) -> bool:
        ...

    @abstractmethod
    async def add(self, banned: BannedTrack) -> bool:
        """Insert a ban. Returns False if the track is already banned."""
        ...

    @abstractmethod
    async def remove(self, track_id: str) -> bool:
        """Remove a ban. Returns False if the track was not banned."""
        ...

    @abstractmethod
    async def list_all(self) -> list[BannedTrack]:
        """All bans, newest first."""
        ...
