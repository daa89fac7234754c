"""
Voting Domain Repository Interfaces

Abstract base classes defining the contracts for track vote persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from party_queue.domain.voting.value_objects import VoteDirection, VoteOutcome


class TrackVoteRepository(ABC):
    """Abstract repository for per-track signed votes."""

    @abstractmethod
    async def apply(
        self,
        track_id: str,
        identity_id: str,
        direction: VoteDirection,
        now: datetime,
    ) -> VoteOutcome:
        """Insert, flip or toggle off a vote and return the recomputed net score.

        The read of the existing vote, the write, and the net recomputation
        happen in one transaction.
        """
        ...

    @abstractmethod
    async def net_for_track(self, track_id: str) -> int:
        ...

    @abstractmethod
    async def net_by_track(self) -> dict[str, int]:
        """Net score per track with at least one vote."""
        ...

    @abstractmethod
    async def votes_by_identity(self, identity_id: str) -> dict[str, int]:
        """The identity's current vote per track."""
        ...

    @abstractmethod
    async def count(self) -> int:
        ...
