"""
Voting Domain Value Objects

Immutable value objects for the voting bounded context.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from party_queue.domain.shared.messages import ErrorMessages


class VoteDirection(Enum):
    """Sign of a vote."""

    UP = 1
    DOWN = -1

    @classmethod
    def parse(cls, value: int | VoteDirection) -> VoteDirection:
        if isinstance(value, VoteDirection):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(ErrorMessages.INVALID_VOTE_DIRECTION) from None

    @property
    def opposite(self) -> VoteDirection:
        return VoteDirection.DOWN if self is VoteDirection.UP else VoteDirection.UP


class VoteChange(Enum):
    """What applying a vote did to the stored row for a (track, identity) pair."""

    ADDED = "added"  # No previous vote; inserted
    FLIPPED = "flipped"  # Opposite previous vote; updated in place
    REMOVED = "removed"  # Same previous vote; toggled off

    @property
    def past_tense(self) -> str:
        return {
            VoteChange.ADDED: "recorded",
            VoteChange.FLIPPED: "changed",
            VoteChange.REMOVED: "removed",
        }[self]


class VoteOutcome(BaseModel):
    """Result of a vote call: the caller's vote after the call and the new net score."""

    model_config = ConfigDict(frozen=True)

    track_id: str
    change: VoteChange
    user_vote: int | None = None
    net_votes: int = 0

    @property
    def message(self) -> str:
        return f"Vote {self.change.past_tense} (net {self.net_votes:+d})"


class VotesSnapshot(BaseModel):
    """Read-only aggregation of votes, optionally including one guest's own votes."""

    model_config = ConfigDict(frozen=True)

    net_by_track: dict[str, int] = Field(default_factory=dict)
    user_vote_by_track: dict[str, int] = Field(default_factory=dict)
    voting_enabled: bool = False
    downvote_enabled: bool = True
