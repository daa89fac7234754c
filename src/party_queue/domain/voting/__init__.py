"""
Voting Bounded Context

Signed per-track votes with toggle-off semantics and vote-ordered projections.
"""

from party_queue.domain.voting.entities import TrackVote
from party_queue.domain.voting.repository import TrackVoteRepository
from party_queue.domain.voting.services import VotingDomainService
from party_queue.domain.voting.value_objects import (
    VoteChange,
    VoteDirection,
    VoteOutcome,
    VotesSnapshot,
)

__all__ = [
    # Entities
    "TrackVote",
    # Value Objects
    "VoteDirection",
    "VoteChange",
    "VoteOutcome",
    "VotesSnapshot",
    # Repository
    "TrackVoteRepository",
    # Services
    "VotingDomainService",
]
