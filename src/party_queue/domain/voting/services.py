"""
Voting Domain Services

Domain services containing voting business logic.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from party_queue.domain.voting.entities import TrackVote
from party_queue.domain.voting.value_objects import VoteChange, VoteDirection

T = TypeVar("T")


class VotingDomainService:
    """Domain service for vote toggling rules and vote-ordered projections."""

    @staticmethod
    def resolve_change(
        existing: VoteDirection | None, requested: VoteDirection
    ) -> tuple[VoteChange, VoteDirection | None]:
        """Decide what a vote does given the pair's current stored vote.

        Args:
            existing: Direction currently stored for the (track, identity) pair.
            requested: Direction the guest just voted.

        Returns:
            The change to apply and the pair's direction afterwards
            (None when the vote was toggled off).
        """
        if existing is None:
            return VoteChange.ADDED, requested
        if existing is requested:
            return VoteChange.REMOVED, None
        return VoteChange.FLIPPED, requested

    @staticmethod
    def net_score(votes: Iterable[TrackVote]) -> int:
        """Signed sum of vote directions."""
        return sum(v.value for v in votes)

    @staticmethod
    def order_by_votes(
        items: Sequence[T],
        *,
        is_votable: Callable[[T], bool],
        net_votes: Callable[[T], int],
    ) -> list[T]:
        """Reorder a queue projection by net score.

        Votable items come first, by descending net score; ties keep arrival
        order. Non-votable items follow in their original relative order.
        """
        votable = [item for item in items if is_votable(item)]
        others = [item for item in items if not is_votable(item)]
        # list.sort is stable, so equal scores keep arrival order.
        votable.sort(key=lambda item: -net_votes(item))
        return votable + others
