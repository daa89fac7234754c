"""Vote Ledger - signed per-track votes with toggle-off semantics."""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import TYPE_CHECKING

from ...domain.shared.datetime_utils import Clock, utcnow
from ...domain.shared.exceptions import (
    AuthRequiredError,
    BlockedError,
    FeatureDisabledError,
    ModerationRejectedError,
    ValidationError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.voting.value_objects import VoteChange, VoteDirection, VoteOutcome, VotesSnapshot

if TYPE_CHECKING:
    from ...domain.admission.repository import SubmissionAttemptRepository
    from ...domain.voting.repository import TrackVoteRepository
    from ..interfaces.auth_gate import AuthGate
    from .configuration import ConfigurationService
    from .identity_ledger import IdentityLedger
    from .queue_view import QueueView

logger = logging.getLogger(__name__)


class VoteLedger:
    """Applies guest votes on guest-submitted tracks.

    Votes for one (track, identity) pair are serialized in-process and written
    in a single transaction against the pair's unique key.
    """

    def __init__(
        self,
        *,
        vote_repository: TrackVoteRepository,
        attempt_repository: SubmissionAttemptRepository,
        identity_ledger: IdentityLedger,
        auth_gate: AuthGate,
        configuration: ConfigurationService,
        queue_view: QueueView,
        clock: Clock = utcnow,
    ) -> None:
        self._repo = vote_repository
        self._attempt_repo = attempt_repository
        self._ledger = identity_ledger
        self._auth_gate = auth_gate
        self._configuration = configuration
        self._queue_view = queue_view
        self._clock = clock
        self._locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, track_id: str, identity_id: str) -> asyncio.Lock:
        key = (track_id, identity_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def vote(
        self, track_id: str, identity_token: str, direction: int | VoteDirection
    ) -> VoteOutcome:
        """Cast, flip or withdraw a vote.

        Repeating the stored direction withdraws the vote; the opposite
        direction flips it.

        Raises:
            FeatureDisabledError: Voting, or downvoting, is switched off.
            ValidationError: Bad direction or empty track id.
            AuthRequiredError: A required login is missing.
            BlockedError: The identity is blocked.
            ModerationRejectedError: The track was never queued by a guest.
        """
        config = await self._configuration.admission_config()
        if not config.voting_enabled:
            raise FeatureDisabledError(ErrorMessages.FEATURE_VOTING)

        try:
            parsed = VoteDirection.parse(direction)
        except ValueError as exc:
            raise ValidationError(str(exc), field="direction") from None

        if parsed is VoteDirection.DOWN and not config.voting_downvote_enabled:
            raise FeatureDisabledError("Downvoting", ErrorMessages.DOWNVOTES_DISABLED)

        if not track_id or not track_id.strip():
            raise ValidationError(ErrorMessages.EMPTY_TRACK_ID, field="track_id")
        track_id = track_id.strip()

        identity = await self._ledger.resolve(identity_token)

        requirements = self._auth_gate.check(identity, config)
        if requirements.auth_required:
            raise AuthRequiredError(requirements.reasons)
        if identity.is_blocked:
            raise BlockedError(identity.id)

        if not await self._attempt_repo.has_success(track_id):
            raise ModerationRejectedError(ErrorMessages.TRACK_NOT_VOTABLE, code="NOT_VOTABLE")

        async with self._lock_for(track_id, identity.id):
            outcome = await self._repo.apply(track_id, identity.id, parsed, self._clock())

        if outcome.change is VoteChange.REMOVED:
            logger.info(LogTemplates.VOTE_REMOVED, track_id, identity.id, outcome.net_votes)
        else:
            logger.info(
                LogTemplates.VOTE_RECORDED, parsed.value, track_id, identity.id, outcome.net_votes
            )

        if config.voting_auto_promote:
            self._queue_view.invalidate()
        return outcome

    async def votes_snapshot(self, identity_token: str | None = None) -> VotesSnapshot:
        """Net score per track, plus the caller's own votes when a token is given."""
        config = await self._configuration.admission_config()
        net_by_track = await self._repo.net_by_track()
        user_votes: dict[str, int] = {}
        if identity_token and identity_token.strip():
            user_votes = await self._repo.votes_by_identity(identity_token.strip())

        return VotesSnapshot(
            net_by_track=net_by_track,
            user_vote_by_track=user_votes,
            voting_enabled=config.voting_enabled,
            downvote_enabled=config.voting_downvote_enabled,
        )
