"""Admission Coordinator - the guest-facing submission pipeline.

Every submission passes the same gates, in order:

1. feature gate (``queueing_enabled`` or ``prequeue_enabled``)
2. input validation
3. identity resolution, then the username requirement
4. auth gate, then the blocked check
5. ban check by id, metadata fetch, explicit and duration checks
6. cooldown pre-check
7. forward to the live queue, or hold in the prequeue
8. audit row, then the post-forward cooldown stamp

Steps 5 to 8 run while holding the cooldown group's lock. Every decision made
after the identity is known is written to the audit log exactly once.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ...domain.admission.entities import SubmissionAttempt
from ...domain.admission.services import ModerationGate
from ...domain.admission.value_objects import AdmissionConfig, AttemptOutcome
from ...domain.music.entities import Track
from ...domain.shared.datetime_utils import Clock, utcnow
from ...domain.shared.exceptions import (
    AuthRequiredError,
    BlockedError,
    ConflictError,
    DomainError,
    FeatureDisabledError,
    ModerationRejectedError,
    RateLimitedError,
    UpstreamFailureError,
    ValidationError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from .upstream import DEFAULT_TIMEOUT_SECONDS, call_upstream

if TYPE_CHECKING:
    from ...domain.admission.repository import (
        BannedTrackRepository,
        SubmissionAttemptRepository,
    )
    from ...domain.guests.entities import Identity
    from ...domain.guests.repository import IdentityRepository
    from ..interfaces.auth_gate import AuthGate
    from ..interfaces.catalog import MusicCatalog
    from .configuration import ConfigurationService
    from .cooldown_engine import CooldownEngine
    from .identity_ledger import IdentityLedger
    from .prequeue_workflow import PrequeueWorkflow
    from .queue_view import QueueView

logger = logging.getLogger(__name__)

MAX_TRACK_ID_LENGTH = 128
MAX_SEARCH_LIMIT = 50


class SubmitTrackRequest(BaseModel):
    identity_token: str
    track_id: str | None = None
    track_url: str | None = None


class SubmitResult(BaseModel):
    success: bool
    message: str = ""
    track: Track | None = None


class PrequeueSubmitResult(BaseModel):
    success: bool
    prequeue_id: str | None = None
    message: str = ""


class AdmissionCoordinator:
    """Runs guest submissions through the gates and records each decision."""

    def __init__(
        self,
        *,
        identity_ledger: IdentityLedger,
        identity_repository: IdentityRepository,
        attempt_repository: SubmissionAttemptRepository,
        banned_track_repository: BannedTrackRepository,
        catalog: MusicCatalog,
        auth_gate: AuthGate,
        configuration: ConfigurationService,
        cooldown_engine: CooldownEngine,
        prequeue_workflow: PrequeueWorkflow,
        queue_view: QueueView,
        clock: Clock = utcnow,
        upstream_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._ledger = identity_ledger
        self._identity_repo = identity_repository
        self._attempt_repo = attempt_repository
        self._banned_repo = banned_track_repository
        self._catalog = catalog
        self._auth_gate = auth_gate
        self._configuration = configuration
        self._cooldown = cooldown_engine
        self._prequeue = prequeue_workflow
        self._queue_view = queue_view
        self._clock = clock
        self._timeout = upstream_timeout_seconds

    # === Guest operations ===

    async def submit_direct(self, request: SubmitTrackRequest) -> SubmitResult:
        """Forward a track straight to the live queue.

        Raises:
            FeatureDisabledError, ValidationError, AuthRequiredError,
            BlockedError, ModerationRejectedError, RateLimitedError,
            UpstreamFailureError.
        """
        config = await self._configuration.admission_config()
        if not config.queueing_enabled:
            raise FeatureDisabledError(ErrorMessages.FEATURE_QUEUEING)

        track_id = self._resolve_track_id(request)
        identity = await self._admit_identity(request.identity_token, config, track_id)

        async with self._cooldown.admission(identity):
            track = await self._moderate(identity, track_id, config)
            await self._precheck_cooldown(identity, track, config)

            try:
                await call_upstream("enqueue", self._catalog.enqueue(track.uri), self._timeout)
            except UpstreamFailureError as exc:
                logger.error(LogTemplates.ADMISSION_UPSTREAM_FAILED, track.id, identity.id, exc)
                await self._record(identity, AttemptOutcome.ERROR, track=track, detail=exc.message)
                raise

            now = self._clock()
            await self._record(identity, AttemptOutcome.SUCCESS, track=track, at=now)
            await self._identity_repo.record_submission(identity.id, now)
            await self._cooldown.check(identity, config)

        self._queue_view.invalidate()
        logger.info(LogTemplates.ADMISSION_ACCEPTED, track.display_title, identity.id)
        return SubmitResult(success=True, message=f"Queued: {track.display_title}", track=track)

    async def submit_to_prequeue(self, request: SubmitTrackRequest) -> PrequeueSubmitResult:
        """Hold a track for moderator approval.

        Accepting into the prequeue writes no success row; approval does.

        Raises:
            Same as ``submit_direct``, plus ConflictError for a track already
            pending or already live.
        """
        config = await self._configuration.admission_config()
        if not config.prequeue_enabled:
            raise FeatureDisabledError(ErrorMessages.FEATURE_PREQUEUE)

        track_id = self._resolve_track_id(request)
        identity = await self._admit_identity(request.identity_token, config, track_id)

        async with self._cooldown.admission(identity):
            track = await self._moderate(identity, track_id, config)
            await self._precheck_cooldown(identity, track, config)

            try:
                entry = await self._prequeue.submit(identity, track)
            except ConflictError as exc:
                raise await self._reject(identity, exc, AttemptOutcome.BLOCKED, track=track)

        return PrequeueSubmitResult(
            success=True, prequeue_id=entry.id, message="Track submitted for approval"
        )

    async def search(self, query: str, limit: int = 10) -> list[Track]:
        """Search the catalog, hiding tracks admission would reject as explicit."""
        config = await self._configuration.admission_config()
        if not config.queueing_enabled:
            raise FeatureDisabledError(ErrorMessages.FEATURE_QUEUEING)

        if not query or not query.strip():
            raise ValidationError(ErrorMessages.SEARCH_QUERY_REQUIRED, field="query")

        limit = max(1, min(limit, MAX_SEARCH_LIMIT))
        tracks = await call_upstream(
            "search_tracks", self._catalog.search_tracks(query.strip(), limit), self._timeout
        )
        results = ModerationGate.filter_search_results(tracks, config)
        logger.debug(LogTemplates.SEARCH_COMPLETED, query, len(results))
        return results

    # === Gates ===

    def _resolve_track_id(self, request: SubmitTrackRequest) -> str:
        track_id = (request.track_id or "").strip()
        if not track_id and request.track_url and request.track_url.strip():
            parsed = self._catalog.parse_track_reference(request.track_url.strip())
            if not parsed:
                raise ValidationError(ErrorMessages.INVALID_TRACK_URL, field="track_url")
            track_id = parsed

        if not track_id:
            raise ValidationError(ErrorMessages.TRACK_REFERENCE_REQUIRED, field="track_id")
        if len(track_id) > MAX_TRACK_ID_LENGTH:
            raise ValidationError(ErrorMessages.INVALID_TRACK_ID, field="track_id")
        return track_id

    async def _admit_identity(
        self, token: str, config: AdmissionConfig, track_id: str
    ) -> Identity:
        """Resolve the identity and apply the identity-level gates."""
        identity = await self._ledger.resolve(token)

        if config.require_username and not identity.display_name:
            raise await self._reject(
                identity,
                ValidationError(ErrorMessages.USERNAME_REQUIRED, field="display_name"),
                AttemptOutcome.BLOCKED,
                track_id=track_id,
            )

        requirements = self._auth_gate.check(identity, config)
        if requirements.auth_required:
            raise await self._reject(
                identity,
                AuthRequiredError(requirements.reasons),
                AttemptOutcome.BLOCKED,
                track_id=track_id,
            )

        if identity.is_blocked:
            raise await self._reject(
                identity, BlockedError(identity.id), AttemptOutcome.BLOCKED, track_id=track_id
            )

        return identity

    async def _moderate(self, identity: Identity, track_id: str, config: AdmissionConfig) -> Track:
        """Ban check, metadata fetch, then the metadata-based moderation rules."""
        banned = await self._banned_repo.is_banned(track_id)
        verdict = ModerationGate.check_banned(banned)
        if not verdict.allowed:
            assert verdict.reason is not None and verdict.outcome is not None
            raise await self._reject(
                identity,
                ModerationRejectedError(verdict.reason),
                verdict.outcome,
                track_id=track_id,
            )

        try:
            track = await call_upstream(
                "get_track", self._catalog.get_track(track_id), self._timeout
            )
        except UpstreamFailureError as exc:
            logger.error(LogTemplates.ADMISSION_UPSTREAM_FAILED, track_id, identity.id, exc)
            await self._record(
                identity, AttemptOutcome.ERROR, track_id=track_id, detail=exc.message
            )
            raise

        verdict = ModerationGate.evaluate(track, config, banned=banned)
        if not verdict.allowed:
            assert verdict.reason is not None and verdict.outcome is not None
            raise await self._reject(
                identity, ModerationRejectedError(verdict.reason), verdict.outcome, track=track
            )
        return track

    async def _precheck_cooldown(
        self, identity: Identity, track: Track, config: AdmissionConfig
    ) -> None:
        decision = await self._cooldown.check(identity, config)
        if not decision.allowed:
            raise await self._reject(
                identity,
                RateLimitedError(decision.remaining_seconds),
                AttemptOutcome.RATE_LIMITED,
                track=track,
            )

    # === Audit ===

    async def _record(
        self,
        identity: Identity,
        outcome: AttemptOutcome,
        *,
        track: Track | None = None,
        track_id: str | None = None,
        detail: str | None = None,
        at: datetime | None = None,
    ) -> SubmissionAttempt:
        return await self._attempt_repo.add(
            SubmissionAttempt.for_track(
                identity.id,
                outcome,
                track_id=track_id,
                track=track,
                error_detail=detail,
                timestamp=at or self._clock(),
            )
        )

    async def _reject(
        self,
        identity: Identity,
        error: DomainError,
        outcome: AttemptOutcome,
        *,
        track: Track | None = None,
        track_id: str | None = None,
    ) -> DomainError:
        """Audit a rejection and hand the error back for the caller to raise."""
        await self._record(identity, outcome, track=track, track_id=track_id, detail=error.message)
        logger.info(LogTemplates.ADMISSION_REJECTED, identity.id, error.code, error.message)
        return error
