"""Prequeue Workflow - submissions held for moderator approval."""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import TYPE_CHECKING

from ...domain.admission.entities import SubmissionAttempt
from ...domain.admission.value_objects import AttemptOutcome
from ...domain.prequeue.entities import PrequeueEntry
from ...domain.prequeue.value_objects import PrequeueStatus
from ...domain.shared.datetime_utils import Clock, utcnow
from ...domain.shared.exceptions import (
    AlreadyProcessedError,
    ConflictError,
    EntityNotFoundError,
    UpstreamFailureError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from .upstream import DEFAULT_TIMEOUT_SECONDS, call_upstream

if TYPE_CHECKING:
    from ...domain.admission.repository import SubmissionAttemptRepository
    from ...domain.guests.entities import Identity
    from ...domain.guests.repository import IdentityRepository
    from ...domain.music.entities import Track
    from ...domain.prequeue.repository import PrequeueRepository
    from ..interfaces.catalog import MusicCatalog
    from .configuration import ConfigurationService
    from .cooldown_engine import CooldownEngine
    from .queue_view import QueueView

logger = logging.getLogger(__name__)


class PrequeueWorkflow:
    """Pending → approved | declined, exactly once per entry.

    Approve and decline for the same entry are serialized in-process; the
    conditional update in ``PrequeueRepository.save_transition`` guards against
    anything that slips past the lock.
    """

    def __init__(
        self,
        *,
        prequeue_repository: PrequeueRepository,
        attempt_repository: SubmissionAttemptRepository,
        identity_repository: IdentityRepository,
        catalog: MusicCatalog | None,
        configuration: ConfigurationService,
        cooldown_engine: CooldownEngine,
        queue_view: QueueView | None = None,
        clock: Clock = utcnow,
        upstream_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._repo = prequeue_repository
        self._attempt_repo = attempt_repository
        self._identity_repo = identity_repository
        self._catalog = catalog
        self._configuration = configuration
        self._cooldown = cooldown_engine
        self._queue_view = queue_view
        self._clock = clock
        self._timeout = upstream_timeout_seconds
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def catalog(self) -> MusicCatalog:
        if self._catalog is None:
            raise RuntimeError(ErrorMessages.CATALOG_NOT_CONFIGURED)
        return self._catalog

    def _lock_for(self, entry_id: str) -> asyncio.Lock:
        lock = self._locks.get(entry_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[entry_id] = lock
        return lock

    async def submit(self, identity: Identity, track: Track) -> PrequeueEntry:
        """Hold a track for approval.

        Raises:
            ConflictError: The track is already pending, or already live.
        """
        if await self._repo.has_pending_for_track(track.id):
            raise ConflictError(ErrorMessages.ALREADY_PENDING)

        if await self._is_live(track.id):
            raise ConflictError(ErrorMessages.ALREADY_IN_QUEUE)

        entry = PrequeueEntry.from_track(identity.id, track).model_copy(
            update={"created_at": self._clock()}
        )
        if not await self._repo.add_pending(entry):
            raise ConflictError(ErrorMessages.ALREADY_PENDING)

        logger.info(LogTemplates.PREQUEUE_SUBMITTED, entry.id, track.id)
        return entry

    async def approve(self, entry_id: str, approved_by: str = "admin") -> PrequeueEntry:
        """Forward a pending entry to the live queue and credit the submitter.

        Raises:
            EntityNotFoundError: Unknown entry.
            AlreadyProcessedError: The entry is no longer pending.
            UpstreamFailureError: The forward failed; the entry stays pending.
        """
        async with self._lock_for(entry_id):
            entry = await self.get(entry_id)
            if not entry.is_pending:
                raise AlreadyProcessedError(entry.id, entry.status.value)
            approved = entry.approve(approved_by)

            submitter = await self._identity_repo.get(entry.identity_id)
            if submitter is None:
                raise EntityNotFoundError("Identity", entry.identity_id)

            config = await self._configuration.admission_config()
            async with self._cooldown.admission(submitter):
                try:
                    track = await call_upstream(
                        "get_track", self.catalog.get_track(entry.track_id), self._timeout
                    )
                    await call_upstream("enqueue", self.catalog.enqueue(track.uri), self._timeout)
                except UpstreamFailureError as exc:
                    logger.error(
                        LogTemplates.ADMISSION_UPSTREAM_FAILED, entry.track_id, submitter.id, exc
                    )
                    await self._attempt_repo.add(
                        SubmissionAttempt(
                            identity_id=submitter.id,
                            track_id=entry.track_id,
                            track_name=entry.track_name,
                            artist_name=entry.artist_name,
                            outcome=AttemptOutcome.ERROR,
                            error_detail=exc.message,
                            timestamp=self._clock(),
                        )
                    )
                    raise

                if not await self._repo.save_transition(approved):
                    current = await self.get(entry_id)
                    raise AlreadyProcessedError(entry.id, current.status.value)

                now = self._clock()
                await self._attempt_repo.add(
                    SubmissionAttempt(
                        identity_id=submitter.id,
                        track_id=entry.track_id,
                        track_name=entry.track_name,
                        artist_name=entry.artist_name,
                        outcome=AttemptOutcome.SUCCESS,
                        timestamp=now,
                    )
                )
                await self._identity_repo.record_submission(submitter.id, now)
                await self._cooldown.check(submitter, config)

        if self._queue_view is not None:
            self._queue_view.invalidate()
        logger.info(LogTemplates.PREQUEUE_APPROVED, entry.id, approved_by)
        return approved

    async def decline(self, entry_id: str, approved_by: str = "admin") -> PrequeueEntry:
        """Reject a pending entry. Nothing is forwarded and nothing is credited.

        Raises:
            EntityNotFoundError: Unknown entry.
            AlreadyProcessedError: The entry is no longer pending.
        """
        async with self._lock_for(entry_id):
            entry = await self.get(entry_id)
            if not entry.is_pending:
                raise AlreadyProcessedError(entry.id, entry.status.value)
            declined = entry.decline(approved_by)

            if not await self._repo.save_transition(declined):
                current = await self.get(entry_id)
                raise AlreadyProcessedError(entry.id, current.status.value)

        logger.info(LogTemplates.PREQUEUE_DECLINED, entry.id, approved_by)
        return declined

    async def get(self, entry_id: str) -> PrequeueEntry:
        entry = await self._repo.get(entry_id)
        if entry is None:
            raise EntityNotFoundError("PrequeueEntry", entry_id)
        return entry

    async def list_pending(self) -> list[PrequeueEntry]:
        return await self._repo.list_by_status(PrequeueStatus.PENDING)

    async def _is_live(self, track_id: str) -> bool:
        try:
            live = await call_upstream(
                "read_live_queue", self.catalog.read_live_queue(), self._timeout
            )
        except UpstreamFailureError as exc:
            logger.warning(LogTemplates.PREQUEUE_LIVE_CHECK_FAILED, exc)
            return False
        return live.contains(track_id)
