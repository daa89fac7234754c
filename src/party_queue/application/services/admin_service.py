"""Admin Service - privileged moderation and housekeeping operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from ...domain.admission.entities import BannedTrack, SubmissionAttempt
from ...domain.guests.entities import Identity
from ...domain.guests.value_objects import IdentityStatus
from ...domain.prequeue.value_objects import PrequeueStatus
from ...domain.shared.datetime_utils import Clock, utcnow
from ...domain.shared.exceptions import ConflictError, EntityNotFoundError, ValidationError
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.admission.repository import (
        BannedTrackRepository,
        SubmissionAttemptRepository,
    )
    from ...domain.guests.repository import IdentityRepository
    from ...domain.prequeue.repository import PrequeueRepository
    from ...domain.voting.repository import TrackVoteRepository
    from ..interfaces.maintenance import GuestDataMaintenance
    from .configuration import ConfigurationService
    from .cooldown_engine import CooldownEngine
    from .identity_ledger import IdentityLedger
    from .queue_view import QueueView

logger = logging.getLogger(__name__)

RECENT_ATTEMPTS_LIMIT = 50


class DeviceSummary(BaseModel):
    identity: Identity
    cooldown_remaining: int = 0
    attempt_count: int = 0


class DeviceDetail(BaseModel):
    identity: Identity
    cooldown_remaining: int = 0
    recent_attempts: list[SubmissionAttempt] = Field(default_factory=list)


class AdminStats(BaseModel):
    devices_total: int = 0
    devices_active: int = 0
    devices_blocked: int = 0
    devices_cooling_down: int = 0
    attempts_total: int = 0
    attempts_successful: int = 0
    prequeue_pending: int = 0
    votes_total: int = 0


class AdminService:
    """Device moderation, the ban list, stats and the bulk data reset."""

    def __init__(
        self,
        *,
        identity_repository: IdentityRepository,
        identity_ledger: IdentityLedger,
        attempt_repository: SubmissionAttemptRepository,
        banned_track_repository: BannedTrackRepository,
        prequeue_repository: PrequeueRepository,
        vote_repository: TrackVoteRepository,
        cooldown_engine: CooldownEngine,
        configuration: ConfigurationService,
        maintenance: GuestDataMaintenance,
        queue_view: QueueView | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._identity_repo = identity_repository
        self._ledger = identity_ledger
        self._attempt_repo = attempt_repository
        self._banned_repo = banned_track_repository
        self._prequeue_repo = prequeue_repository
        self._vote_repo = vote_repository
        self._cooldown = cooldown_engine
        self._configuration = configuration
        self._maintenance = maintenance
        self._queue_view = queue_view
        self._clock = clock

    # === Devices ===

    async def list_devices(self) -> list[DeviceSummary]:
        config = await self._configuration.admission_config()
        summaries = []
        for identity in await self._identity_repo.list_all():
            summaries.append(
                DeviceSummary(
                    identity=identity,
                    cooldown_remaining=await self._cooldown.remaining(identity, config),
                    attempt_count=await self._attempt_repo.count_for_identity(identity.id),
                )
            )
        return summaries

    async def get_device(self, identity_id: str) -> DeviceDetail:
        identity = await self._ledger.get(identity_id)
        config = await self._configuration.admission_config()
        return DeviceDetail(
            identity=identity,
            cooldown_remaining=await self._cooldown.remaining(identity, config),
            recent_attempts=await self._attempt_repo.list_for_identity(
                identity_id, RECENT_ATTEMPTS_LIMIT
            ),
        )

    async def reset_cooldown(self, identity_id: str) -> None:
        await self._cooldown.reset_cooldown(identity_id)

    async def reset_all_cooldowns(self) -> int:
        return await self._cooldown.reset_all_cooldowns()

    async def block(self, identity_id: str) -> None:
        await self._ledger.block(identity_id)

    async def unblock(self, identity_id: str) -> None:
        await self._ledger.unblock(identity_id)

    # === Ban list ===

    async def list_banned_tracks(self) -> list[BannedTrack]:
        return await self._banned_repo.list_all()

    async def ban_track(
        self, track_id: str, artist_id: str | None = None, reason: str | None = None
    ) -> BannedTrack:
        if not track_id or not track_id.strip():
            raise ValidationError(ErrorMessages.EMPTY_TRACK_ID, field="track_id")

        banned = BannedTrack(
            track_id=track_id.strip(),
            artist_id=artist_id or None,
            reason=reason or None,
            created_at=self._clock(),
        )
        if not await self._banned_repo.add(banned):
            raise ConflictError(ErrorMessages.TRACK_ALREADY_BANNED)

        logger.info(LogTemplates.TRACK_BANNED, banned.track_id)
        return banned

    async def unban_track(self, track_id: str) -> None:
        if not await self._banned_repo.remove(track_id):
            raise EntityNotFoundError("BannedTrack", track_id)
        logger.info(LogTemplates.TRACK_UNBANNED, track_id)

    # === Housekeeping ===

    async def stats(self) -> AdminStats:
        by_status = await self._identity_repo.count_by_status()
        pending = await self._prequeue_repo.list_by_status(PrequeueStatus.PENDING)
        return AdminStats(
            devices_total=sum(by_status.values()),
            devices_active=by_status.get(IdentityStatus.ACTIVE, 0),
            devices_blocked=by_status.get(IdentityStatus.BLOCKED, 0),
            devices_cooling_down=await self._identity_repo.count_cooling_down(self._clock()),
            attempts_total=await self._attempt_repo.count(),
            attempts_successful=await self._attempt_repo.count(successful_only=True),
            prequeue_pending=len(pending),
            votes_total=await self._vote_repo.count(),
        )

    async def reset_all_data(self) -> dict[str, int]:
        """Wipe all guest data in one transaction. Runtime config survives."""
        removed = await self._maintenance.reset_guest_data()
        if self._queue_view is not None:
            self._queue_view.invalidate()
        return removed
