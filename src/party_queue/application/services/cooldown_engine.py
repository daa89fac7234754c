"""Cooldown Engine - per-group rate limiting backed by the audit log."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from ...domain.admission.services import CooldownPolicy
from ...domain.admission.value_objects import CooldownDecision
from ...domain.shared.datetime_utils import Clock, UtcDateTime, utcnow
from ...domain.shared.exceptions import EntityNotFoundError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.admission.repository import SubmissionAttemptRepository
    from ...domain.admission.value_objects import AdmissionConfig
    from ...domain.guests.entities import Identity
    from ...domain.guests.repository import IdentityRepository
    from .identity_ledger import IdentityLedger

logger = logging.getLogger(__name__)


class CooldownEngine:
    """Decides whether a cooldown group may submit now and stamps cooldowns.

    Callers wrap the whole check, forward, audit and stamp sequence in
    ``admission(identity)`` so that two submissions from one group can never
    both pass the check before either is recorded.
    """

    def __init__(
        self,
        *,
        identity_ledger: IdentityLedger,
        identity_repository: IdentityRepository,
        attempt_repository: SubmissionAttemptRepository,
        clock: Clock = utcnow,
    ) -> None:
        self._ledger = identity_ledger
        self._identity_repo = identity_repository
        self._attempt_repo = attempt_repository
        self._clock = clock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, group_key: str) -> asyncio.Lock:
        lock = self._locks.get(group_key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[group_key] = lock
        return lock

    @asynccontextmanager
    async def admission(self, identity: Identity) -> AsyncIterator[None]:
        """Serialize admission decisions for ``identity``'s cooldown group."""
        lock = self._lock_for(identity.group_key)
        async with lock:
            yield

    async def check(self, identity: Identity, config: AdmissionConfig) -> CooldownDecision:
        """Run the cooldown algorithm for the identity's whole group.

        Used before forwarding (a rejection means the submission is refused)
        and again after a successful forward (a rejection then only means the
        group has just been put on cooldown). When the windowed success count
        reaches the threshold, every member is stamped.
        """
        if not config.cooldown_enabled:
            return CooldownDecision.allow()

        group = await self._ledger.cooldown_group(identity)
        now = self._clock()

        decision = CooldownPolicy.evaluate(group, None, now, config)
        if not decision.allowed:
            return decision

        count = await self._attempt_repo.count_successes_since(
            CooldownPolicy.window_starts(group, now, config)
        )
        decision = CooldownPolicy.evaluate(group, count, now, config)
        if decision.stamped:
            expires_at = CooldownPolicy.new_expiry(now, config)
            await self._identity_repo.set_cooldown([m.id for m in group], expires_at)
            logger.info(LogTemplates.COOLDOWN_STAMPED, len(group), UtcDateTime(expires_at).iso)
        return decision

    async def remaining(self, identity: Identity, config: AdmissionConfig) -> int:
        """Seconds left on the identity's own cooldown, 0 when none or disabled."""
        if not config.cooldown_enabled:
            return 0
        return identity.cooldown_remaining(self._clock())

    async def reset_cooldown(self, identity_id: str) -> None:
        if not await self._identity_repo.clear_cooldown(identity_id, self._clock()):
            raise EntityNotFoundError("Identity", identity_id)
        logger.info(LogTemplates.COOLDOWN_RESET, identity_id)

    async def reset_all_cooldowns(self) -> int:
        cleared = await self._identity_repo.clear_all_cooldowns(self._clock())
        logger.info(LogTemplates.COOLDOWN_RESET_ALL, cleared)
        return cleared
