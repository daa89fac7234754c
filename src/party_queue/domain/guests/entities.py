"""Core domain entities for the guests bounded context."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from party_queue.domain.guests.value_objects import IdentityStatus
from party_queue.domain.shared.datetime_utils import seconds_until, utcnow
from party_queue.domain.shared.types import IdentityToken, UtcDatetimeField


class Identity(BaseModel):
    """A tracked guest, keyed by an opaque per-device token.

    ``linked_account_id`` is set once an external login is attached. Every
    identity sharing it belongs to the same cooldown group.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: IdentityToken
    first_seen_at: UtcDatetimeField = Field(default_factory=utcnow)
    last_submit_at: UtcDatetimeField | None = None
    cooldown_expires_at: UtcDatetimeField | None = None
    # Successes at or before this instant no longer count toward the cooldown window.
    cooldown_reset_at: UtcDatetimeField | None = None
    status: IdentityStatus = IdentityStatus.ACTIVE
    display_name: str | None = None
    linked_account_id: str | None = None
    auth_providers: frozenset[str] = Field(default_factory=frozenset)

    @property
    def is_blocked(self) -> bool:
        return self.status == IdentityStatus.BLOCKED

    @property
    def group_key(self) -> str:
        """Key that identifies this identity's cooldown group."""
        if self.linked_account_id:
            return f"account:{self.linked_account_id}"
        return f"identity:{self.id}"

    def is_cooling_down(self, now: datetime) -> bool:
        return self.cooldown_expires_at is not None and self.cooldown_expires_at > now

    def cooldown_remaining(self, now: datetime) -> int:
        if not self.is_cooling_down(now):
            return 0
        assert self.cooldown_expires_at is not None
        return seconds_until(self.cooldown_expires_at, now)

    def has_provider(self, provider: str) -> bool:
        return provider in self.auth_providers
