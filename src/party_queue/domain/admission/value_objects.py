"""
Admission Domain Value Objects

Immutable value objects for the admission bounded context.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from party_queue.domain.shared.types import CooldownSeconds, NonNegativeInt


class AttemptOutcome(Enum):
    """Outcome recorded on every submission attempt."""

    SUCCESS = "success"  # Forwarded to the live queue
    BLOCKED = "blocked"  # Rejected by a gate (blocked device, auth, explicit, length, duplicate)
    RATE_LIMITED = "rate_limited"  # Cooldown active for the group
    BANNED = "banned"  # Track is on the ban list
    ERROR = "error"  # Upstream failure

    @property
    def is_success(self) -> bool:
        return self is AttemptOutcome.SUCCESS


class AdmissionConfig(BaseModel):
    """Typed view over the runtime key-value settings used by the core.

    Defaults apply when a key has never been written.
    """

    model_config = ConfigDict(frozen=True)

    queueing_enabled: bool = True
    prequeue_enabled: bool = False
    cooldown_enabled: bool = True
    cooldown_duration_seconds: CooldownSeconds = 300
    songs_before_cooldown: int = Field(default=1, ge=1)
    voting_enabled: bool = False
    voting_downvote_enabled: bool = True
    voting_auto_promote: bool = False
    ban_explicit: bool = False
    max_song_duration_seconds: NonNegativeInt = 0
    require_username: bool = False
    require_github_auth: bool = False
    require_google_auth: bool = False


class ModerationVerdict(BaseModel):
    """Result of running a track through the moderation gate."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: str | None = None
    outcome: AttemptOutcome | None = None

    @classmethod
    def allow(cls) -> ModerationVerdict:
        return cls(allowed=True)

    @classmethod
    def reject(cls, reason: str, outcome: AttemptOutcome) -> ModerationVerdict:
        return cls(allowed=False, reason=reason, outcome=outcome)


class CooldownDecision(BaseModel):
    """Result of a cooldown check for a cooldown group."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    remaining_seconds: NonNegativeInt = 0
    # True when this check opened a new cooldown window on the group.
    stamped: bool = False

    @classmethod
    def allow(cls) -> CooldownDecision:
        return cls(allowed=True)

    @classmethod
    def reject(cls, remaining_seconds: int, stamped: bool = False) -> CooldownDecision:
        return cls(allowed=False, remaining_seconds=remaining_seconds, stamped=stamped)
