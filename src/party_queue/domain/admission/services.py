"""
Admission Domain Services

Stateless rules for moderation and cooldown accounting.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from party_queue.domain.admission.value_objects import (
    AdmissionConfig,
    AttemptOutcome,
    CooldownDecision,
    ModerationVerdict,
)
from party_queue.domain.guests.entities import Identity
from party_queue.domain.music.entities import Track
from party_queue.domain.shared.datetime_utils import seconds_until
from party_queue.domain.shared.messages import ErrorMessages


class ModerationGate:
    """Predicate engine deciding whether a track may be requested at all.

    Checks run in a fixed order and the first failing check wins:

    1. the track is on the ban list
    2. explicit content while ``ban_explicit`` is on
    3. duration above a positive ``max_song_duration_seconds``
    """

    @staticmethod
    def check_banned(banned: bool) -> ModerationVerdict:
        """Ban-list check alone, usable before track metadata has been fetched."""
        if banned:
            return ModerationVerdict.reject(ErrorMessages.TRACK_NOT_ALLOWED, AttemptOutcome.BANNED)
        return ModerationVerdict.allow()

    @classmethod
    def evaluate(cls, track: Track, config: AdmissionConfig, *, banned: bool) -> ModerationVerdict:
        verdict = cls.check_banned(banned)
        if not verdict.allowed:
            return verdict

        if config.ban_explicit and track.explicit:
            return ModerationVerdict.reject(
                ErrorMessages.EXPLICIT_NOT_ALLOWED, AttemptOutcome.BLOCKED
            )

        if track.exceeds_duration(config.max_song_duration_seconds):
            return ModerationVerdict.reject(ErrorMessages.TRACK_TOO_LONG, AttemptOutcome.BLOCKED)

        return ModerationVerdict.allow()

    @staticmethod
    def filter_search_results(tracks: Iterable[Track], config: AdmissionConfig) -> list[Track]:
        """Drop tracks that admission would reject for explicit content."""
        if not config.ban_explicit:
            return list(tracks)
        return [t for t in tracks if not t.explicit]


class CooldownPolicy:
    """Pure cooldown arithmetic over a cooldown group.

    The application-level ``CooldownEngine`` supplies the group members and
    the windowed success count; this class decides.
    """

    @staticmethod
    def window_starts(
        group: Iterable[Identity], now: datetime, config: AdmissionConfig
    ) -> dict[str, datetime]:
        """Start of the trailing window per member; successes strictly after it count.

        A moderator reset moves the start forward for the reset member only.
        """
        start = now - timedelta(seconds=config.cooldown_duration_seconds)
        return {
            m.id: max(start, m.cooldown_reset_at) if m.cooldown_reset_at else start
            for m in group
        }

    @staticmethod
    def active_expiry(group: Iterable[Identity], now: datetime) -> datetime | None:
        """Latest cooldown expiry still in the future across the group, if any."""
        expiries = [
            m.cooldown_expires_at
            for m in group
            if m.cooldown_expires_at is not None and m.cooldown_expires_at > now
        ]
        return max(expiries) if expiries else None

    @classmethod
    def evaluate(
        cls,
        group: list[Identity],
        success_count: int | None,
        now: datetime,
        config: AdmissionConfig,
    ) -> CooldownDecision:
        """Decide admission for a group.

        Args:
            group: Every identity in the cooldown group.
            success_count: Successes inside the trailing window, or None to
                skip the window check (only the stamped expiry is consulted).
            now: Current time.
            config: Runtime admission config.
        """
        if not config.cooldown_enabled:
            return CooldownDecision.allow()

        expiry = cls.active_expiry(group, now)
        if expiry is not None:
            return CooldownDecision.reject(seconds_until(expiry, now))

        if success_count is not None and cls.threshold_reached(success_count, config):
            return CooldownDecision.reject(config.cooldown_duration_seconds, stamped=True)

        return CooldownDecision.allow()

    @staticmethod
    def threshold_reached(success_count: int, config: AdmissionConfig) -> bool:
        return success_count >= config.songs_before_cooldown

    @staticmethod
    def new_expiry(now: datetime, config: AdmissionConfig) -> datetime:
        return now + timedelta(seconds=config.cooldown_duration_seconds)
