"""Core domain entities for the admission bounded context."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from party_queue.domain.admission.value_objects import AttemptOutcome
from party_queue.domain.music.entities import Track
from party_queue.domain.shared.datetime_utils import utcnow
from party_queue.domain.shared.types import IdentityToken, TrackIdStr, UtcDatetimeField


class SubmissionAttempt(BaseModel):
    """Append-only audit record of one admission decision.

    The log doubles as the source of truth for cooldown accounting: only
    ``SUCCESS`` rows inside the trailing window count toward the limit.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    identity_id: IdentityToken
    track_id: TrackIdStr | None = None
    track_name: str | None = None
    artist_name: str | None = None
    outcome: AttemptOutcome
    error_detail: str | None = None
    timestamp: UtcDatetimeField = Field(default_factory=utcnow)

    @classmethod
    def for_track(
        cls,
        identity_id: str,
        outcome: AttemptOutcome,
        *,
        track_id: str | None = None,
        track: Track | None = None,
        error_detail: str | None = None,
        timestamp: datetime | None = None,
    ) -> SubmissionAttempt:
        """Build an attempt row, copying name and artist from ``track`` when known."""
        return cls(
            identity_id=identity_id,
            track_id=track.id if track is not None else track_id,
            track_name=track.name if track is not None else None,
            artist_name=track.artists if track is not None else None,
            outcome=outcome,
            error_detail=error_detail,
            timestamp=timestamp or utcnow(),
        )


class BannedTrack(BaseModel):
    """A track moderators have removed from the request pool."""

    model_config = ConfigDict(frozen=True)

    track_id: TrackIdStr
    artist_id: str | None = None
    reason: str | None = None
    created_at: UtcDatetimeField = Field(default_factory=utcnow)
