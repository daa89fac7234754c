"""Core domain entities for the voting bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from party_queue.domain.shared.datetime_utils import utcnow
from party_queue.domain.shared.types import IdentityToken, TrackIdStr, UtcDatetimeField
from party_queue.domain.voting.value_objects import VoteDirection


class TrackVote(BaseModel):
    """A guest's signed vote on a queued track. Unique per (track, identity)."""

    model_config = ConfigDict(frozen=True)

    track_id: TrackIdStr
    identity_id: IdentityToken
    direction: VoteDirection
    created_at: UtcDatetimeField = Field(default_factory=utcnow)

    def __hash__(self) -> int:
        return hash((self.track_id, self.identity_id))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrackVote):
            return NotImplemented
        return self.track_id == other.track_id and self.identity_id == other.identity_id

    @property
    def value(self) -> int:
        return self.direction.value
