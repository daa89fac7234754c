"""Core domain entities for the prequeue bounded context."""

from __future__ import annotations

import secrets

from pydantic import BaseModel, ConfigDict, Field

from party_queue.domain.music.entities import Track
from party_queue.domain.prequeue.value_objects import PrequeueStatus
from party_queue.domain.shared.datetime_utils import utcnow
from party_queue.domain.shared.exceptions import InvalidTransitionError
from party_queue.domain.shared.types import IdentityToken, TrackIdStr, UtcDatetimeField


def new_entry_id() -> str:
    return secrets.token_hex(8)


class PrequeueEntry(BaseModel):
    """A guest submission held back until a moderator decides on it.

    Entries are immutable; ``approve`` and ``decline`` return the transitioned
    copy and raise ``InvalidTransitionError`` once the entry is terminal.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_entry_id)
    identity_id: IdentityToken
    track_id: TrackIdStr
    track_name: str = ""
    artist_name: str = ""
    album_art: str | None = None
    status: PrequeueStatus = PrequeueStatus.PENDING
    approved_by: str | None = None
    created_at: UtcDatetimeField = Field(default_factory=utcnow)

    @classmethod
    def from_track(cls, identity_id: str, track: Track) -> PrequeueEntry:
        return cls(
            identity_id=identity_id,
            track_id=track.id,
            track_name=track.name,
            artist_name=track.artists,
            album_art=track.album_art,
        )

    @property
    def is_pending(self) -> bool:
        return self.status is PrequeueStatus.PENDING

    def approve(self, approved_by: str) -> PrequeueEntry:
        return self._transition(PrequeueStatus.APPROVED, approved_by, "approve")

    def decline(self, approved_by: str) -> PrequeueEntry:
        return self._transition(PrequeueStatus.DECLINED, approved_by, "decline")

    def _transition(
        self, target: PrequeueStatus, approved_by: str, operation: str
    ) -> PrequeueEntry:
        if not self.status.can_transition_to(target):
            raise InvalidTransitionError(operation, self.status.value)
        return self.model_copy(update={"status": target, "approved_by": approved_by})
