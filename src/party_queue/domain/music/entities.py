"""Catalog value objects returned by the external music service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from party_queue.domain.shared.types import DurationMs, TrackIdStr, TrackNameStr


class Track(BaseModel):
    """Immutable value object describing a catalog track."""

    model_config = ConfigDict(frozen=True)

    id: TrackIdStr
    uri: str
    name: TrackNameStr = ""
    artists: TrackNameStr = ""
    album_art: str | None = None
    duration_ms: DurationMs = 0
    explicit: bool = False

    @property
    def display_title(self) -> str:
        if self.artists:
            return f"{self.name} - {self.artists}"
        return self.name

    def exceeds_duration(self, max_seconds: int) -> bool:
        """True when a positive ``max_seconds`` cap is set and this track is longer."""
        return max_seconds > 0 and self.duration_ms > max_seconds * 1000


class LiveQueue(BaseModel):
    """Snapshot of the external player: the current track plus upcoming tracks."""

    model_config = ConfigDict(frozen=True)

    currently_playing: Track | None = None
    queue: list[Track] = Field(default_factory=list)

    def contains(self, track_id: str) -> bool:
        if self.currently_playing is not None and self.currently_playing.id == track_id:
            return True
        return any(t.id == track_id for t in self.queue)

    @property
    def track_ids(self) -> list[str]:
        ids = [t.id for t in self.queue]
        if self.currently_playing is not None:
            ids.append(self.currently_playing.id)
        return ids
