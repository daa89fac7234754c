"""Queue View - cached, vote-annotated projection of the live playback queue."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ...domain.music.entities import LiveQueue, Track
from ...domain.shared.constants import QueueViewDefaults
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.exceptions import UpstreamFailureError
from ...domain.shared.messages import LogTemplates
from ...domain.voting.services import VotingDomainService
from .upstream import call_upstream

if TYPE_CHECKING:
    from ...domain.admission.repository import SubmissionAttemptRepository
    from ...domain.voting.repository import TrackVoteRepository
    from ..interfaces.catalog import MusicCatalog
    from .configuration import ConfigurationService

logger = logging.getLogger(__name__)


class AnnotatedTrack(BaseModel):
    model_config = ConfigDict(frozen=True)

    track: Track
    votable: bool = False
    net_votes: int = 0


class QueueSnapshot(BaseModel):
    """What guests see: the current track and the upcoming queue.

    ``stale`` is True when the upstream read failed and this is the last good
    snapshot served in its place.
    """

    model_config = ConfigDict(frozen=True)

    currently_playing: AnnotatedTrack | None = None
    queue: list[AnnotatedTrack] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=utcnow)
    stale: bool = False


class QueueView:
    """Single-entry TTL cache in front of ``MusicCatalog.read_live_queue``.

    Concurrent misses share one in-flight read. A failed read falls back to
    the last good snapshot regardless of its age.
    """

    def __init__(
        self,
        *,
        catalog: MusicCatalog,
        configuration: ConfigurationService,
        attempt_repository: SubmissionAttemptRepository,
        vote_repository: TrackVoteRepository,
        ttl_seconds: float = QueueViewDefaults.CACHE_TTL_SECONDS,
        upstream_timeout_seconds: float = QueueViewDefaults.UPSTREAM_TIMEOUT_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._catalog = catalog
        self._configuration = configuration
        self._attempt_repo = attempt_repository
        self._vote_repo = vote_repository
        self._ttl = ttl_seconds
        self._timeout = upstream_timeout_seconds
        self._monotonic = monotonic

        self._snapshot: QueueSnapshot | None = None
        self._stored_at: float = 0.0
        self._fresh = False
        # Bumped on invalidate; a read from an older generation is neither stored nor joined.
        self._generation = 0
        self._inflight: asyncio.Task[QueueSnapshot] | None = None
        self._inflight_generation = 0
        self._hits = 0
        self._misses = 0

    async def get(self) -> QueueSnapshot:
        """Return the current snapshot, reading upstream on a miss.

        Raises:
            UpstreamFailureError: The read failed and nothing is cached.
        """
        if self._fresh and self._snapshot is not None:
            age = self._monotonic() - self._stored_at
            if age < self._ttl:
                self._hits += 1
                logger.debug(LogTemplates.CACHE_HIT, age)
                return self._snapshot

        self._misses += 1

        task = self._inflight
        if task is not None and self._inflight_generation == self._generation:
            logger.debug(LogTemplates.CACHE_JOIN_INFLIGHT)
        else:
            # Runs as its own task so a cancelled caller never cancels the read.
            task = asyncio.ensure_future(self._read(self._generation))
            task.add_done_callback(self._read_done)
            self._inflight = task
            self._inflight_generation = self._generation

        return await asyncio.shield(task)

    async def _read(self, generation: int) -> QueueSnapshot:
        try:
            snapshot = await self._build()
        except UpstreamFailureError as exc:
            if self._snapshot is not None:
                logger.warning(LogTemplates.QUEUE_READ_FAILED_STALE, exc)
                return self._snapshot.model_copy(update={"stale": True})
            logger.error(LogTemplates.QUEUE_READ_FAILED, exc)
            raise

        if generation == self._generation:
            self._store(snapshot)
        return snapshot

    def _read_done(self, task: asyncio.Task[QueueSnapshot]) -> None:
        if self._inflight is task:
            self._inflight = None
        # Retrieved here since every caller may have been cancelled.
        if not task.cancelled():
            task.exception()

    async def now_playing(self) -> AnnotatedTrack | None:
        """The currently playing track, or None when nothing plays or upstream is down."""
        try:
            snapshot = await self.get()
        except UpstreamFailureError:
            return None
        return snapshot.currently_playing

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next read goes upstream.

        The last good snapshot is kept as the stale fallback.
        """
        self._fresh = False
        self._generation += 1
        logger.debug(LogTemplates.CACHE_INVALIDATED)

    def get_cache_stats(self) -> dict[str, int]:
        return {
            "hits": self._hits,
            "misses": self._misses,
            "cached": int(self._snapshot is not None),
            "inflight": int(self._inflight is not None),
        }

    def _store(self, snapshot: QueueSnapshot) -> None:
        self._snapshot = snapshot
        self._stored_at = self._monotonic()
        self._fresh = True

    async def _build(self) -> QueueSnapshot:
        live: LiveQueue = await call_upstream(
            "read_live_queue", self._catalog.read_live_queue(), self._timeout
        )
        config = await self._configuration.admission_config()

        votable_ids = await self._attempt_repo.tracks_with_success(live.track_ids)
        net_by_track = await self._vote_repo.net_by_track()

        def annotate(track: Track) -> AnnotatedTrack:
            return AnnotatedTrack(
                track=track,
                votable=track.id in votable_ids,
                net_votes=net_by_track.get(track.id, 0),
            )

        queue = [annotate(t) for t in live.queue]
        if config.voting_enabled and config.voting_auto_promote:
            queue = VotingDomainService.order_by_votes(
                queue,
                is_votable=lambda item: item.votable,
                net_votes=lambda item: item.net_votes,
            )

        current = live.currently_playing
        return QueueSnapshot(
            currently_playing=annotate(current) if current is not None else None,
            queue=queue,
        )
