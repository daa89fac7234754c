import asyncio
import re
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from party_queue.application.interfaces.catalog import MusicCatalog
from party_queue.domain.music.entities import LiveQueue, Track

# ============================================================================
# Test Doubles
# ============================================================================


class FakeClock:
    """Manually advanced clock, callable like ``utcnow``."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 6, 1, 20, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


_SHARE_URL = re.compile(r"open\.spotify\.com/track/([A-Za-z0-9]+)")
_URI = re.compile(r"^spotify:track:([A-Za-z0-9]+)$")


class FakeCatalog(MusicCatalog):
    """In-memory music service that records what was forwarded to it."""

    def __init__(self) -> None:
        self.tracks: dict[str, Track] = {}
        self.currently_playing: Track | None = None
        self.queue: list[Track] = []
        self.enqueued: list[str] = []
        self.search_calls: list[tuple[str, int]] = []
        self.get_track_calls = 0
        self.read_calls = 0
        self.read_delay = 0.0
        self.fail_enqueue: Exception | None = None
        self.fail_get_track: Exception | None = None
        self.fail_read: Exception | None = None

    def add_track(
        self,
        track_id: str,
        name: str | None = None,
        artists: str = "Test Artist",
        duration_ms: int = 180_000,
        explicit: bool = False,
    ) -> Track:
        track = Track(
            id=track_id,
            uri=f"spotify:track:{track_id}",
            name=name or f"Song {track_id}",
            artists=artists,
            duration_ms=duration_ms,
            explicit=explicit,
        )
        self.tracks[track_id] = track
        return track

    async def search_tracks(self, query: str, limit: int = 10) -> list[Track]:
        self.search_calls.append((query, limit))
        matches = [t for t in self.tracks.values() if query.lower() in t.name.lower()]
        return matches[:limit]

    async def get_track(self, track_id: str) -> Track:
        self.get_track_calls += 1
        if self.fail_get_track is not None:
            raise self.fail_get_track
        return self.tracks[track_id]

    def parse_track_reference(self, reference: str) -> str | None:
        match = _SHARE_URL.search(reference) or _URI.match(reference)
        return match.group(1) if match else None

    async def enqueue(self, track_uri: str) -> None:
        if self.fail_enqueue is not None:
            raise self.fail_enqueue
        self.enqueued.append(track_uri)
        for track in self.tracks.values():
            if track.uri == track_uri:
                self.queue.append(track)
                break

    async def read_live_queue(self) -> LiveQueue:
        self.read_calls += 1
        # State as of the request, like a real player API.
        live = LiveQueue(currently_playing=self.currently_playing, queue=list(self.queue))
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.fail_read is not None:
            raise self.fail_read
        return live


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from party_queue.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def identity_repository(in_memory_database):
    from party_queue.infrastructure.persistence.repositories import SQLiteIdentityRepository

    return SQLiteIdentityRepository(in_memory_database)


@pytest_asyncio.fixture
async def attempt_repository(in_memory_database):
    from party_queue.infrastructure.persistence.repositories import (
        SQLiteSubmissionAttemptRepository,
    )

    return SQLiteSubmissionAttemptRepository(in_memory_database)


@pytest_asyncio.fixture
async def banned_track_repository(in_memory_database):
    from party_queue.infrastructure.persistence.repositories import SQLiteBannedTrackRepository

    return SQLiteBannedTrackRepository(in_memory_database)


@pytest_asyncio.fixture
async def prequeue_repository(in_memory_database):
    from party_queue.infrastructure.persistence.repositories import SQLitePrequeueRepository

    return SQLitePrequeueRepository(in_memory_database)


@pytest_asyncio.fixture
async def vote_repository(in_memory_database):
    from party_queue.infrastructure.persistence.repositories import SQLiteTrackVoteRepository

    return SQLiteTrackVoteRepository(in_memory_database)


@pytest_asyncio.fixture
async def config_repository(in_memory_database):
    from party_queue.infrastructure.persistence.repositories import SQLiteConfigRepository

    return SQLiteConfigRepository(in_memory_database)


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest_asyncio.fixture
async def container(clock, catalog):
    """Fully wired container over a private in-memory database."""
    from party_queue.config.container import create_container
    from party_queue.config.settings import DatabaseSettings, Settings

    settings = Settings(
        environment="test",
        database=DatabaseSettings(url="sqlite:///:memory:"),
    )
    c = create_container(settings, clock=clock)
    c.set_catalog(catalog)
    await c.initialize()
    yield c
    await c.shutdown()


@pytest.fixture
def coordinator(container):
    return container.admission_coordinator


@pytest.fixture
def configuration(container):
    return container.configuration_service


@pytest.fixture
def identity_ledger(container):
    return container.identity_ledger


@pytest.fixture
def admin(container):
    return container.admin_service
