"""SQLite repository implementations."""

from party_queue.infrastructure.persistence.repositories.attempt_repository import (
    SQLiteBannedTrackRepository,
    SQLiteSubmissionAttemptRepository,
)
from party_queue.infrastructure.persistence.repositories.config_repository import (
    SQLiteConfigRepository,
)
from party_queue.infrastructure.persistence.repositories.identity_repository import (
    SQLiteIdentityRepository,
)
from party_queue.infrastructure.persistence.repositories.maintenance_repository import (
    SQLiteGuestDataMaintenance,
)
from party_queue.infrastructure.persistence.repositories.prequeue_repository import (
    SQLitePrequeueRepository,
)
from party_queue.infrastructure.persistence.repositories.vote_repository import (
    SQLiteTrackVoteRepository,
)

__all__ = [
    "SQLiteIdentityRepository",
    "SQLiteSubmissionAttemptRepository",
    "SQLiteBannedTrackRepository",
    "SQLitePrequeueRepository",
    "SQLiteTrackVoteRepository",
    "SQLiteConfigRepository",
    "SQLiteGuestDataMaintenance",
]
