"""Centralized constants for configuration keys, database schema, and other shared values.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations


class ConfigKeys:
    """Runtime configuration keys stored in the ``config`` table.

    Values are strings; booleans are stored as ``"true"``/``"false"``.
    """

    QUEUEING_ENABLED = "queueing_enabled"
    PREQUEUE_ENABLED = "prequeue_enabled"
    FINGERPRINTING_ENABLED = "fingerprinting_enabled"
    COOLDOWN_DURATION = "cooldown_duration"
    SONGS_BEFORE_COOLDOWN = "songs_before_cooldown"
    VOTING_ENABLED = "voting_enabled"
    VOTING_DOWNVOTE_ENABLED = "voting_downvote_enabled"
    VOTING_AUTO_PROMOTE = "voting_auto_promote"
    BAN_EXPLICIT = "ban_explicit"
    MAX_SONG_DURATION = "max_song_duration"
    REQUIRE_USERNAME = "require_username"
    REQUIRE_GITHUB_AUTH = "require_github_auth"
    REQUIRE_GOOGLE_AUTH = "require_google_auth"

    BOOLEAN_KEYS = frozenset(
        {
            QUEUEING_ENABLED,
            PREQUEUE_ENABLED,
            FINGERPRINTING_ENABLED,
            VOTING_ENABLED,
            VOTING_DOWNVOTE_ENABLED,
            VOTING_AUTO_PROMOTE,
            BAN_EXPLICIT,
            REQUIRE_USERNAME,
            REQUIRE_GITHUB_AUTH,
            REQUIRE_GOOGLE_AUTH,
        }
    )
    INTEGER_KEYS = frozenset({COOLDOWN_DURATION, SONGS_BEFORE_COOLDOWN, MAX_SONG_DURATION})
    ALL = BOOLEAN_KEYS | INTEGER_KEYS

    # Keys whose change alters the guest-facing queue projection.
    QUEUE_VIEW_KEYS = frozenset({VOTING_ENABLED, VOTING_AUTO_PROMOTE})


class AuthProviders:
    """External login providers an identity can be linked through."""

    GITHUB = "github"
    GOOGLE = "google"

    DISPLAY_NAMES = {GITHUB: "GitHub", GOOGLE: "Google"}


class DatabaseTables:
    """Database table names."""

    IDENTITIES = "identities"
    SUBMISSION_ATTEMPTS = "submission_attempts"
    BANNED_TRACKS = "banned_tracks"
    PREQUEUE_ENTRIES = "prequeue_entries"
    TRACK_VOTES = "track_votes"
    CONFIG = "config"


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration.

    These pragmas are applied to each connection to ensure consistent behavior.
    """

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"
    TABLE_INFO = "PRAGMA table_info({table})"
    PAGE_COUNT = "PRAGMA page_count"
    PAGE_SIZE = "PRAGMA page_size"


class QueueViewDefaults:
    CACHE_TTL_SECONDS = 20.0
    UPSTREAM_TIMEOUT_SECONDS = 10.0
