"""Centralized message constants for error messages, validation, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Identity Validation Errors
    EMPTY_IDENTITY_TOKEN = "Could not fingerprint your device."
    UNKNOWN_IDENTITY_TOKEN = "Invalid fingerprint"
    USERNAME_REQUIRED = "Username is required. Please refresh the page and enter your username."
    EMPTY_PROVIDER = "Login provider cannot be empty"
    EMPTY_EXTERNAL_ACCOUNT = "External account id cannot be empty"

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"
    TRACK_REFERENCE_REQUIRED = "Track ID or URL required"
    INVALID_TRACK_ID = "Invalid track ID"
    INVALID_TRACK_URL = (
        "Invalid track URL. Use format: https://open.spotify.com/track/TRACK_ID "
        "or spotify:track:TRACK_ID"
    )
    SEARCH_QUERY_REQUIRED = "Search query required"

    # Moderation Errors
    TRACK_NOT_ALLOWED = "This song is not allowed."
    EXPLICIT_NOT_ALLOWED = "Explicit songs are not allowed."
    TRACK_TOO_LONG = "Song is too long."
    TRACK_ALREADY_BANNED = "Track already banned"

    # Prequeue Errors
    ALREADY_PENDING = "This song is already pending approval."
    ALREADY_IN_QUEUE = "This song is already in the queue."

    # Voting Errors
    INVALID_VOTE_DIRECTION = "Vote direction must be 1 or -1"
    TRACK_NOT_VOTABLE = "Only songs queued by guests can be voted on."
    DOWNVOTES_DISABLED = "Downvotes are currently disabled."

    # Feature Gates
    FEATURE_QUEUEING = "Queueing"
    FEATURE_PREQUEUE = "Prequeue"
    FEATURE_VOTING = "Voting"

    # Config Errors
    UNKNOWN_CONFIG_KEY = "Unknown configuration key: {key}"
    INVALID_CONFIG_VALUE = "Invalid value for {key}: {value!r}"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Database Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Wiring Errors
    CATALOG_NOT_CONFIGURED = "Music catalog not configured. Call set_catalog() first."

    # CLI Errors
    RESET_CONFIRMATION_REQUIRED = "Refusing to wipe guest data without --yes"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"
    DATABASE_STATS_FAILED = "Failed to collect database stats: %r"
    TABLE_MIGRATED = "Migrated table %s: added column %s"
    DATA_RESET = "All guest data reset: %s attempts, %s identities, %s bans removed"

    # Identity Operations
    IDENTITY_CREATED = "Created identity %s"
    IDENTITY_LINKED = "Linked identity %s to %s account"
    IDENTITY_BLOCKED = "Blocked identity %s"
    IDENTITY_UNBLOCKED = "Unblocked identity %s"

    # Admission Operations
    ADMISSION_ACCEPTED = "Queued '%s' for identity %s"
    ADMISSION_REJECTED = "Rejected submission from %s: %s (%s)"
    ADMISSION_UPSTREAM_FAILED = "Upstream failure while admitting track %s for %s: %r"
    SEARCH_COMPLETED = "Search for %r returned %d tracks"

    # Cooldown Operations
    COOLDOWN_STAMPED = "Cooldown stamped on %d identities until %s"
    COOLDOWN_RESET = "Cooldown reset for identity %s"
    COOLDOWN_RESET_ALL = "Cooldown reset for %d identities"

    # Prequeue Operations
    PREQUEUE_SUBMITTED = "Prequeue entry %s created for track %s"
    PREQUEUE_APPROVED = "Prequeue entry %s approved by %s"
    PREQUEUE_DECLINED = "Prequeue entry %s declined by %s"
    PREQUEUE_LIVE_CHECK_FAILED = "Live queue duplicate check failed, continuing: %r"

    # Voting Operations
    VOTE_RECORDED = "Vote %+d on %s by %s (net %d)"
    VOTE_REMOVED = "Vote removed on %s by %s (net %d)"

    # Moderation Operations
    TRACK_BANNED = "Banned track %s"
    TRACK_UNBANNED = "Unbanned track %s"

    # Queue View / Cache
    CACHE_HIT = "Queue cache hit (age %.1fs)"
    CACHE_JOIN_INFLIGHT = "Joining in-flight live queue read"
    CACHE_INVALIDATED = "Queue cache invalidated"
    QUEUE_READ_FAILED_STALE = "Live queue read failed, serving stale snapshot: %r"
    QUEUE_READ_FAILED = "Live queue read failed and no snapshot is cached: %r"

    # Config Operations
    CONFIG_UPDATED = "Config %s set to %r"

    # Application Lifecycle
    APP_STARTING = "Starting party-queue in {environment} mode"
    APP_FATAL_ERROR = "Fatal error: %s"
    COMMAND_FAILED = "Command %s failed: %s"
