"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across bounded contexts is defined here once,
so models can simply annotate their fields::

    from party_queue.domain.shared.types import IdentityToken, TrackIdStr

    class MyModel(BaseModel):
        identity_id: IdentityToken
        track_id: TrackIdStr
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""


# ── String constraints ──────────────────────────────────────────────

IdentityToken = Annotated[str, Field(min_length=1, max_length=128)]
"""Opaque per-device token."""

TrackIdStr = Annotated[str, Field(min_length=1, max_length=128)]
"""Catalog track id."""

TrackNameStr = Annotated[str, Field(max_length=500)]
"""Track or artist display text, possibly empty when metadata is unknown."""


# ── Domain-specific numeric constraints ─────────────────────────────

DurationMs = Annotated[int, Field(ge=0)]
"""Track duration in milliseconds."""

CooldownSeconds = Annotated[int, Field(ge=0, le=86_400)]
"""Cooldown window length: 0 … 86 400 seconds."""


# ── Settings-specific constraints ──────────────────────────────────

BusyTimeoutMs = Annotated[int, Field(ge=1000, le=30000)]
"""Database busy timeout in milliseconds: 1 000 … 30 000."""

ConnectionTimeoutS = Annotated[int, Field(ge=1, le=60)]
"""Database connection timeout in seconds: 1 … 60."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: datetime) -> datetime:
    """Validate that a datetime is timezone-aware and normalise to UTC."""
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
