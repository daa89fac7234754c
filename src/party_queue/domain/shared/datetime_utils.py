"""Date/time helpers.

- Always store and operate on timezone-aware UTC datetimes.
- Timestamps are persisted as fixed-width ISO 8601 strings so that string
  comparison in SQL matches chronological order.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from ...domain.shared.messages import ErrorMessages

Clock = Callable[[], datetime]
"""A zero-argument callable returning the current aware UTC datetime."""


@dataclass(frozen=True, slots=True)
class UtcDateTime:
    """A tiny value-object wrapper around a timezone-aware UTC `datetime`."""

    dt: datetime

    def __post_init__(self) -> None:
        if self.dt.tzinfo is None:
            raise ValueError(ErrorMessages.TIMEZONE_REQUIRED_UTC_DATETIME)
        object.__setattr__(self, "dt", self.dt.astimezone(UTC))

    @classmethod
    def now(cls) -> UtcDateTime:
        return cls(datetime.now(UTC))

    @classmethod
    def from_iso(cls, value: str) -> UtcDateTime:
        # Accepts: '...+00:00' or '...Z'
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return cls(datetime.fromisoformat(value))

    @property
    def iso(self) -> str:
        """Fixed-width ISO 8601 with microseconds and explicit +00:00 offset."""
        return self.dt.isoformat(timespec="microseconds")


def utcnow() -> datetime:
    """Return a timezone-aware datetime in UTC."""
    return datetime.now(UTC)


def to_iso(value: datetime | None) -> str | None:
    return UtcDateTime(value).iso if value is not None else None


def from_iso(value: str | None) -> datetime | None:
    return UtcDateTime.from_iso(value).dt if value else None


def seconds_until(moment: datetime, now: datetime) -> int:
    """Whole seconds from ``now`` until ``moment``, rounded up, never negative."""
    return max(0, math.ceil((moment - now).total_seconds()))
