"""Value objects for the guests bounded context."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from party_queue.domain.shared.constants import AuthProviders


class IdentityStatus(Enum):
    """Whether an identity may submit songs at all."""

    ACTIVE = "active"
    BLOCKED = "blocked"


class AuthRequirements(BaseModel):
    """Outcome of evaluating the configured login requirements for an identity."""

    model_config = ConfigDict(frozen=True)

    missing_providers: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def auth_required(self) -> bool:
        return bool(self.missing_providers)

    @property
    def reasons(self) -> list[str]:
        """Human-readable provider names, e.g. ``["GitHub", "Google"]``."""
        return [AuthProviders.DISPLAY_NAMES.get(p, p) for p in self.missing_providers]
