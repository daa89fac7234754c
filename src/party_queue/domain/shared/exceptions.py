"""Exception taxonomy for admission, moderation and voting errors.

Every rejection the core can produce is one of these classes. Each carries a
stable machine-readable ``code`` plus a human-readable ``message`` so callers
can map them onto whatever surface they expose.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class ValidationError(DomainError):
    """Raised when input is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.field is not None:
            data["field"] = self.field
        return data


class AuthRequiredError(DomainError):
    """Raised when the guest must complete an external login first."""

    def __init__(self, providers: list[str], message: str | None = None) -> None:
        msg = message or f"{' or '.join(providers)} authentication required."
        super().__init__(msg, code="AUTH_REQUIRED")
        self.providers = list(providers)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["providers"] = self.providers
        return data


class BlockedError(DomainError):
    """Raised when an identity has been blocked by a moderator."""

    def __init__(self, identity_id: str, message: str | None = None) -> None:
        super().__init__(message or "This device is blocked from queueing songs.", code="BLOCKED")
        self.identity_id = identity_id


class RateLimitedError(DomainError):
    """Raised while a cooldown is active for the identity's group."""

    def __init__(self, remaining_seconds: int, message: str | None = None) -> None:
        super().__init__(
            message or "Please wait before queueing another song!", code="RATE_LIMITED"
        )
        self.remaining_seconds = remaining_seconds

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["remaining_seconds"] = self.remaining_seconds
        return data


class ModerationRejectedError(DomainError):
    """Raised when a track is rejected by moderation rules. Not retryable."""

    def __init__(self, message: str, code: str = "MODERATION_REJECTED") -> None:
        super().__init__(message, code=code)


class FeatureDisabledError(ModerationRejectedError):
    """Raised when the requested feature is switched off in the runtime config."""

    def __init__(self, feature: str, message: str | None = None) -> None:
        super().__init__(message or f"{feature} is currently disabled.", code="FEATURE_DISABLED")
        self.feature = feature


class ConflictError(DomainError):
    """Raised when the request duplicates existing state."""

    def __init__(self, message: str, code: str = "CONFLICT") -> None:
        super().__init__(message, code=code)


class AlreadyProcessedError(ConflictError):
    """Raised when a prequeue entry has already left the pending state."""

    def __init__(self, entry_id: str, current_state: str) -> None:
        super().__init__("Track already processed", code="ALREADY_PROCESSED")
        self.entry_id = entry_id
        self.current_state = current_state


class UpstreamFailureError(DomainError):
    """Raised when an external capability fails. Retryable by the caller."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        msg = message or f"Upstream call '{operation}' failed"
        super().__init__(msg, code="UPSTREAM_FAILURE")
        self.operation = operation


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class InvalidTransitionError(DomainError):
    """Raised when a state machine is asked for a transition it does not allow."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_TRANSITION")
        self.operation = operation
        self.current_state = current_state
