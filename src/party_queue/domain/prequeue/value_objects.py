"""Value objects for the prequeue bounded context."""

from __future__ import annotations

from enum import Enum


class PrequeueStatus(Enum):
    """Lifecycle of a submission awaiting human approval.

    ``PENDING`` is the only non-terminal state; it may move to ``APPROVED`` or
    ``DECLINED`` exactly once.
    """

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self is not PrequeueStatus.PENDING

    def can_transition_to(self, target: PrequeueStatus) -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[PrequeueStatus, frozenset[PrequeueStatus]] = {
    PrequeueStatus.PENDING: frozenset({PrequeueStatus.APPROVED, PrequeueStatus.DECLINED}),
    PrequeueStatus.APPROVED: frozenset(),
    PrequeueStatus.DECLINED: frozenset(),
}
