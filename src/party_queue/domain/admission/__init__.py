"""
Admission Bounded Context

Audit log, ban list, moderation rules and cooldown accounting.
"""

from party_queue.domain.admission.entities import BannedTrack, SubmissionAttempt
from party_queue.domain.admission.repository import (
    BannedTrackRepository,
    SubmissionAttemptRepository,
)
from party_queue.domain.admission.services import CooldownPolicy, ModerationGate
from party_queue.domain.admission.value_objects import (
    AdmissionConfig,
    AttemptOutcome,
    CooldownDecision,
    ModerationVerdict,
)

__all__ = [
    # Entities
    "SubmissionAttempt",
    "BannedTrack",
    # Value Objects
    "AttemptOutcome",
    "AdmissionConfig",
    "ModerationVerdict",
    "CooldownDecision",
    # Repository
    "SubmissionAttemptRepository",
    "BannedTrackRepository",
    # Services
    "ModerationGate",
    "CooldownPolicy",
]
