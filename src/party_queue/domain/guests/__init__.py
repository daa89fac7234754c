"""
Guests Bounded Context

Device identities, login links and their cooldown groups.
"""

from party_queue.domain.guests.entities import Identity
from party_queue.domain.guests.repository import IdentityRepository
from party_queue.domain.guests.value_objects import AuthRequirements, IdentityStatus

__all__ = [
    # Entities
    "Identity",
    # Value Objects
    "IdentityStatus",
    "AuthRequirements",
    # Repository
    "IdentityRepository",
]
