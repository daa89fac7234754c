"""
Prequeue Bounded Context

Submissions awaiting moderator approval before reaching the live queue.
"""

from party_queue.domain.prequeue.entities import PrequeueEntry
from party_queue.domain.prequeue.repository import PrequeueRepository
from party_queue.domain.prequeue.value_objects import PrequeueStatus

__all__ = [
    "PrequeueEntry",
    "PrequeueStatus",
    "PrequeueRepository",
]
