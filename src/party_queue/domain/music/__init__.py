"""
Music Bounded Context

Catalog value objects consumed from the external music service.
"""

from party_queue.domain.music.entities import LiveQueue, Track

__all__ = [
    "Track",
    "LiveQueue",
]
