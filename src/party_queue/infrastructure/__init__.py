"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite database and repositories)
"""

from party_queue.infrastructure.persistence.database import Database

__all__ = [
    "Database",
]
