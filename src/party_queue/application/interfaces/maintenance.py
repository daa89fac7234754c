"""Port for bulk maintenance of the guest data store."""

from __future__ import annotations

from abc import ABC, abstractmethod


class GuestDataMaintenance(ABC):
    """Operations spanning several tables at once."""

    @abstractmethod
    async def reset_guest_data(self) -> dict[str, int]:
        """Delete attempts, votes, prequeue entries, identities and bans atomically.

        Runtime configuration is kept.

        Returns:
            Rows removed per table.
        """
        ...
