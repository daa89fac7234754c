"""
Guests Domain Repository Interfaces

Abstract base classes defining the contracts for identity persistence.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from party_queue.domain.guests.entities import Identity
from party_queue.domain.guests.value_objects import IdentityStatus


class IdentityRepository(ABC):
    """Abstract repository for guest identities."""

    @abstractmethod
    async def get(self, identity_id: str) -> Identity | None:
        """Retrieve an identity by its device token.

        Args:
            identity_id: The opaque device token.

        Returns:
            The identity if found, None otherwise.
        """
        ...

    @abstractmethod
    async def get_or_create(self, identity_id: str, now: datetime) -> tuple[Identity, bool]:
        """Get an identity, inserting it on first sight.

        Existing rows are returned untouched; creation fields are never
        rewritten.

        Returns:
            The identity and whether it was created by this call.
        """
        ...

    @abstractmethod
    async def list_all(self) -> list[Identity]:
        """List every identity, most recently seen first."""
        ...

    @abstractmethod
    async def list_by_linked_account(self, linked_account_id: str) -> list[Identity]:
        """List every identity sharing an external login."""
        ...

    @abstractmethod
    async def link_account(
        self,
        identity_id: str,
        provider: str,
        linked_account_id: str,
        display_name: str | None,
    ) -> Identity | None:
        """Attach an external login.

        ``linked_account_id`` and ``display_name`` are only written when unset;
        ``provider`` is added to the identity's provider set.
        """
        ...

    @abstractmethod
    async def set_display_name_if_unset(self, identity_id: str, display_name: str) -> bool:
        """Set the display name unless one exists. Returns True if written."""
        ...

    @abstractmethod
    async def set_status(self, identity_id: str, status: IdentityStatus) -> bool:
        """Set active/blocked status. Returns False for unknown ids."""
        ...

    @abstractmethod
    async def record_submission(self, identity_id: str, at: datetime) -> None:
        """Stamp ``last_submit_at``."""
        ...

    @abstractmethod
    async def set_cooldown(self, identity_ids: list[str], expires_at: datetime) -> None:
        """Set ``cooldown_expires_at`` on every listed identity."""
        ...

    @abstractmethod
    async def clear_cooldown(self, identity_id: str, at: datetime) -> bool:
        """Clear one identity's cooldown and restart its counting window at ``at``.

        Returns False for unknown ids.
        """
        ...

    @abstractmethod
    async def clear_all_cooldowns(self, at: datetime) -> int:
        """Clear every cooldown and restart every counting window at ``at``.

        Returns the number of identities that had a cooldown set.
        """
        ...

    @abstractmethod
    async def count_by_status(self) -> dict[IdentityStatus, int]:
        ...

    @abstractmethod
    async def count_cooling_down(self, now: datetime) -> int:
        ...
