"""Identity Ledger - device identities, login links and cooldown groups."""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ...domain.guests.entities import Identity
from ...domain.guests.value_objects import IdentityStatus
from ...domain.shared.datetime_utils import Clock, utcnow
from ...domain.shared.exceptions import (
    BlockedError,
    EntityNotFoundError,
    RateLimitedError,
    ValidationError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.guests.repository import IdentityRepository
    from .configuration import ConfigurationService

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16
MAX_TOKEN_LENGTH = 128


class Registration(BaseModel):
    identity_id: str
    display_name: str | None = None
    created: bool = False


class IdentityLedger:
    """Owns the lifecycle of guest identities.

    Identities are created on first sight and their creation fields are never
    rewritten afterwards.
    """

    def __init__(
        self,
        *,
        identity_repository: IdentityRepository,
        configuration: ConfigurationService,
        clock: Clock = utcnow,
    ) -> None:
        self._repo = identity_repository
        self._configuration = configuration
        self._clock = clock

    async def resolve(self, token: str) -> Identity:
        token = self._require_token(token)
        identity, _ = await self._repo.get_or_create(token, self._clock())
        return identity

    async def get(self, identity_id: str) -> Identity:
        identity = await self._repo.get(identity_id)
        if identity is None:
            raise EntityNotFoundError("Identity", identity_id)
        return identity

    async def link(
        self,
        identity: Identity,
        provider: str,
        external_account_id: str,
        display_name: str | None = None,
    ) -> Identity:
        """Attach an external login to an identity. Idempotent.

        The first linked account and display name win; later links only add
        the provider.
        """
        if not provider or not provider.strip():
            raise ValidationError(ErrorMessages.EMPTY_PROVIDER, field="provider")
        if not external_account_id or not external_account_id.strip():
            raise ValidationError(
                ErrorMessages.EMPTY_EXTERNAL_ACCOUNT, field="external_account_id"
            )

        linked = await self._repo.link_account(
            identity.id,
            provider.strip().lower(),
            f"{provider.strip().lower()}:{external_account_id.strip()}",
            display_name.strip() if display_name and display_name.strip() else None,
        )
        if linked is None:
            raise EntityNotFoundError("Identity", identity.id)

        logger.info(LogTemplates.IDENTITY_LINKED, identity.id, provider)
        return linked

    async def cooldown_group(self, identity: Identity) -> list[Identity]:
        """Every identity sharing ``identity``'s linked account, or just itself.

        Members are always re-read from storage, so cooldown stamps written
        since ``identity`` was loaded are visible.
        """
        if not identity.linked_account_id:
            current = await self._repo.get(identity.id)
            return [current or identity]
        members = await self._repo.list_by_linked_account(identity.linked_account_id)
        if not any(m.id == identity.id for m in members):
            members.append(identity)
        return members

    async def cooldown_group_ids(self, identity: Identity) -> list[str]:
        return [m.id for m in await self.cooldown_group(identity)]

    async def register(
        self, token: str | None = None, display_name: str | None = None
    ) -> Registration:
        """Register a device, generating a token when none is supplied.

        Raises:
            ValidationError: ``require_username`` is on and no display name is
                known for the device.
        """
        config = await self._configuration.admission_config()
        name = display_name.strip() if display_name and display_name.strip() else None
        if token and token.strip():
            token = self._require_token(token)
        else:
            token = secrets.token_hex(TOKEN_BYTES)

        if config.require_username and name is None:
            existing = await self._repo.get(token)
            if existing is None or not existing.display_name:
                raise ValidationError(ErrorMessages.USERNAME_REQUIRED, field="display_name")

        identity, created = await self._repo.get_or_create(token, self._clock())
        if name is not None and await self._repo.set_display_name_if_unset(identity.id, name):
            identity = await self.get(identity.id)

        return Registration(
            identity_id=identity.id, display_name=identity.display_name, created=created
        )

    async def validate(self, token: str) -> Identity:
        """Check that a known device may currently submit.

        Raises:
            ValidationError: Empty token, or a required username is missing.
            EntityNotFoundError: The token was never registered.
            BlockedError: The identity is blocked.
            RateLimitedError: The identity's own cooldown is still running.
        """
        token = self._require_token(token)
        identity = await self._repo.get(token)
        if identity is None:
            raise EntityNotFoundError("Identity", token, ErrorMessages.UNKNOWN_IDENTITY_TOKEN)

        config = await self._configuration.admission_config()
        if config.require_username and not identity.display_name:
            raise ValidationError(ErrorMessages.USERNAME_REQUIRED, field="display_name")
        if identity.is_blocked:
            raise BlockedError(identity.id)

        now = self._clock()
        if config.cooldown_enabled and identity.is_cooling_down(now):
            raise RateLimitedError(identity.cooldown_remaining(now))
        return identity

    async def block(self, identity_id: str) -> None:
        if not await self._repo.set_status(identity_id, IdentityStatus.BLOCKED):
            raise EntityNotFoundError("Identity", identity_id)
        logger.info(LogTemplates.IDENTITY_BLOCKED, identity_id)

    async def unblock(self, identity_id: str) -> None:
        if not await self._repo.set_status(identity_id, IdentityStatus.ACTIVE):
            raise EntityNotFoundError("Identity", identity_id)
        logger.info(LogTemplates.IDENTITY_UNBLOCKED, identity_id)

    @staticmethod
    def _require_token(token: str | None) -> str:
        if not token or not token.strip() or len(token.strip()) > MAX_TOKEN_LENGTH:
            raise ValidationError(ErrorMessages.EMPTY_IDENTITY_TOKEN, field="identity_token")
        return token.strip()
