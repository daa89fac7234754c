"""Auth gate driven by the ``require_*_auth`` runtime settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...domain.guests.value_objects import AuthRequirements
from ...domain.shared.constants import AuthProviders
from ..interfaces.auth_gate import AuthGate

if TYPE_CHECKING:
    from ...domain.admission.value_objects import AdmissionConfig
    from ...domain.guests.entities import Identity


class ConfigAuthGate(AuthGate):
    """Requires a linked login for every provider whose ``require_*_auth`` key is on."""

    def check(self, identity: Identity, config: AdmissionConfig) -> AuthRequirements:
        required = []
        if config.require_github_auth:
            required.append(AuthProviders.GITHUB)
        if config.require_google_auth:
            required.append(AuthProviders.GOOGLE)

        missing = tuple(p for p in required if not identity.has_provider(p))
        return AuthRequirements(missing_providers=missing)
