"""
Auth Gate Interface

Port interface deciding whether an identity still owes an external login.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.admission.value_objects import AdmissionConfig
    from ...domain.guests.entities import Identity
    from ...domain.guests.value_objects import AuthRequirements


class AuthGate(ABC):
    """Abstract interface for login requirements."""

    @abstractmethod
    def check(self, identity: Identity, config: AdmissionConfig) -> AuthRequirements:
        """Evaluate the login requirements for an identity.

        Args:
            identity: The resolved guest identity.
            config: Current runtime admission config.

        Returns:
            Which providers the identity is still missing.
        """
        ...
