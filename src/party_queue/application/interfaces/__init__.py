"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from party_queue.application.interfaces.auth_gate import AuthGate
from party_queue.application.interfaces.catalog import MusicCatalog
from party_queue.application.interfaces.config_store import ConfigRepository
from party_queue.application.interfaces.maintenance import GuestDataMaintenance

__all__ = [
    "MusicCatalog",
    "AuthGate",
    "ConfigRepository",
    "GuestDataMaintenance",
]
