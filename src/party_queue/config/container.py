"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for repositories and services.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.datetime_utils import Clock, utcnow
from ..domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from ..application.interfaces.auth_gate import AuthGate
    from ..application.interfaces.catalog import MusicCatalog
    from ..application.services.admin_service import AdminService
    from ..application.services.admission import AdmissionCoordinator
    from ..application.services.configuration import ConfigurationService
    from ..application.services.cooldown_engine import CooldownEngine
    from ..application.services.identity_ledger import IdentityLedger
    from ..application.services.prequeue_workflow import PrequeueWorkflow
    from ..application.services.queue_view import QueueView
    from ..application.services.vote_ledger import VoteLedger
    from ..infrastructure.persistence.database import Database
    from ..infrastructure.persistence.repositories import (
        SQLiteBannedTrackRepository,
        SQLiteConfigRepository,
        SQLiteGuestDataMaintenance,
        SQLiteIdentityRepository,
        SQLitePrequeueRepository,
        SQLiteSubmissionAttemptRepository,
        SQLiteTrackVoteRepository,
    )
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Call ``set_catalog()`` before the first service is resolved. The queue
    view, admission and voting refuse to build without a catalog; the admin
    service and the prequeue workflow build without one, and only
    ``PrequeueWorkflow.approve`` needs it then.
    """

    settings: Settings
    clock: Clock = utcnow
    _catalog: MusicCatalog | None = None

    # Persistence layer
    _database: Database | None = None
    _identity_repository: SQLiteIdentityRepository | None = None
    _attempt_repository: SQLiteSubmissionAttemptRepository | None = None
    _banned_track_repository: SQLiteBannedTrackRepository | None = None
    _prequeue_repository: SQLitePrequeueRepository | None = None
    _vote_repository: SQLiteTrackVoteRepository | None = None
    _config_repository: SQLiteConfigRepository | None = None
    _maintenance: SQLiteGuestDataMaintenance | None = None

    # Application services
    _configuration_service: ConfigurationService | None = None
    _auth_gate: AuthGate | None = None
    _identity_ledger: IdentityLedger | None = None
    _cooldown_engine: CooldownEngine | None = None
    _queue_view: QueueView | None = None
    _prequeue_workflow: PrequeueWorkflow | None = None
    _vote_ledger: VoteLedger | None = None
    _admission_coordinator: AdmissionCoordinator | None = None
    _admin_service: AdminService | None = None

    def set_catalog(self, catalog: MusicCatalog) -> None:
        """Set the music catalog adapter."""
        self._catalog = catalog

    @property
    def catalog(self) -> MusicCatalog:
        """Get the music catalog adapter."""
        if self._catalog is None:
            raise RuntimeError(ErrorMessages.CATALOG_NOT_CONFIGURED)
        return self._catalog

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def identity_repository(self) -> SQLiteIdentityRepository:
        if self._identity_repository is None:
            from ..infrastructure.persistence.repositories import SQLiteIdentityRepository

            self._identity_repository = SQLiteIdentityRepository(self.database)
        return self._identity_repository

    @property
    def attempt_repository(self) -> SQLiteSubmissionAttemptRepository:
        if self._attempt_repository is None:
            from ..infrastructure.persistence.repositories import (
                SQLiteSubmissionAttemptRepository,
            )

            self._attempt_repository = SQLiteSubmissionAttemptRepository(self.database)
        return self._attempt_repository

    @property
    def banned_track_repository(self) -> SQLiteBannedTrackRepository:
        if self._banned_track_repository is None:
            from ..infrastructure.persistence.repositories import SQLiteBannedTrackRepository

            self._banned_track_repository = SQLiteBannedTrackRepository(self.database)
        return self._banned_track_repository

    @property
    def prequeue_repository(self) -> SQLitePrequeueRepository:
        if self._prequeue_repository is None:
            from ..infrastructure.persistence.repositories import SQLitePrequeueRepository

            self._prequeue_repository = SQLitePrequeueRepository(self.database)
        return self._prequeue_repository

    @property
    def vote_repository(self) -> SQLiteTrackVoteRepository:
        if self._vote_repository is None:
            from ..infrastructure.persistence.repositories import SQLiteTrackVoteRepository

            self._vote_repository = SQLiteTrackVoteRepository(self.database)
        return self._vote_repository

    @property
    def config_repository(self) -> SQLiteConfigRepository:
        if self._config_repository is None:
            from ..infrastructure.persistence.repositories import SQLiteConfigRepository

            self._config_repository = SQLiteConfigRepository(self.database)
        return self._config_repository

    @property
    def maintenance(self) -> SQLiteGuestDataMaintenance:
        if self._maintenance is None:
            from ..infrastructure.persistence.repositories import SQLiteGuestDataMaintenance

            self._maintenance = SQLiteGuestDataMaintenance(self.database)
        return self._maintenance

    # === Application Services ===

    @property
    def configuration_service(self) -> ConfigurationService:
        """Get the runtime configuration service."""
        if self._configuration_service is None:
            from ..application.services.configuration import ConfigurationService

            self._configuration_service = ConfigurationService(
                config_repository=self.config_repository,
                on_queue_view_change=self._invalidate_queue_view,
            )
        return self._configuration_service

    @property
    def auth_gate(self) -> AuthGate:
        if self._auth_gate is None:
            from ..application.services.auth_gate import ConfigAuthGate

            self._auth_gate = ConfigAuthGate()
        return self._auth_gate

    @property
    def identity_ledger(self) -> IdentityLedger:
        if self._identity_ledger is None:
            from ..application.services.identity_ledger import IdentityLedger

            self._identity_ledger = IdentityLedger(
                identity_repository=self.identity_repository,
                configuration=self.configuration_service,
                clock=self.clock,
            )
        return self._identity_ledger

    @property
    def cooldown_engine(self) -> CooldownEngine:
        if self._cooldown_engine is None:
            from ..application.services.cooldown_engine import CooldownEngine

            self._cooldown_engine = CooldownEngine(
                identity_ledger=self.identity_ledger,
                identity_repository=self.identity_repository,
                attempt_repository=self.attempt_repository,
                clock=self.clock,
            )
        return self._cooldown_engine

    @property
    def queue_view(self) -> QueueView:
        """Get the cached guest-facing queue projection."""
        if self._queue_view is None:
            from ..application.services.queue_view import QueueView

            self._queue_view = QueueView(
                catalog=self.catalog,
                configuration=self.configuration_service,
                attempt_repository=self.attempt_repository,
                vote_repository=self.vote_repository,
                ttl_seconds=self.settings.queue_view.cache_ttl_seconds,
                upstream_timeout_seconds=self.settings.upstream.timeout_seconds,
            )
        return self._queue_view

    @property
    def prequeue_workflow(self) -> PrequeueWorkflow:
        if self._prequeue_workflow is None:
            from ..application.services.prequeue_workflow import PrequeueWorkflow

            self._prequeue_workflow = PrequeueWorkflow(
                prequeue_repository=self.prequeue_repository,
                attempt_repository=self.attempt_repository,
                identity_repository=self.identity_repository,
                catalog=self._catalog,
                configuration=self.configuration_service,
                cooldown_engine=self.cooldown_engine,
                queue_view=self.queue_view if self._catalog is not None else None,
                clock=self.clock,
                upstream_timeout_seconds=self.settings.upstream.timeout_seconds,
            )
        return self._prequeue_workflow

    @property
    def vote_ledger(self) -> VoteLedger:
        if self._vote_ledger is None:
            from ..application.services.vote_ledger import VoteLedger

            self._vote_ledger = VoteLedger(
                vote_repository=self.vote_repository,
                attempt_repository=self.attempt_repository,
                identity_ledger=self.identity_ledger,
                auth_gate=self.auth_gate,
                configuration=self.configuration_service,
                queue_view=self.queue_view,
                clock=self.clock,
            )
        return self._vote_ledger

    @property
    def admission_coordinator(self) -> AdmissionCoordinator:
        """Get the guest submission pipeline."""
        if self._admission_coordinator is None:
            from ..application.services.admission import AdmissionCoordinator

            self._admission_coordinator = AdmissionCoordinator(
                identity_ledger=self.identity_ledger,
                identity_repository=self.identity_repository,
                attempt_repository=self.attempt_repository,
                banned_track_repository=self.banned_track_repository,
                catalog=self.catalog,
                auth_gate=self.auth_gate,
                configuration=self.configuration_service,
                cooldown_engine=self.cooldown_engine,
                prequeue_workflow=self.prequeue_workflow,
                queue_view=self.queue_view,
                clock=self.clock,
                upstream_timeout_seconds=self.settings.upstream.timeout_seconds,
            )
        return self._admission_coordinator

    @property
    def admin_service(self) -> AdminService:
        """Get the moderator service."""
        if self._admin_service is None:
            from ..application.services.admin_service import AdminService

            self._admin_service = AdminService(
                identity_repository=self.identity_repository,
                identity_ledger=self.identity_ledger,
                attempt_repository=self.attempt_repository,
                banned_track_repository=self.banned_track_repository,
                prequeue_repository=self.prequeue_repository,
                vote_repository=self.vote_repository,
                cooldown_engine=self.cooldown_engine,
                configuration=self.configuration_service,
                maintenance=self.maintenance,
                queue_view=self.queue_view if self._catalog is not None else None,
                clock=self.clock,
            )
        return self._admin_service

    def _invalidate_queue_view(self) -> None:
        # Nothing is cached until the queue view has been built.
        if self._queue_view is not None:
            self._queue_view.invalidate()

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings, clock: Clock = utcnow) -> Container:
    """Create a new dependency injection container."""
    return Container(settings, clock=clock)
