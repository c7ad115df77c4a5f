"""
Service factory for the Teamsheet selection engine.

Builds the storage collaborator named by the runtime settings and wires
sessions to it, so entry points never construct services by hand.
"""
import logging
from typing import Optional

from .persistence_service import SelectionPersistenceService
from .selection_session import SelectionSession
from .selection_storage import (
    InMemorySelectionStorage, JsonFileSelectionStorage, RestSelectionStorage,
    SelectionStorage
)
from ..models import FixtureDefinition, RosterProvider, SelectionState, StaticRosterProvider
from ..utils.config import STORAGE_FILE, STORAGE_REST, StorageSettings

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating selection services with their dependencies injected.

    The storage and persistence services are created once per factory and
    shared by every session it builds.
    """

    def __init__(self, settings: Optional[StorageSettings] = None,
                 roster: Optional[RosterProvider] = None):
        """
        Initialize factory.

        Args:
            settings: Storage settings; defaults to in-memory storage
            roster: Roster provider handed to new sessions
        """
        self.settings = settings or StorageSettings()
        self.roster = roster or StaticRosterProvider()
        self._storage: Optional[SelectionStorage] = None
        self._persistence_service: Optional[SelectionPersistenceService] = None

    def create_storage(self) -> SelectionStorage:
        """
        Create the storage collaborator for the configured backend.

        Returns:
            Configured SelectionStorage instance
        """
        settings = self.settings
        if settings.backend == STORAGE_REST:
            logger.info("Using REST selection storage at %s", settings.rest_url)
            return RestSelectionStorage(
                settings.rest_url,
                api_key=settings.rest_key,
                table=settings.table,
                timeout=settings.rest_timeout,
            )
        if settings.backend == STORAGE_FILE:
            logger.info("Using JSON file selection storage in %s", settings.data_dir)
            return JsonFileSelectionStorage(settings.data_dir)
        logger.info("Using in-memory selection storage")
        return InMemorySelectionStorage()

    def create_session(self, fixture: FixtureDefinition) -> SelectionSession:
        """
        Create a session for a new fixture.

        Args:
            fixture: Fixture to select teams for

        Returns:
            SelectionSession seeded with the fixture's teams
        """
        return SelectionSession.from_fixture(
            fixture,
            roster=self.roster,
            persistence=self._get_persistence_service(),
        )

    def create_session_for_state(self, state: SelectionState) -> SelectionSession:
        return SelectionSession(state, persistence=self._get_persistence_service(), roster=self.roster)

    def configure_custom_storage(self, storage: SelectionStorage) -> None:
        """Use a custom storage collaborator for sessions created from now on."""
        self._storage = storage
        self._persistence_service = None

    def _get_storage(self) -> SelectionStorage:
        """Get singleton storage collaborator."""
        if self._storage is None:
            self._storage = self.create_storage()
        return self._storage

    def _get_persistence_service(self) -> SelectionPersistenceService:
        """Get singleton persistence service."""
        if self._persistence_service is None:
            self._persistence_service = SelectionPersistenceService(self._get_storage())
        return self._persistence_service
