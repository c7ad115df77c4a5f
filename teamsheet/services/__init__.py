"""
Services package for the Teamsheet selection engine.

This package contains the services that implement selection business logic,
plus a factory that wires them to a storage collaborator.
"""
from .assignment_store import AssignmentStore
from .squad_service import SquadService
from .period_service import PeriodService, validate_duration, period_label
from .drag_drop import DragDropCoordinator, DropResult, DropStatus
from .substitution_diff import is_substitution, substitution_flags
from .selection_format import SelectionRecord, flatten, reconstruct
from .selection_storage import (
    SelectionStorage, InMemorySelectionStorage, JsonFileSelectionStorage,
    RestSelectionStorage
)
from .persistence_service import SaveResult, SaveStatus, SelectionPersistenceService
from .selection_commands import Command, SelectionCommand, SelectionCommandManager
from .selection_session import SelectionSession
from .service_factory import ServiceFactory

__all__ = [
    "AssignmentStore", "SquadService", "PeriodService", "validate_duration",
    "period_label", "DragDropCoordinator", "DropResult", "DropStatus",
    "is_substitution", "substitution_flags", "SelectionRecord", "flatten",
    "reconstruct", "SelectionStorage", "InMemorySelectionStorage",
    "JsonFileSelectionStorage", "RestSelectionStorage", "SaveResult",
    "SaveStatus", "SelectionPersistenceService", "Command", "SelectionCommand",
    "SelectionCommandManager", "SelectionSession", "ServiceFactory"
]
