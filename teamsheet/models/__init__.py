"""
Models package for the Teamsheet selection engine.

This package contains the core data models used throughout the application.
"""
from .player import Player
from .slot import (
    PositionSlot, SubstituteSlot, Slot, parse_slot, POSITION_CODES, POSITION_NAMES
)
from .selection import Assignment, Period, Team, SelectionState, is_assigned
from .formation import FixtureFormat, FormationTemplate, FormationTemplates
from .fixture import FixtureDefinition, RosterProvider, StaticRosterProvider
from .results import AssignmentResult, AssignmentStatus, ErrorCode, OperationResult
from .errors import (
    SelectionError, UnknownTeamError, UnknownPeriodError,
    StorageError, StorageDeleteError, StorageInsertError
)

__all__ = [
    "Player", "PositionSlot", "SubstituteSlot", "Slot", "parse_slot",
    "POSITION_CODES", "POSITION_NAMES",
    "Assignment", "Period", "Team", "SelectionState", "is_assigned",
    "FixtureFormat", "FormationTemplate", "FormationTemplates",
    "FixtureDefinition", "RosterProvider", "StaticRosterProvider",
    "AssignmentResult", "AssignmentStatus", "ErrorCode", "OperationResult",
    "SelectionError", "UnknownTeamError", "UnknownPeriodError",
    "StorageError", "StorageDeleteError", "StorageInsertError"
]
