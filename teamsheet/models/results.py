"""Typed results returned by selection engine operations."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Validation failures an operation can report to its caller."""
    NOT_IN_SQUAD = "not_in_squad"
    INVALID_SLOT = "invalid_slot"
    INVALID_DURATION = "invalid_duration"
    INVALID_HALF = "invalid_half"
    INVALID_CATEGORY = "invalid_category"
    PROTECTED_PERIOD = "protected_period"
    NOTHING_SELECTED = "nothing_selected"
    NOTHING_TO_UNDO = "nothing_to_undo"
    NOTHING_TO_REDO = "nothing_to_redo"


class AssignmentStatus(Enum):
    """Outcome of an assign call."""
    ASSIGNED = "assigned"
    UNCHANGED = "unchanged"
    CLEARED = "cleared"
    NOT_IN_SQUAD = "not_in_squad"
    INVALID_SLOT = "invalid_slot"
    INVALID_CATEGORY = "invalid_category"


@dataclass(frozen=True)
class AssignmentResult:
    """
    Result of AssignmentStore.assign.

    Attributes:
        status: What happened
        previous_occupant: Player who held the target slot before the call
        moved_from: Slot key the player was moved out of, within the same period
        message: Human readable explanation for rejected calls
    """
    status: AssignmentStatus
    previous_occupant: Optional[str] = None
    moved_from: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (
            AssignmentStatus.ASSIGNED, AssignmentStatus.UNCHANGED, AssignmentStatus.CLEARED
        )

    @property
    def error(self) -> Optional[ErrorCode]:
        if self.status is AssignmentStatus.NOT_IN_SQUAD:
            return ErrorCode.NOT_IN_SQUAD
        if self.status is AssignmentStatus.INVALID_SLOT:
            return ErrorCode.INVALID_SLOT
        if self.status is AssignmentStatus.INVALID_CATEGORY:
            return ErrorCode.INVALID_CATEGORY
        return None


@dataclass(frozen=True)
class OperationResult:
    """
    Result of a validated mutation.

    Attributes:
        ok: Whether the operation was applied
        error: Failure code when ok is False
        message: Actionable message for the user when ok is False
        value: Operation specific payload (e.g. a new period id)
    """
    ok: bool
    error: Optional[ErrorCode] = None
    message: str = ""
    value: Any = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorCode, message: str) -> "OperationResult":
        return cls(ok=False, error=error, message=message)

    @classmethod
    def from_assignment(cls, result: AssignmentResult) -> "OperationResult":
        if result.ok:
            return cls.success(result)
        return cls(ok=False, error=result.error, message=result.message, value=result)
