"""
Command pattern implementation for selection edits.

Every mutation of a SelectionState runs as a command so it can be undone
and redone. Commands capture whole-state snapshots, which keeps undo exact
for compound edits such as swaps and period deletions.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from ..models import SelectionState

logger = logging.getLogger(__name__)


class Command(ABC):
    """Abstract base class for all selection commands - Command pattern."""

    @abstractmethod
    def execute(self) -> bool:
        """
        Execute the command.

        Returns:
            True if command executed successfully, False otherwise
        """
        pass

    @abstractmethod
    def undo(self) -> bool:
        """
        Undo the command.

        Returns:
            True if command undone successfully, False otherwise
        """
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get human-readable description of the command."""
        pass


class SelectionCommand(Command):
    """
    Runs one mutation against a selection state.

    The action's return value is kept in ``result``. A result with a falsy
    ``ok`` attribute counts as a rejected edit: the command reports failure
    and is not recorded. An edit that leaves the
    state as it was is not recorded either. Redo restores the state captured
    after the first execution instead of running the action again.
    """

    def __init__(self, state: SelectionState, action: Callable[[], Any], description: str):
        self.state = state
        self._action = action
        self._description = description
        self._before: Optional[SelectionState] = None
        self._after: Optional[SelectionState] = None
        self.result: Any = None

    def execute(self) -> bool:
        if self._after is not None:
            self.state.restore(self._after)
            return True

        before = self.state.snapshot()
        self.result = self._action()
        if not getattr(self.result, "ok", True):
            return False
        if self.state == before:
            # Nothing changed; keep it out of the history
            return False
        self._before = before
        self._after = self.state.snapshot()
        return True

    def undo(self) -> bool:
        if self._before is None:
            return False
        self.state.restore(self._before)
        return True

    @property
    def description(self) -> str:
        return self._description


class SelectionCommandManager:
    """
    Manager for executing and tracking selection commands with undo/redo support.
    """

    def __init__(self, max_history: int = 50):
        """
        Initialize command manager.

        Args:
            max_history: Maximum number of commands to keep in history
        """
        self.max_history = max_history
        self._command_history: List[Command] = []
        self._current_index = -1

    def execute_command(self, command: Command) -> bool:
        """
        Execute a command and add it to history.

        Args:
            command: Command to execute

        Returns:
            True if command executed successfully
        """
        success = command.execute()

        if success:
            # Remove any commands after current index (for redo functionality)
            self._command_history = self._command_history[:self._current_index + 1]

            self._command_history.append(command)
            self._current_index += 1

            # Trim history if too long
            if len(self._command_history) > self.max_history:
                self._command_history.pop(0)
                self._current_index -= 1
            logger.debug("Executed %s", command.description)

        return success

    def undo(self) -> bool:
        """
        Undo the last command.

        Returns:
            True if undo was successful
        """
        if not self.can_undo():
            return False

        command = self._command_history[self._current_index]
        success = command.undo()

        if success:
            self._current_index -= 1
            logger.debug("Undid %s", command.description)

        return success

    def redo(self) -> bool:
        """
        Redo the next command.

        Returns:
            True if redo was successful
        """
        if not self.can_redo():
            return False

        command = self._command_history[self._current_index + 1]
        success = command.execute()

        if success:
            self._current_index += 1
            logger.debug("Redid %s", command.description)

        return success

    def can_undo(self) -> bool:
        return self._current_index >= 0

    def can_redo(self) -> bool:
        return self._current_index < len(self._command_history) - 1

    def get_command_history(self) -> List[str]:
        """Descriptions of the commands that can currently be undone, oldest first."""
        return [cmd.description for cmd in self._command_history[:self._current_index + 1]]

    def clear_history(self) -> None:
        self._command_history.clear()
        self._current_index = -1
