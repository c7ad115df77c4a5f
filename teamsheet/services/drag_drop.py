"""
Drag and drop coordination for one team's period.

Turns the two interaction styles of the team sheet into assignment store
calls:

* select-then-click: pick a player, then click a target slot
* native drag: drag a player token, drop it on a slot or on another player

A player coming from another slot swaps with the target's occupant. A player
coming from the unassigned pool displaces the occupant, who becomes
unassigned. Listeners are notified once per interaction, after every store
call has settled.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Union

from .assignment_store import AssignmentStore
from ..models.results import ErrorCode
from ..models.selection import Assignment, is_assigned
from ..models.slot import Slot, parse_slot

logger = logging.getLogger(__name__)

ChangeListener = Callable[[Dict[Slot, Assignment]], None]


class DropStatus(Enum):
    """What a drop did to the period."""
    ASSIGNED = "assigned"
    SWAPPED = "swapped"
    DISPLACED = "displaced"
    REMOVED = "removed"
    NO_OP = "no_op"
    REJECTED = "rejected"


@dataclass(frozen=True)
class DropResult:
    """
    Outcome of a coordinator interaction.

    Attributes:
        status: What happened
        player_id: Player that was dropped
        target: Target slot key
        source: Slot key the player came from, if any
        displaced_player: Previous occupant of the target
        error: Failure code for rejected drops
        message: Failure message for rejected drops
        assignments: Period map after the interaction
    """
    status: DropStatus
    player_id: Optional[str] = None
    target: Optional[str] = None
    source: Optional[str] = None
    displaced_player: Optional[str] = None
    error: Optional[ErrorCode] = None
    message: str = ""
    assignments: Dict[Slot, Assignment] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is not DropStatus.REJECTED


class DragDropCoordinator:
    """Interaction state and drop policy for a single (team, period) view."""

    def __init__(self, store: AssignmentStore, team_id: int, period_id: str,
                 on_change: Optional[ChangeListener] = None):
        self.store = store
        self.team_id = team_id
        self.period_id = period_id
        self.on_change = on_change
        self.selected_player_id: Optional[str] = None
        self.dragging_player_id: Optional[str] = None
        self.drag_source: Optional[Slot] = None
        # Fail fast on a coordinator for a period that does not exist
        self.store.state.period(team_id, period_id)

    # ---------- Select-then-click ---------- #

    def select_player(self, player_id: Optional[str]) -> Optional[str]:
        """
        Select a player for the next click. Selecting the selected player again deselects.

        Returns:
            The player now selected, or None
        """
        if not is_assigned(player_id) or player_id == self.selected_player_id:
            self.selected_player_id = None
        else:
            self.selected_player_id = player_id
        return self.selected_player_id

    def clear_selection(self) -> None:
        self.selected_player_id = None

    def click_slot(self, slot: Union[str, Slot], position_label: Optional[str] = None) -> DropResult:
        """Drop the selected player on a slot."""
        if self.selected_player_id is None:
            return self._rejected(ErrorCode.NOTHING_SELECTED, "Select a player first", target=slot)
        return self.handle_drop(slot, self.selected_player_id, position_label=position_label)

    # ---------- Native drag ---------- #

    def start_drag(self, player_id: str, source_slot: Optional[Union[str, Slot]] = None) -> None:
        self.dragging_player_id = player_id
        self.drag_source = self._parse_or_none(source_slot)

    def end_drag(self) -> None:
        self.dragging_player_id = None
        self.drag_source = None

    def drop_on_slot(self, slot: Union[str, Slot], position_label: Optional[str] = None) -> DropResult:
        """Finish a drag on a slot."""
        player_id = self.dragging_player_id or self.selected_player_id
        if player_id is None:
            return self._rejected(ErrorCode.NOTHING_SELECTED, "No player is being dragged", target=slot)
        return self.handle_drop(slot, player_id, self.drag_source, position_label)

    def drop_on_player(self, target_player_id: str) -> DropResult:
        """Finish a drag on another player's token; the drop targets that player's slot."""
        player_id = self.dragging_player_id or self.selected_player_id
        if player_id is None:
            return self._rejected(ErrorCode.NOTHING_SELECTED, "No player is being dragged")
        target = self.store.slot_of(self.team_id, self.period_id, target_player_id)
        if target is None:
            return self._rejected(
                ErrorCode.INVALID_SLOT, f"Player {target_player_id} is not in a slot in this period"
            )
        return self.handle_drop(target, player_id, self.drag_source)

    def drop_on_substitutes(self, player_id: Optional[str] = None) -> DropResult:
        """Put a player on the bench in a newly numbered substitute slot."""
        player_id = player_id or self.dragging_player_id or self.selected_player_id
        if player_id is None:
            return self._rejected(ErrorCode.NOTHING_SELECTED, "No player to add to the substitutes")
        error = self._squad_error(player_id)
        if error:
            return self._rejected(ErrorCode.NOT_IN_SQUAD, error)
        slot = self.store.allocate_substitute_slot(self.team_id, self.period_id)
        return self.handle_drop(slot, player_id, self.drag_source)

    def remove_from_slot(self, slot: Union[str, Slot]) -> DropResult:
        """Send a slot's player back to the unassigned pool."""
        removed = self.store.remove(self.team_id, self.period_id, slot)
        if removed is None:
            return DropResult(DropStatus.NO_OP, target=str(slot), assignments=self._period_map())
        return self._settled(DropResult(
            DropStatus.REMOVED,
            player_id=removed.player_id,
            target=str(parse_slot(slot)),
            assignments=self._period_map(),
        ))

    # ---------- Drop policy ---------- #

    def handle_drop(self, target_slot: Union[str, Slot], player_id: str,
                    source_slot: Optional[Union[str, Slot]] = None,
                    position_label: Optional[str] = None) -> DropResult:
        """
        Apply a drop of a player onto a target slot.

        Args:
            target_slot: Slot the player was dropped on
            player_id: Dragged or selected player
            source_slot: Slot the drag started from; inferred from the period
                         when the player already holds a slot
            position_label: Optional label for the target slot

        Returns:
            DropResult with the period map after the drop
        """
        try:
            target = parse_slot(target_slot)
        except ValueError as e:
            return self._rejected(ErrorCode.INVALID_SLOT, str(e), player_id=player_id)

        if not is_assigned(player_id):
            return self._rejected(ErrorCode.NOTHING_SELECTED, "No player to drop", target=target)
        error = self._squad_error(player_id)
        if error:
            return self._rejected(ErrorCode.NOT_IN_SQUAD, error, player_id=player_id, target=target)

        current_slot = self.store.slot_of(self.team_id, self.period_id, player_id)
        source = self._parse_or_none(source_slot)
        if source is not None and source != current_slot:
            logger.debug("Ignoring stale drag source %s for %s", source, player_id)
            source = None
        if source is None:
            source = current_slot

        if source == target:
            self._reset_interaction()
            return DropResult(DropStatus.NO_OP, player_id=player_id, target=target.key,
                              source=target.key, assignments=self._period_map())

        period = self.store.state.period(self.team_id, self.period_id)
        before = dict(period.assignments)
        occupant = period.assignments.get(target)
        displaced = occupant.player_id if occupant is not None and occupant.player_id != player_id else None

        result = self.store.assign(self.team_id, self.period_id, target, player_id, position_label)
        if not result.ok:
            return self._rejected(result.error, result.message, player_id=player_id, target=target)

        status = DropStatus.ASSIGNED
        if displaced is not None and source is not None:
            back = self.store.assign(self.team_id, self.period_id, source, displaced)
            if not back.ok:
                period.assignments.clear()
                period.assignments.update(before)
                return self._rejected(back.error, back.message, player_id=player_id, target=target)
            status = DropStatus.SWAPPED
        elif displaced is not None:
            status = DropStatus.DISPLACED

        logger.debug("%s %s onto %s (source=%s, displaced=%s)", status.value, player_id, target, source, displaced)
        return self._settled(DropResult(
            status,
            player_id=player_id,
            target=target.key,
            source=source.key if source is not None else None,
            displaced_player=displaced,
            assignments=self._period_map(),
        ))

    # ---------- Helpers ---------- #

    def _squad_error(self, player_id: str) -> Optional[str]:
        team = self.store.state.team(self.team_id)
        if player_id not in team.squad_player_ids:
            return f"Player {player_id} is not in the squad for {team.display_name}"
        return None

    def _period_map(self) -> Dict[Slot, Assignment]:
        return self.store.get(self.team_id, self.period_id)

    def _reset_interaction(self) -> None:
        self.selected_player_id = None
        self.end_drag()

    def _settled(self, result: DropResult) -> DropResult:
        self._reset_interaction()
        if self.on_change is not None:
            self.on_change(dict(result.assignments))
        return result

    def _rejected(self, error: Optional[ErrorCode], message: str,
                  player_id: Optional[str] = None, target=None) -> DropResult:
        return DropResult(
            DropStatus.REJECTED,
            player_id=player_id,
            target=str(target) if target is not None else None,
            error=error,
            message=message,
            assignments=self._period_map(),
        )

    @staticmethod
    def _parse_or_none(slot: Optional[Union[str, Slot]]) -> Optional[Slot]:
        if slot is None:
            return None
        try:
            return parse_slot(slot)
        except ValueError:
            return None
