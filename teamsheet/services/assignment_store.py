"""
Assignment store for the Teamsheet selection engine.

The store is the only writer of slot assignments. It enforces that a player
holds at most one slot per period and that only squad members are assigned.
Validation failures come back as AssignmentResult values and leave the state
untouched.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..models.results import AssignmentResult, AssignmentStatus
from ..models.selection import Assignment, Period, SelectionState, is_assigned
from ..models.slot import (
    Slot, SubstituteSlot, is_position_code, parse_slot
)
from ..utils.constants import PERFORMANCE_CATEGORIES

logger = logging.getLogger(__name__)

SlotRef = Union[str, Slot]


class AssignmentStore:
    """Typed mutation operations over a SelectionState's slot assignments."""

    def __init__(self, state: SelectionState):
        self.state = state

    # ---------- Reads ---------- #

    def get(self, team_id: int, period_id: str) -> Dict[Slot, Assignment]:
        """
        Snapshot of one period's assignments.

        Assignments and slots are immutable, so the returned dict can be
        iterated or modified freely without touching the store.
        """
        return dict(self.state.period(team_id, period_id).assignments)

    def occupant(self, team_id: int, period_id: str, slot: SlotRef) -> Optional[Assignment]:
        try:
            parsed = parse_slot(slot)
        except ValueError:
            return None
        return self.state.period(team_id, period_id).assignments.get(parsed)

    def slot_of(self, team_id: int, period_id: str, player_id: str) -> Optional[Slot]:
        """Slot a player holds in a period, if any."""
        return self.state.period(team_id, period_id).slot_of(player_id)

    # ---------- Mutations ---------- #

    def assign(
        self,
        team_id: int,
        period_id: str,
        slot: SlotRef,
        player_id: Optional[str],
        position_label: Optional[str] = None,
        performance_category: Optional[str] = None,
        is_substitution: Optional[bool] = None,
    ) -> AssignmentResult:
        """
        Place a player in a slot.

        If the player already holds a different slot in the same period that
        slot is cleared first. Assigning the unassigned sentinel clears the slot.

        Args:
            team_id: 0-indexed team id
            period_id: Period within the team
            slot: Target slot or slot key ("DC", "sub-2")
            player_id: Player to assign, or the unassigned sentinel
            position_label: Label for the slot; must be the slot's own label
            performance_category: Tag; defaults to the period's category
            is_substitution: Defaults to whether the slot is a substitute slot

        Returns:
            AssignmentResult with the target slot's previous occupant

        Raises:
            UnknownTeamError: If the team does not exist
            UnknownPeriodError: If the period does not exist
        """
        team = self.state.team(team_id)
        period = team.period(period_id)

        try:
            target = parse_slot(slot)
        except ValueError as e:
            return AssignmentResult(AssignmentStatus.INVALID_SLOT, message=str(e))

        slot_error = self._check_slot(period, target)
        if slot_error:
            return AssignmentResult(AssignmentStatus.INVALID_SLOT, message=slot_error)

        current = period.assignments.get(target)

        if not is_assigned(player_id):
            if current is None:
                return AssignmentResult(AssignmentStatus.UNCHANGED)
            del period.assignments[target]
            logger.debug("Cleared %s in team %s period %s", target, team_id, period_id)
            return AssignmentResult(AssignmentStatus.CLEARED, previous_occupant=current.player_id)

        if player_id not in team.squad_player_ids:
            return AssignmentResult(
                AssignmentStatus.NOT_IN_SQUAD,
                message=f"Player {player_id} is not in the squad for {team.display_name}",
            )

        if performance_category is not None and performance_category not in PERFORMANCE_CATEGORIES:
            return AssignmentResult(
                AssignmentStatus.INVALID_CATEGORY,
                message=f"Unknown performance category: {performance_category!r}",
            )

        moved_from = period.slot_of(player_id)
        if moved_from == target:
            moved_from = None

        label_error = self._check_label(target, position_label)
        if label_error:
            return AssignmentResult(AssignmentStatus.INVALID_SLOT, message=label_error)

        assignment = Assignment(
            player_id=player_id,
            position_label=target.label,
            is_substitution=isinstance(target, SubstituteSlot) if is_substitution is None else bool(is_substitution),
            performance_category=performance_category or period.performance_category,
        )

        if current is not None and current.player_id == player_id:
            period.assignments[target] = assignment
            return AssignmentResult(AssignmentStatus.UNCHANGED)

        if moved_from is not None:
            del period.assignments[moved_from]
        period.assignments[target] = assignment

        previous = current.player_id if current is not None else None
        logger.debug(
            "Assigned %s to %s in team %s period %s (previous=%s, moved_from=%s)",
            player_id, target, team_id, period_id, previous, moved_from,
        )
        return AssignmentResult(
            AssignmentStatus.ASSIGNED,
            previous_occupant=previous,
            moved_from=moved_from.key if moved_from is not None else None,
        )

    def remove(self, team_id: int, period_id: str, slot: SlotRef) -> Optional[Assignment]:
        """
        Clear one slot. Removing an empty or unknown slot is a no-op.

        Returns:
            The assignment that was removed, if any
        """
        period = self.state.period(team_id, period_id)
        try:
            target = parse_slot(slot)
        except ValueError:
            logger.debug("Ignoring remove of unparseable slot %r", slot)
            return None
        removed = period.assignments.pop(target, None)
        if removed is not None:
            logger.debug("Removed %s from %s in team %s period %s", removed.player_id, target, team_id, period_id)
        return removed

    def allocate_substitute_slot(self, team_id: int, period_id: str) -> SubstituteSlot:
        """Hand out the next substitute slot of a period. Numbers are never reused."""
        period = self.state.period(team_id, period_id)
        slot = SubstituteSlot(period.next_substitute_index)
        period.next_substitute_index += 1
        return slot

    def clear_period(self, team_id: int, period_id: str) -> int:
        """Empty every slot of a period. Returns how many slots were cleared."""
        period = self.state.period(team_id, period_id)
        count = len(period.assignments)
        period.assignments.clear()
        return count

    def prune_players(self, team_id: int, player_ids: Iterable[str]) -> List[Tuple[str, str]]:
        """
        Clear every slot held by the given players in any of the team's periods.

        Returns:
            (period_id, slot_key) pairs that were cleared
        """
        doomed = set(player_ids)
        pruned = []
        if not doomed:
            return pruned
        for period in self.state.team(team_id).ordered_periods():
            for slot, assignment in list(period.assignments.items()):
                if assignment.player_id in doomed:
                    del period.assignments[slot]
                    pruned.append((period.id, slot.key))
        return pruned

    def retag_period(self, team_id: int, period_id: str, performance_category: str) -> None:
        """Set a period's performance category and apply it to its assignments."""
        if performance_category not in PERFORMANCE_CATEGORIES:
            raise ValueError(f"Unknown performance category: {performance_category!r}")
        period = self.state.period(team_id, period_id)
        period.performance_category = performance_category
        for slot, assignment in list(period.assignments.items()):
            period.assignments[slot] = Assignment(
                player_id=assignment.player_id,
                position_label=assignment.position_label,
                is_substitution=assignment.is_substitution,
                performance_category=performance_category,
            )

    # ---------- Validation helpers ---------- #

    @staticmethod
    def _check_slot(period: Period, slot: Slot) -> Optional[str]:
        if isinstance(slot, SubstituteSlot):
            if slot.index >= period.next_substitute_index:
                return f"Substitute slot {slot.key} has not been added to this period"
            return None
        if not is_position_code(slot.code):
            return f"Unknown position code: {slot.code}"
        return None

    @staticmethod
    def _check_label(target: Slot, position_label: Optional[str]) -> Optional[str]:
        """A slot is always labelled with its own code; any other label is rejected."""
        if position_label is None:
            return None
        label = str(position_label).strip()
        if isinstance(target, SubstituteSlot):
            if label != target.label:
                return f"Substitute slot {target.key} cannot be labelled {position_label}"
            return None
        label = label.upper()
        if not is_position_code(label):
            return f"Unknown position label: {position_label}"
        if label != target.label:
            return f"Slot {target.key} cannot be labelled {label}; move the player to {label} instead"
        return None
