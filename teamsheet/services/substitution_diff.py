"""
Substitution detection between two periods.

A position counts as a substitution when it is occupied in both periods by
different players. A position that did not exist before is an addition, and
an empty position on either side is neither.
"""
from typing import Dict, Mapping, Optional

from ..models.selection import Assignment, is_assigned
from ..models.slot import Slot


def _player_at(period_map: Mapping[Slot, Assignment], position_label: str) -> Optional[str]:
    for assignment in period_map.values():
        if assignment.position_label == position_label:
            return assignment.player_id
    return None


def is_substitution(current: Mapping[Slot, Assignment],
                    previous: Optional[Mapping[Slot, Assignment]],
                    position_label: str) -> bool:
    """
    Whether the player at a position changed between two periods.

    Args:
        current: Slot assignments of the later period
        previous: Slot assignments of the earlier period (None for the first period)
        position_label: Position to compare, e.g. "DC"

    Returns:
        True iff both periods have a player at the position and they differ
    """
    if not previous:
        return False
    now_player = _player_at(current, position_label)
    before_player = _player_at(previous, position_label)
    if not is_assigned(now_player) or not is_assigned(before_player):
        return False
    return now_player != before_player


def substitution_flags(current: Mapping[Slot, Assignment],
                       previous: Optional[Mapping[Slot, Assignment]]) -> Dict[str, bool]:
    """Substitution flag for every position label used in the current period."""
    return {
        assignment.position_label: is_substitution(current, previous, assignment.position_label)
        for assignment in current.values()
    }
