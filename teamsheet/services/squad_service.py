"""
Squad membership tracking for the Teamsheet selection engine.

A team's squad is the set of players that may be assigned in any of its
periods. Dropping a player from the squad always wins over their existing
assignments: those are pruned rather than rejected.
"""
import logging
from typing import Iterable, List, Optional, Set, Tuple

from .assignment_store import AssignmentStore
from ..models.results import ErrorCode, OperationResult
from ..models.selection import SelectionState, is_assigned

logger = logging.getLogger(__name__)


class SquadService:
    """
    Service for per-team squad membership and captaincy.

    Squad sets are the only state this service owns; assignment pruning goes
    through the AssignmentStore.
    """

    def __init__(self, state: SelectionState, store: Optional[AssignmentStore] = None):
        self.state = state
        self.store = store or AssignmentStore(state)

    def squad_of(self, team_id: int) -> Set[str]:
        return set(self.state.team(team_id).squad_player_ids)

    def set_squad(self, team_id: int, player_ids: Iterable[str]) -> List[Tuple[str, str]]:
        """
        Replace a team's squad.

        Players dropped from the squad lose every assignment they hold in the
        team's periods, and lose the captaincy if they held it.

        Args:
            team_id: 0-indexed team id
            player_ids: New squad; sentinel and empty ids are ignored

        Returns:
            (period_id, slot_key) pairs that were pruned

        Raises:
            UnknownTeamError: If the team does not exist
        """
        team = self.state.team(team_id)
        new_squad = {str(pid) for pid in player_ids if is_assigned(pid)}
        removed = team.squad_player_ids - new_squad

        pruned = self.store.prune_players(team_id, removed)
        team.squad_player_ids = new_squad

        captain = self.state.captains.get(team_id)
        if captain is not None and captain not in new_squad:
            del self.state.captains[team_id]
            logger.info("Cleared captain %s of team %s after squad change", captain, team_id)

        if pruned:
            logger.info(
                "Pruned %d assignment(s) from team %s after removing %s from the squad",
                len(pruned), team_id, ", ".join(sorted(removed)),
            )
        return pruned

    def add_to_squad(self, team_id: int, player_id: str) -> None:
        team = self.state.team(team_id)
        if is_assigned(player_id):
            team.squad_player_ids.add(player_id)

    def remove_from_squad(self, team_id: int, player_id: str) -> List[Tuple[str, str]]:
        return self.set_squad(team_id, self.squad_of(team_id) - {player_id})

    def teams_containing(self, player_id: str) -> Set[int]:
        """Teams whose squad includes the player."""
        return {
            team.id for team in self.state.teams.values()
            if player_id in team.squad_player_ids
        }

    def selected_players(self) -> Set[str]:
        """Every player assigned to a slot in any team and period."""
        selected = set()
        for team in self.state.teams.values():
            for period in team.periods.values():
                selected.update(a.player_id for a in period.assignments.values())
        return selected

    # ---------- Captaincy ---------- #

    def captain_of(self, team_id: int) -> Optional[str]:
        self.state.team(team_id)
        return self.state.captains.get(team_id)

    def set_captain(self, team_id: int, player_id: Optional[str]) -> OperationResult:
        """
        Set or clear a team's captain.

        The captain must be in the squad but does not need to hold a slot.
        """
        team = self.state.team(team_id)
        if not is_assigned(player_id):
            self.state.captains.pop(team_id, None)
            return OperationResult.success()
        if player_id not in team.squad_player_ids:
            return OperationResult.failure(
                ErrorCode.NOT_IN_SQUAD,
                f"Captain must be in the squad for {team.display_name}",
            )
        self.state.captains[team_id] = player_id
        return OperationResult.success(player_id)
