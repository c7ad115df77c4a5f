"""
Selection session: the UI-facing entry point of the engine.

A session owns one fixture's SelectionState and wires the services around
it. Every mutation runs through the command manager so it can be undone.
Readers get snapshots, never the live state.
"""
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .assignment_store import AssignmentStore
from .drag_drop import ChangeListener, DragDropCoordinator, DropResult
from .period_service import PeriodService, period_label
from .persistence_service import SaveResult, SelectionPersistenceService
from .selection_commands import SelectionCommand, SelectionCommandManager
from .squad_service import SquadService
from .substitution_diff import substitution_flags
from ..models import (
    AssignmentResult, ErrorCode, FixtureDefinition, OperationResult, Player,
    RosterProvider, SelectionState, Team
)
from ..models.formation import FormationTemplates
from ..utils.constants import DEFAULT_PERIOD_DURATION_MIN

logger = logging.getLogger(__name__)


class SelectionSession:
    """
    Facade over the selection services for one fixture.

    Attributes:
        state: Live selection state; use snapshot() to read it
        store: Assignment store shared by every service
        squads: Squad and captain management
        periods: Period management
        persistence: Save/load service, None for sessions without storage
        roster: Roster provider used to list available players
    """

    def __init__(self, state: Optional[SelectionState] = None,
                 persistence: Optional[SelectionPersistenceService] = None,
                 roster: Optional[RosterProvider] = None,
                 max_history: int = 50):
        self.state = state if state is not None else SelectionState()
        self.store = AssignmentStore(self.state)
        self.squads = SquadService(self.state, self.store)
        self.periods = PeriodService(self.state, self.store)
        self.persistence = persistence
        self.roster = roster
        self.commands = SelectionCommandManager(max_history=max_history)
        self._coordinators: Dict[Tuple[int, str], DragDropCoordinator] = {}

    @classmethod
    def from_fixture(cls, fixture: FixtureDefinition,
                     roster: Optional[RosterProvider] = None,
                     persistence: Optional[SelectionPersistenceService] = None,
                     duration_minutes: int = DEFAULT_PERIOD_DURATION_MIN) -> "SelectionSession":
        """
        Start a session for a fixture with one team per fixture team.

        Every team is created with an empty squad and the two reserved half
        periods.
        """
        state = SelectionState(fixture_id=fixture.fixture_id)
        for team_id in range(fixture.number_of_teams):
            state.teams[team_id] = Team(
                id=team_id,
                display_name=fixture.name_for(team_id),
                category=fixture.category_for(team_id),
                format=fixture.format,
            )
        session = cls(state, persistence=persistence, roster=roster)
        for team_id in state.teams:
            session.periods.seed_team(team_id, duration_minutes)
        logger.info(
            "Started selection session for fixture %s with %d team(s)",
            fixture.fixture_id, fixture.number_of_teams,
        )
        return session

    # ---------- Reads ---------- #

    def snapshot(self) -> SelectionState:
        return self.state.snapshot()

    def teams_containing(self, player_id: str) -> Set[int]:
        return self.squads.teams_containing(player_id)

    def substitution_flags(self, team_id: int, period_id: str) -> Dict[str, bool]:
        """Substitution flag per position label of a period, compared with the period before it."""
        current = self.store.get(team_id, period_id)
        previous = self.periods.previous_period(team_id, period_id)
        return substitution_flags(current, dict(previous.assignments) if previous else None)

    def available_players(self, team_id: int) -> List[Player]:
        """Roster players for the team's category; empty without a roster provider."""
        team = self.state.team(team_id)
        if self.roster is None:
            return []
        return self.roster.list_players(team.category)

    def unassigned_players(self, team_id: int, period_id: str) -> List[str]:
        """Squad members without a slot in the period, sorted by id."""
        team = self.state.team(team_id)
        placed = {a.player_id for a in team.period(period_id).assignments.values()}
        return sorted(team.squad_player_ids - placed)

    def default_slots(self, team_id: int) -> List[str]:
        """Position codes of the team format's default layout."""
        team = self.state.team(team_id)
        return [slot.key for slot in FormationTemplates.default_slots(team.format)]

    def period_summaries(self, team_id: int) -> List[dict]:
        return [
            {
                "id": period.id,
                "label": period_label(period),
                "half_index": period.half_index,
                "order_within_half": period.order_within_half,
                "duration_minutes": period.duration_minutes,
                "performance_category": period.performance_category,
                "protected": period.is_reserved,
            }
            for period in self.periods.ordered_periods(team_id)
        ]

    # ---------- Squads ---------- #

    def set_squad(self, team_id: int, player_ids: Iterable[str]) -> List[Tuple[str, str]]:
        player_ids = list(player_ids)
        pruned = self._run(f"Set squad of team {team_id}", lambda: self.squads.set_squad(team_id, player_ids))
        return pruned or []

    def set_captain(self, team_id: int, player_id: Optional[str]) -> OperationResult:
        return self._run(f"Set captain of team {team_id}", lambda: self.squads.set_captain(team_id, player_id))

    # ---------- Assignments ---------- #

    def assign(self, team_id: int, period_id: str, slot, player_id: Optional[str],
               position_label: Optional[str] = None) -> AssignmentResult:
        return self._run(
            f"Assign {player_id} to {slot}",
            lambda: self.store.assign(team_id, period_id, slot, player_id, position_label),
        )

    def remove(self, team_id: int, period_id: str, slot) -> OperationResult:
        removed = self._run(f"Clear {slot}", lambda: self.store.remove(team_id, period_id, slot))
        return OperationResult.success(removed)

    def coordinator(self, team_id: int, period_id: str,
                    on_change: Optional[ChangeListener] = None) -> DragDropCoordinator:
        """
        Interaction coordinator for one team's period.

        Coordinators are cached per (team, period), so selection and drag
        state survive between UI events.
        """
        self.state.period(team_id, period_id)
        key = (team_id, period_id)
        coordinator = self._coordinators.get(key)
        if coordinator is None:
            coordinator = DragDropCoordinator(self.store, team_id, period_id, on_change)
            self._coordinators[key] = coordinator
        elif on_change is not None:
            coordinator.on_change = on_change
        return coordinator

    def drop(self, team_id: int, period_id: str, target_slot, player_id: str,
             source_slot=None, position_label: Optional[str] = None) -> DropResult:
        coordinator = self.coordinator(team_id, period_id)
        return self._run(
            f"Drop {player_id} on {target_slot}",
            lambda: coordinator.handle_drop(target_slot, player_id, source_slot, position_label),
        )

    def drop_on_substitutes(self, team_id: int, period_id: str, player_id: str) -> DropResult:
        coordinator = self.coordinator(team_id, period_id)
        return self._run(
            f"Bench {player_id}",
            lambda: coordinator.drop_on_substitutes(player_id),
        )

    def click_slot(self, team_id: int, period_id: str, slot,
                   position_label: Optional[str] = None) -> DropResult:
        coordinator = self.coordinator(team_id, period_id)
        return self._run(f"Place selected player on {slot}", lambda: coordinator.click_slot(slot, position_label))

    # ---------- Periods ---------- #

    def add_period(self, team_id: int, half_index: int,
                   duration_minutes: int = DEFAULT_PERIOD_DURATION_MIN) -> OperationResult:
        return self._run(
            f"Add period to half {half_index} of team {team_id}",
            lambda: self.periods.add_period(team_id, half_index, duration_minutes),
        )

    def delete_period(self, team_id: int, period_id: str) -> OperationResult:
        result = self._run(f"Delete {period_id}", lambda: self.periods.delete_period(team_id, period_id))
        if result.ok:
            self._coordinators.pop((team_id, period_id), None)
        return result

    def update_duration(self, team_id: int, period_id: str, minutes) -> OperationResult:
        return self._run(
            f"Set duration of {period_id}",
            lambda: self.periods.update_duration(team_id, period_id, minutes),
        )

    def set_performance_category(self, team_id: int, period_id: str, category: str) -> OperationResult:
        return self._run(
            f"Set category of {period_id}",
            lambda: self.periods.set_performance_category(team_id, period_id, category),
        )

    # ---------- History ---------- #

    def undo(self) -> OperationResult:
        if not self.commands.undo():
            return OperationResult.failure(ErrorCode.NOTHING_TO_UNDO, "Nothing to undo")
        return OperationResult.success()

    def redo(self) -> OperationResult:
        if not self.commands.redo():
            return OperationResult.failure(ErrorCode.NOTHING_TO_REDO, "Nothing to redo")
        return OperationResult.success()

    @property
    def can_undo(self) -> bool:
        return self.commands.can_undo()

    @property
    def can_redo(self) -> bool:
        return self.commands.can_redo()

    # ---------- Persistence ---------- #

    @property
    def is_saving(self) -> bool:
        return self.persistence is not None and self.persistence.is_saving

    def save(self) -> SaveResult:
        """
        Save the fixture's selections.

        Raises:
            RuntimeError: If the session has no persistence service
            ValueError: If the state has no fixture id
        """
        return self._require_persistence().save(self.state)

    def load(self, fixture_id: Optional[str] = None) -> SelectionState:
        """
        Replace the session's state with the stored selections of a fixture.

        Team names, categories and formats of the current state are kept.
        Loading clears the undo history.

        Raises:
            RuntimeError: If the session has no persistence service
            StorageError: If the stored rows could not be read
        """
        fixture_id = fixture_id or self.state.fixture_id
        if not fixture_id:
            raise ValueError("No fixture id to load")
        loaded = self._require_persistence().load(fixture_id, teams=self.state.teams)
        self.state.restore(loaded)
        self.commands.clear_history()
        self._coordinators.clear()
        return self.snapshot()

    # ---------- Internals ---------- #

    def _run(self, description: str, action):
        command = SelectionCommand(self.state, action, description)
        self.commands.execute_command(command)
        return command.result

    def _require_persistence(self) -> SelectionPersistenceService:
        if self.persistence is None:
            raise RuntimeError("This session has no storage configured")
        return self.persistence
