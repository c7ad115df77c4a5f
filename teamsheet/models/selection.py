"""
Selection state model for the Teamsheet selection engine.

This module contains the nested team -> period -> slot -> assignment model
together with its JSON draft format and snapshot helpers.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .errors import UnknownPeriodError, UnknownTeamError
from .slot import Slot, SubstituteSlot, parse_slot, slot_sort_key
from ..utils.constants import (
    DEFAULT_FORMAT, DEFAULT_PERFORMANCE_CATEGORY, DEFAULT_PERIOD_DURATION_MIN,
    HALF_INDEXES, MAX_PERIOD_DURATION_MIN, MIN_PERIOD_DURATION_MIN,
    PERFORMANCE_CATEGORIES, RESERVED_PERIOD_IDS, UNASSIGNED_PLAYER_ID
)


def is_assigned(player_id: Optional[str]) -> bool:
    """True for a real player id, False for None, "" or the unassigned sentinel."""
    return bool(player_id) and player_id != UNASSIGNED_PLAYER_ID


@dataclass(frozen=True)
class Assignment:
    """
    A player placed in a slot for one period.

    Attributes:
        player_id: Assigned player
        position_label: Position shown for the slot ("DC", "sub-2")
        is_substitution: Whether the player starts the period on the bench
        performance_category: Performance category tag of the selection
    """
    player_id: str
    position_label: str
    is_substitution: bool = False
    performance_category: str = DEFAULT_PERFORMANCE_CATEGORY

    def to_dict(self) -> Dict:
        return {
            "player_id": self.player_id,
            "position_label": self.position_label,
            "is_substitution": self.is_substitution,
            "performance_category": self.performance_category,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Assignment":
        return cls(
            player_id=str(data["player_id"]),
            position_label=data["position_label"],
            is_substitution=bool(data.get("is_substitution", False)),
            performance_category=data.get("performance_category") or DEFAULT_PERFORMANCE_CATEGORY,
        )


@dataclass
class Period:
    """
    A timed segment of a fixture with its own slot assignments.

    Attributes:
        id: Period identifier, unique within the team
        team_id: Owning team (0-indexed)
        half_index: 1 for the first half, 2 for the second
        order_within_half: 1-based position of the period inside its half
        duration_minutes: Length of the period, 1-90
        performance_category: Tag applied to new assignments in this period
        next_substitute_index: Next substitute slot number to hand out
        assignments: Occupied slots only; empty slots are absent
    """
    id: str
    team_id: int
    half_index: int
    order_within_half: int
    duration_minutes: int = DEFAULT_PERIOD_DURATION_MIN
    performance_category: str = DEFAULT_PERFORMANCE_CATEGORY
    next_substitute_index: int = 1
    assignments: Dict[Slot, Assignment] = field(default_factory=dict)

    @property
    def is_reserved(self) -> bool:
        return self.id in RESERVED_PERIOD_IDS

    @property
    def sort_key(self):
        return (self.half_index, self.order_within_half)

    def slot_of(self, player_id: str) -> Optional[Slot]:
        """Slot currently held by a player in this period, if any."""
        for slot, assignment in self.assignments.items():
            if assignment.player_id == player_id:
                return slot
        return None

    def slot_for_label(self, position_label: str) -> Optional[Slot]:
        for slot, assignment in self.assignments.items():
            if assignment.position_label == position_label:
                return slot
        return None

    def substitute_slots(self) -> List[SubstituteSlot]:
        return sorted(s for s in self.assignments if isinstance(s, SubstituteSlot))

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "half_index": self.half_index,
            "order_within_half": self.order_within_half,
            "duration_minutes": self.duration_minutes,
            "performance_category": self.performance_category,
            "next_substitute_index": self.next_substitute_index,
            "assignments": {
                slot.key: assignment.to_dict()
                for slot, assignment in sorted(self.assignments.items(), key=lambda kv: slot_sort_key(kv[0]))
            },
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Period":
        """
        Create a Period from a draft dictionary.

        Raises:
            ValueError: If the period breaks a data-model rule: unknown half,
                        duration outside 1-90, unknown category, a label that
                        does not name its slot, an empty-slot sentinel, or a
                        player holding two slots
        """
        period_id = data["id"]
        assignments = {}
        for key, value in (data.get("assignments") or {}).items():
            slot = parse_slot(key)
            assignment = Assignment.from_dict(value)
            if not is_assigned(assignment.player_id):
                raise ValueError(f"Period {period_id}: slot {slot.key} holds no player")
            if assignment.position_label != slot.label:
                raise ValueError(
                    f"Period {period_id}: slot {slot.key} is labelled {assignment.position_label}"
                )
            if assignment.performance_category not in PERFORMANCE_CATEGORIES:
                raise ValueError(
                    f"Period {period_id}: unknown performance category {assignment.performance_category!r}"
                )
            assignments[slot] = assignment

        players = [a.player_id for a in assignments.values()]
        if len(players) != len(set(players)):
            raise ValueError(f"Period {period_id}: a player holds more than one slot")

        period = cls(
            id=period_id,
            team_id=int(data["team_id"]),
            half_index=int(data["half_index"]),
            order_within_half=int(data["order_within_half"]),
            duration_minutes=int(data.get("duration_minutes", DEFAULT_PERIOD_DURATION_MIN)),
            performance_category=data.get("performance_category") or DEFAULT_PERFORMANCE_CATEGORY,
            next_substitute_index=int(data.get("next_substitute_index", 1)),
            assignments=assignments,
        )
        if period.half_index not in HALF_INDEXES:
            raise ValueError(f"Period {period_id}: half must be 1 or 2, got {period.half_index}")
        if not MIN_PERIOD_DURATION_MIN <= period.duration_minutes <= MAX_PERIOD_DURATION_MIN:
            raise ValueError(
                f"Period {period_id}: duration must be between {MIN_PERIOD_DURATION_MIN} "
                f"and {MAX_PERIOD_DURATION_MIN} minutes, got {period.duration_minutes}"
            )
        if period.performance_category not in PERFORMANCE_CATEGORIES:
            raise ValueError(f"Period {period_id}: unknown performance category {period.performance_category!r}")
        # Older drafts did not store the counter; never hand out a used index
        used = [slot.index for slot in period.substitute_slots()]
        if used:
            period.next_substitute_index = max(period.next_substitute_index, max(used) + 1)
        return period


@dataclass
class Team:
    """
    One of the fixture's teams.

    Attributes:
        id: 0-indexed team id
        display_name: Name shown in the UI ("Team 1")
        category: Age group / squad category used to look up the roster
        format: Fixture format ("7-a-side", ...) selecting the slot layout
        squad_player_ids: Players eligible for any of this team's periods
        periods: Periods keyed by id
        next_period_number: Counter for user created period ids
    """
    id: int
    display_name: str = ""
    category: str = ""
    format: str = DEFAULT_FORMAT
    squad_player_ids: Set[str] = field(default_factory=set)
    periods: Dict[str, Period] = field(default_factory=dict)
    next_period_number: int = 1

    def __post_init__(self):
        if not self.display_name:
            self.display_name = f"Team {self.id + 1}"

    def ordered_periods(self) -> List[Period]:
        return sorted(self.periods.values(), key=lambda p: p.sort_key)

    def period(self, period_id: str) -> Period:
        try:
            return self.periods[period_id]
        except KeyError:
            raise UnknownPeriodError(self.id, period_id) from None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "category": self.category,
            "format": self.format,
            "squad_player_ids": sorted(self.squad_player_ids),
            "periods": [period.to_dict() for period in self.ordered_periods()],
            "next_period_number": self.next_period_number,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Team":
        team = cls(
            id=int(data["id"]),
            display_name=data.get("display_name", ""),
            category=data.get("category", ""),
            format=data.get("format") or DEFAULT_FORMAT,
            squad_player_ids={str(p) for p in data.get("squad_player_ids", [])},
            next_period_number=int(data.get("next_period_number", 1)),
        )
        for period_data in data.get("periods", []):
            period = Period.from_dict(period_data)
            team.periods[period.id] = period
        return team


@dataclass
class SelectionState:
    """
    Root of the selection model for one fixture.

    Attributes:
        fixture_id: Fixture the selections belong to
        teams: Teams keyed by 0-indexed id
        captains: Captain player id per team
    """
    fixture_id: Optional[str] = None
    teams: Dict[int, Team] = field(default_factory=dict)
    captains: Dict[int, str] = field(default_factory=dict)

    def team(self, team_id: int) -> Team:
        """
        Look up a team.

        Raises:
            UnknownTeamError: If the team does not exist
        """
        try:
            return self.teams[team_id]
        except (KeyError, TypeError):
            raise UnknownTeamError(team_id) from None

    def period(self, team_id: int, period_id: str) -> Period:
        return self.team(team_id).period(period_id)

    def ordered_teams(self) -> List[Team]:
        return [self.teams[team_id] for team_id in sorted(self.teams)]

    def snapshot(self) -> "SelectionState":
        """Deep copy for readers; mutating it never affects this state."""
        return copy.deepcopy(self)

    def restore(self, snapshot: "SelectionState") -> None:
        """Replace this state's contents in place with a copy of a snapshot."""
        restored = copy.deepcopy(snapshot)
        self.fixture_id = restored.fixture_id
        self.teams = restored.teams
        self.captains = restored.captains

    def assignment_map(self) -> Dict[int, Dict[str, Dict[str, Assignment]]]:
        """Canonical team -> period -> slot key -> assignment view, skipping empty periods."""
        result: Dict[int, Dict[str, Dict[str, Assignment]]] = {}
        for team in self.ordered_teams():
            periods = {}
            for period in team.ordered_periods():
                if period.assignments:
                    periods[period.id] = {
                        slot.key: assignment for slot, assignment in period.assignments.items()
                    }
            if periods:
                result[team.id] = periods
        return result

    def to_json(self) -> dict:
        """
        Convert SelectionState to JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "fixture_id": self.fixture_id,
            "teams": [team.to_dict() for team in self.ordered_teams()],
            "captains": {str(team_id): player_id for team_id, player_id in sorted(self.captains.items())},
        }

    @staticmethod
    def from_json(data: dict) -> "SelectionState":
        """
        Create SelectionState from JSON dictionary.

        Args:
            data: Dictionary with selection state data

        Returns:
            New SelectionState instance

        Raises:
            ValueError: If the draft breaks a data-model rule, such as a team
                        missing a reserved half, a period filed under another
                        team, or an assigned player or captain outside the squad
        """
        state = SelectionState(fixture_id=data.get("fixture_id"))
        for team_data in data.get("teams", []):
            team = Team.from_dict(team_data)
            state.teams[team.id] = team
            _check_team(team)
        for team_id, player_id in (data.get("captains") or {}).items():
            if is_assigned(player_id):
                team = state.teams.get(int(team_id))
                if team is None or str(player_id) not in team.squad_player_ids:
                    raise ValueError(f"Captain {player_id} of team {team_id} is not in the squad")
                state.captains[int(team_id)] = str(player_id)
        return state


def _check_team(team: Team) -> None:
    missing = [period_id for period_id in RESERVED_PERIOD_IDS if period_id not in team.periods]
    if missing:
        raise ValueError(f"Team {team.id} is missing reserved period(s) {', '.join(missing)}")
    for period in team.periods.values():
        if period.team_id != team.id:
            raise ValueError(f"Period {period.id} belongs to team {period.team_id}, not team {team.id}")
        for slot, assignment in period.assignments.items():
            if assignment.player_id not in team.squad_player_ids:
                raise ValueError(
                    f"Player {assignment.player_id} in {period.id} {slot.key} "
                    f"is not in the squad of team {team.id}"
                )
