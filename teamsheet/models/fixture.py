"""
Fixture definition and roster provider interfaces.

The fixture and roster are owned by external collaborators; the engine reads
them to seed teams and squads.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol

from .player import Player
from ..utils.constants import DEFAULT_FORMAT


@dataclass(frozen=True)
class FixtureDefinition:
    """
    What the fixture provider tells the engine about a fixture.

    Attributes:
        fixture_id: Fixture identifier used by the storage collaborator
        number_of_teams: How many teams the club fields
        format: Match format, e.g. "7-a-side"
        team_categories: Category per team, indexed by 0-based team id
        team_names: Optional display name per team
    """
    fixture_id: str
    number_of_teams: int = 1
    format: str = DEFAULT_FORMAT
    team_categories: List[str] = field(default_factory=list)
    team_names: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.number_of_teams < 1:
            raise ValueError("A fixture needs at least one team")

    def category_for(self, team_id: int) -> str:
        if team_id < len(self.team_categories):
            return self.team_categories[team_id]
        return self.team_categories[0] if self.team_categories else ""

    def name_for(self, team_id: int) -> str:
        if team_id < len(self.team_names) and self.team_names[team_id]:
            return self.team_names[team_id]
        return f"Team {team_id + 1}"

    @classmethod
    def from_dict(cls, data: Dict) -> "FixtureDefinition":
        categories = data.get("team_categories")
        if categories is None and data.get("category"):
            categories = [data["category"]]
        return cls(
            fixture_id=str(data["fixture_id"]),
            number_of_teams=int(data.get("number_of_teams") or 1),
            format=data.get("format") or DEFAULT_FORMAT,
            team_categories=list(categories or []),
            team_names=list(data.get("team_names") or []),
        )


class RosterProvider(Protocol):
    """Read-only access to the club's players."""

    def list_players(self, team_category: str) -> List[Player]:
        ...


class StaticRosterProvider:
    """Roster provider backed by an in-memory mapping of category -> players."""

    def __init__(self, players_by_category: Optional[Dict[str, Iterable[Player]]] = None):
        self._players: Dict[str, List[Player]] = {
            category: list(players) for category, players in (players_by_category or {}).items()
        }

    def add_players(self, team_category: str, players: Iterable[Player]) -> None:
        self._players.setdefault(team_category, []).extend(players)

    def list_players(self, team_category: str) -> List[Player]:
        return list(self._players.get(team_category, []))

    def find(self, player_id: str) -> Optional[Player]:
        for players in self._players.values():
            for player in players:
                if player.id == player_id:
                    return player
        return None
