"""
Flat record format for persisted selections.

The nested team -> period -> slot model is flattened into one record per
occupied slot, which is what the storage collaborator replaces in bulk.
Empty slots are never written; on reload a missing record means unassigned.

Team numbers in records are 1-indexed while team ids in memory are
0-indexed. This module is the only place that converts between the two.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .period_service import parse_period_id, validate_duration
from ..models.selection import Assignment, Period, SelectionState, Team, is_assigned
from ..models.slot import SubstituteSlot, parse_slot, slot_sort_key
from ..utils.constants import (
    DEFAULT_PERFORMANCE_CATEGORY, DEFAULT_PERIOD_DURATION_MIN,
    FIRST_HALF_PERIOD_ID, PERFORMANCE_CATEGORIES, RESERVED_PERIOD_IDS
)

logger = logging.getLogger(__name__)


def team_number_for(team_id: int) -> int:
    return team_id + 1


def team_id_for(team_number: int) -> int:
    return team_number - 1


@dataclass(frozen=True)
class SelectionRecord:
    """
    One persisted selection row.

    Attributes:
        team_number: 1-indexed team number
        period_id: Period the selection belongs to
        slot_label: Position label of the slot ("DC", "sub-1")
        player_id: Selected player
        performance_category: Performance category tag
        is_captain: Whether the player captains the team
        duration_minutes: Duration of the period
    """
    team_number: int
    period_id: str
    slot_label: str
    player_id: str
    performance_category: str = DEFAULT_PERFORMANCE_CATEGORY
    is_captain: bool = False
    duration_minutes: int = DEFAULT_PERIOD_DURATION_MIN

    def to_dict(self) -> Dict[str, Any]:
        """Row form using the storage table's column names."""
        return {
            "team_number": self.team_number,
            "period_id": self.period_id,
            "position": self.slot_label,
            "player_id": self.player_id,
            "performance_category": self.performance_category,
            "is_captain": self.is_captain,
            "duration": self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SelectionRecord":
        """
        Create a record from a storage row.

        Missing performance categories and durations are filled with their
        defaults here; range checks happen in reconstruct.

        Raises:
            ValueError: If a required column is missing or not a number
        """
        missing = [key for key in ("team_number", "period_id", "position", "player_id") if data.get(key) in (None, "")]
        if missing:
            raise ValueError(f"Selection row missing {', '.join(missing)}")
        try:
            team_number = int(data["team_number"])
            duration = data.get("duration")
            duration = int(duration) if duration is not None else DEFAULT_PERIOD_DURATION_MIN
        except (TypeError, ValueError):
            raise ValueError(f"Selection row has a non-numeric team number or duration: {dict(data)!r}")
        return cls(
            team_number=team_number,
            period_id=str(data["period_id"]),
            slot_label=str(data["position"]),
            player_id=str(data["player_id"]),
            performance_category=data.get("performance_category") or DEFAULT_PERFORMANCE_CATEGORY,
            is_captain=bool(data.get("is_captain", False)),
            duration_minutes=duration,
        )


def flatten(state: SelectionState) -> List[SelectionRecord]:
    """
    Flatten a selection state into records, one per occupied slot.

    Records are ordered by team, period order and slot so repeated saves of
    the same state produce identical payloads.
    """
    records = []
    for team in state.ordered_teams():
        captain = state.captains.get(team.id)
        for period in team.ordered_periods():
            for slot in sorted(period.assignments, key=slot_sort_key):
                assignment = period.assignments[slot]
                if not is_assigned(assignment.player_id):
                    continue
                records.append(SelectionRecord(
                    team_number=team_number_for(team.id),
                    period_id=period.id,
                    slot_label=assignment.position_label,
                    player_id=assignment.player_id,
                    performance_category=assignment.performance_category,
                    is_captain=assignment.player_id == captain,
                    duration_minutes=period.duration_minutes,
                ))
    return records


def reconstruct(records: Iterable[Any], fixture_id: Optional[str] = None,
                teams: Optional[Mapping[int, Team]] = None) -> SelectionState:
    """
    Rebuild a selection state from records.

    Args:
        records: SelectionRecord instances or storage rows
        fixture_id: Fixture the records belong to
        teams: Known teams (names, formats, squads, periods) to merge into;
               they are copied, never modified

    Returns:
        New SelectionState. Every team has the reserved half periods, and
        every player found in the records is in their team's squad.
    """
    state = SelectionState(fixture_id=fixture_id)
    for team_id, known in sorted((teams or {}).items()):
        copy = Team.from_dict(known.to_dict())
        for period in copy.periods.values():
            period.assignments.clear()
        state.teams[team_id] = copy

    for raw in records:
        record = _coerce(raw)
        if record is None:
            continue
        if record.team_number < 1:
            logger.warning("Skipping selection with invalid team number %s", record.team_number)
            continue
        if not is_assigned(record.player_id):
            continue

        team_id = team_id_for(record.team_number)
        team = state.teams.get(team_id)
        if team is None:
            team = Team(id=team_id)
            state.teams[team_id] = team
        _ensure_reserved_periods(team)

        period = team.periods.get(record.period_id) or _new_period(team, record)
        _apply_duration(period, record, team_id)

        try:
            slot = parse_slot(record.slot_label)
        except ValueError:
            logger.warning("Skipping selection with unknown position %r in team %s period %s",
                           record.slot_label, team_id, record.period_id)
            continue
        if slot in period.assignments:
            logger.warning("Skipping duplicate selection for %s in team %s period %s",
                           slot, team_id, record.period_id)
            continue
        if period.slot_of(record.player_id) is not None:
            logger.warning("Skipping second slot for player %s in team %s period %s",
                           record.player_id, team_id, record.period_id)
            continue

        category = record.performance_category
        if category not in PERFORMANCE_CATEGORIES:
            logger.debug("Defaulting performance category %r to %s", category, DEFAULT_PERFORMANCE_CATEGORY)
            category = DEFAULT_PERFORMANCE_CATEGORY

        period.assignments[slot] = Assignment(
            player_id=record.player_id,
            position_label=slot.label,
            is_substitution=isinstance(slot, SubstituteSlot),
            performance_category=category,
        )
        period.performance_category = category
        if isinstance(slot, SubstituteSlot):
            period.next_substitute_index = max(period.next_substitute_index, slot.index + 1)
        team.squad_player_ids.add(record.player_id)

        if record.is_captain:
            existing = state.captains.get(team_id)
            if existing is None:
                state.captains[team_id] = record.player_id
            elif existing != record.player_id:
                logger.warning("Team %s has more than one captain; keeping %s, discarding %s",
                               team_id, existing, record.player_id)

    for team in state.teams.values():
        _ensure_reserved_periods(team)
        _renumber(team)
    return state


def _coerce(raw: Any) -> Optional[SelectionRecord]:
    if isinstance(raw, SelectionRecord):
        return raw
    try:
        return SelectionRecord.from_dict(raw)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning("Skipping malformed selection row: %s", e)
        return None


def _ensure_reserved_periods(team: Team) -> None:
    for period_id, half_index in RESERVED_PERIOD_IDS.items():
        if period_id not in team.periods:
            team.periods[period_id] = Period(
                id=period_id, team_id=team.id, half_index=half_index, order_within_half=1,
            )


def _new_period(team: Team, record: SelectionRecord) -> Period:
    parsed = parse_period_id(record.period_id)
    if parsed is None:
        # Unknown id format: keep it, after everything else in the first half
        logger.warning("Period id %r has an unknown format; placing it in the first half", record.period_id)
        half_index, number = RESERVED_PERIOD_IDS[FIRST_HALF_PERIOD_ID], len(team.periods) + 1
    else:
        half_index, number = parsed
        team.next_period_number = max(team.next_period_number, number + 1)
    period = Period(
        id=record.period_id,
        team_id=team.id,
        half_index=half_index,
        order_within_half=number,
    )
    team.periods[period.id] = period
    return period


def _apply_duration(period: Period, record: SelectionRecord, team_id: int) -> None:
    if validate_duration(record.duration_minutes) is None:
        period.duration_minutes = record.duration_minutes
    else:
        logger.warning("Period %s of team %s has invalid duration %r; using %d",
                       period.id, team_id, record.duration_minutes, DEFAULT_PERIOD_DURATION_MIN)
        period.duration_minutes = DEFAULT_PERIOD_DURATION_MIN


def _creation_number(period: Period) -> int:
    parsed = parse_period_id(period.id)
    if parsed is None:
        return 10_000 + period.order_within_half
    return parsed[1]


def _renumber(team: Team) -> None:
    """Reserved period first in each half, then periods by creation number."""
    for half_index in set(p.half_index for p in team.periods.values()):
        in_half = [p for p in team.periods.values() if p.half_index == half_index]
        in_half.sort(key=lambda p: (not p.is_reserved, _creation_number(p), p.id))
        for order, period in enumerate(in_half, start=1):
            period.order_within_half = order
