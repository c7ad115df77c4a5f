"""Period management for the Teamsheet selection engine."""

import logging
from typing import List, Optional

from .assignment_store import AssignmentStore
from ..models.results import ErrorCode, OperationResult
from ..models.selection import Period, SelectionState
from ..utils.constants import (
    DEFAULT_PERFORMANCE_CATEGORY, DEFAULT_PERIOD_DURATION_MIN, FIRST_HALF,
    FIRST_HALF_PERIOD_ID, HALF_INDEXES, MAX_PERIOD_DURATION_MIN,
    MIN_PERIOD_DURATION_MIN, PERFORMANCE_CATEGORIES, PERIOD_LABELS,
    RESERVED_PERIOD_IDS, SECOND_HALF, SECOND_HALF_PERIOD_ID
)

logger = logging.getLogger(__name__)

DURATION_ERROR = (
    f"duration must be between {MIN_PERIOD_DURATION_MIN} and {MAX_PERIOD_DURATION_MIN} minutes"
)


def validate_duration(minutes) -> Optional[str]:
    """Return an error message for an invalid duration, None when valid."""
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        return DURATION_ERROR
    if not MIN_PERIOD_DURATION_MIN <= minutes <= MAX_PERIOD_DURATION_MIN:
        return DURATION_ERROR
    return None


def make_period_id(half_index: int, number: int) -> str:
    return f"half-{half_index}-period-{number}"


def parse_period_id(period_id: str):
    """
    Recover (half_index, number) from a period id.

    Returns (1, 1) / (2, 1) for the reserved ids and None for ids this
    module did not generate, including ids naming a half other than 1 or 2.
    """
    if period_id in RESERVED_PERIOD_IDS:
        return RESERVED_PERIOD_IDS[period_id], 1
    parts = str(period_id).split("-")
    if len(parts) == 4 and parts[0] == "half" and parts[2] == "period":
        if parts[1].isdigit() and parts[3].isdigit():
            half_index, number = int(parts[1]), int(parts[3])
            if half_index in HALF_INDEXES and number >= 1:
                return half_index, number
    return None


def period_label(period: Period) -> str:
    if period.id in PERIOD_LABELS:
        return PERIOD_LABELS[period.id]
    half = "First Half" if period.half_index == FIRST_HALF else "Second Half"
    return f"{half} - Period {period.order_within_half}"


class PeriodService:
    """
    Manages the timed periods of each team.

    Every team always has the two reserved half periods; further periods are
    appended to a half and start as a copy of the period before them.
    """

    def __init__(self, state: SelectionState, store: Optional[AssignmentStore] = None):
        self.state = state
        self.store = store or AssignmentStore(state)

    # ---------- Queries ---------- #

    def ordered_periods(self, team_id: int) -> List[Period]:
        return self.state.team(team_id).ordered_periods()

    def previous_period(self, team_id: int, period_id: str) -> Optional[Period]:
        """Period played immediately before the given one, across halves."""
        periods = self.ordered_periods(team_id)
        ids = [p.id for p in periods]
        self.state.period(team_id, period_id)
        index = ids.index(period_id)
        return periods[index - 1] if index > 0 else None

    def total_minutes(self, team_id: int) -> int:
        return sum(p.duration_minutes for p in self.ordered_periods(team_id))

    # ---------- Mutations ---------- #

    def seed_team(self, team_id: int, duration_minutes: int = DEFAULT_PERIOD_DURATION_MIN) -> None:
        """Create the reserved first and second half periods if missing."""
        team = self.state.team(team_id)
        for period_id, half_index in ((FIRST_HALF_PERIOD_ID, FIRST_HALF), (SECOND_HALF_PERIOD_ID, SECOND_HALF)):
            if period_id not in team.periods:
                team.periods[period_id] = Period(
                    id=period_id,
                    team_id=team_id,
                    half_index=half_index,
                    order_within_half=1,
                    duration_minutes=duration_minutes,
                )

    def add_period(self, team_id: int, half_index: int,
                   duration_minutes: int = DEFAULT_PERIOD_DURATION_MIN) -> OperationResult:
        """
        Append a period to a half.

        The new period starts with a copy of the assignments of the last
        period in the same half, or of the last period of the previous half
        when this half is empty. Tags, substitution flags and the substitute
        counter are carried over unchanged.

        Returns:
            OperationResult whose value is the new period id
        """
        team = self.state.team(team_id)
        if half_index not in HALF_INDEXES:
            return OperationResult.failure(ErrorCode.INVALID_HALF, "half must be 1 or 2")
        error = validate_duration(duration_minutes)
        if error:
            return OperationResult.failure(ErrorCode.INVALID_DURATION, error)

        in_half = [p for p in team.ordered_periods() if p.half_index == half_index]
        if in_half:
            source = in_half[-1]
        else:
            earlier = [p for p in team.ordered_periods() if p.half_index < half_index]
            source = earlier[-1] if earlier else None
        order = in_half[-1].order_within_half + 1 if in_half else 1

        period_id = make_period_id(half_index, team.next_period_number)
        while period_id in team.periods:
            team.next_period_number += 1
            period_id = make_period_id(half_index, team.next_period_number)
        team.next_period_number += 1

        period = Period(
            id=period_id,
            team_id=team_id,
            half_index=half_index,
            order_within_half=order,
            duration_minutes=duration_minutes,
            performance_category=source.performance_category if source else DEFAULT_PERFORMANCE_CATEGORY,
            next_substitute_index=source.next_substitute_index if source else 1,
            assignments=dict(source.assignments) if source else {},
        )
        team.periods[period_id] = period
        logger.info(
            "Added period %s to team %s (cloned from %s, %d assignment(s))",
            period_id, team_id, source.id if source else None, len(period.assignments),
        )
        return OperationResult.success(period_id)

    def delete_period(self, team_id: int, period_id: str) -> OperationResult:
        """
        Delete a period and its assignments. The reserved halves cannot be deleted.

        Raises:
            UnknownTeamError: If the team does not exist
            UnknownPeriodError: If the period does not exist
        """
        team = self.state.team(team_id)
        period = team.period(period_id)
        if period.is_reserved:
            return OperationResult.failure(
                ErrorCode.PROTECTED_PERIOD,
                f"{PERIOD_LABELS[period_id]} cannot be deleted",
            )

        cleared = self.store.clear_period(team_id, period_id)
        del team.periods[period_id]
        # Close the gap so order_within_half stays 1..n
        for index, remaining in enumerate(
            [p for p in team.ordered_periods() if p.half_index == period.half_index], start=1
        ):
            remaining.order_within_half = index
        logger.info("Deleted period %s of team %s, clearing %d selection(s)", period_id, team_id, cleared)
        return OperationResult.success(period_id)

    def update_duration(self, team_id: int, period_id: str, minutes) -> OperationResult:
        """
        Change a period's duration. Out of range values are rejected, not clamped.
        """
        period = self.state.period(team_id, period_id)
        error = validate_duration(minutes)
        if error:
            return OperationResult.failure(ErrorCode.INVALID_DURATION, error)
        period.duration_minutes = minutes
        return OperationResult.success(minutes)

    def set_performance_category(self, team_id: int, period_id: str, category: str) -> OperationResult:
        """Change a period's performance category and retag its assignments."""
        self.state.period(team_id, period_id)
        if category not in PERFORMANCE_CATEGORIES:
            return OperationResult.failure(
                ErrorCode.INVALID_CATEGORY,
                f"performance category must be one of {', '.join(PERFORMANCE_CATEGORIES)}",
            )
        self.store.retag_period(team_id, period_id, category)
        return OperationResult.success(category)
