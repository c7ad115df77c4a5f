"""
Unit tests for the AssignmentStore.

Covers the one-slot-per-player rule, squad checks, substitute slots and
position labels.
"""
import unittest

from teamsheet.models import (
    AssignmentStatus, ErrorCode, PositionSlot, SelectionState, SubstituteSlot, Team,
    UnknownPeriodError, UnknownTeamError
)
from teamsheet.services import AssignmentStore, PeriodService


class TestAssignmentStore(unittest.TestCase):
    """Test cases for AssignmentStore."""

    def setUp(self):
        self.state = SelectionState(
            fixture_id="fx-1",
            teams={0: Team(id=0, squad_player_ids={"p1", "p2", "p3"})},
        )
        PeriodService(self.state).seed_team(0)
        self.store = AssignmentStore(self.state)

    def _assign(self, slot, player_id, **kwargs):
        return self.store.assign(0, "first-half", slot, player_id, **kwargs)

    def test_assign_to_empty_slot(self):
        result = self._assign("DC", "p1")

        self.assertEqual(result.status, AssignmentStatus.ASSIGNED)
        self.assertIsNone(result.previous_occupant)
        assignment = self.store.occupant(0, "first-half", "DC")
        self.assertEqual(assignment.player_id, "p1")
        self.assertEqual(assignment.position_label, "DC")
        self.assertFalse(assignment.is_substitution)
        self.assertEqual(assignment.performance_category, "MESSI")

    def test_assign_moves_player_within_period(self):
        self._assign("DC", "p1")
        result = self._assign("GK", "p1")

        self.assertEqual(result.status, AssignmentStatus.ASSIGNED)
        self.assertEqual(result.moved_from, "DC")
        self.assertIsNone(self.store.occupant(0, "first-half", "DC"))
        self.assertEqual(self.store.slot_of(0, "first-half", "p1"), PositionSlot("GK"))

    def test_assign_reports_previous_occupant(self):
        self._assign("DC", "p1")
        result = self._assign("DC", "p2")

        self.assertEqual(result.previous_occupant, "p1")
        self.assertIsNone(self.store.slot_of(0, "first-half", "p1"))

    def test_player_never_holds_two_slots(self):
        for slot, player in [("DC", "p1"), ("GK", "p2"), ("GK", "p1"), ("DL", "p1"), ("DC", "p2")]:
            self._assign(slot, player)
        players = [a.player_id for a in self.store.get(0, "first-half").values()]
        self.assertEqual(len(players), len(set(players)))

    def test_same_player_same_slot_is_unchanged(self):
        self._assign("DC", "p1")
        result = self._assign("DC", "p1")
        self.assertEqual(result.status, AssignmentStatus.UNCHANGED)
        self.assertTrue(result.ok)

    def test_player_outside_squad_is_rejected(self):
        result = self._assign("DC", "stranger")

        self.assertEqual(result.status, AssignmentStatus.NOT_IN_SQUAD)
        self.assertEqual(result.error, ErrorCode.NOT_IN_SQUAD)
        self.assertIn("not in the squad", result.message)
        self.assertEqual(self.store.get(0, "first-half"), {})

    def test_unknown_position_is_rejected(self):
        result = self._assign("XYZ", "p1")
        self.assertEqual(result.status, AssignmentStatus.INVALID_SLOT)
        self.assertFalse(result.ok)

    def test_sentinel_clears_slot(self):
        self._assign("DC", "p1")
        result = self._assign("DC", "unassigned")
        self.assertEqual(result.status, AssignmentStatus.CLEARED)
        self.assertEqual(result.previous_occupant, "p1")
        self.assertEqual(self.store.get(0, "first-half"), {})

    def test_sentinel_on_empty_slot_is_unchanged(self):
        self.assertEqual(self._assign("DC", None).status, AssignmentStatus.UNCHANGED)

    def test_unknown_team_and_period_are_fatal(self):
        with self.assertRaises(UnknownTeamError):
            self.store.assign(5, "first-half", "DC", "p1")
        with self.assertRaises(UnknownPeriodError):
            self.store.assign(0, "half-1-period-9", "DC", "p1")

    def test_unknown_performance_category_is_rejected(self):
        result = self._assign("DC", "p1", performance_category="PELE")

        self.assertFalse(result.ok)
        self.assertEqual(result.status, AssignmentStatus.INVALID_CATEGORY)
        self.assertEqual(result.error, ErrorCode.INVALID_CATEGORY)
        self.assertIsNone(self.store.occupant(0, "first-half", "DC"))

    def test_substitute_slot_must_be_allocated_first(self):
        result = self._assign("sub-1", "p1")
        self.assertEqual(result.status, AssignmentStatus.INVALID_SLOT)

        slot = self.store.allocate_substitute_slot(0, "first-half")
        result = self._assign(slot, "p1")

        self.assertEqual(result.status, AssignmentStatus.ASSIGNED)
        assignment = self.store.occupant(0, "first-half", "sub-1")
        self.assertTrue(assignment.is_substitution)
        self.assertEqual(assignment.position_label, "sub-1")

    def test_substitute_numbers_are_never_reused(self):
        first = self.store.allocate_substitute_slot(0, "first-half")
        self._assign(first, "p1")
        self.store.remove(0, "first-half", first)
        second = self.store.allocate_substitute_slot(0, "first-half")
        self.assertEqual(first, SubstituteSlot(1))
        self.assertEqual(second, SubstituteSlot(2))

    def test_position_label_must_name_its_slot(self):
        self._assign("DC", "p1")
        result = self._assign("DCL", "p2", position_label="DC")
        self.assertEqual(result.status, AssignmentStatus.INVALID_SLOT)
        self.assertEqual(result.error, ErrorCode.INVALID_SLOT)
        self.assertIsNone(self.store.occupant(0, "first-half", "DCL"))

    def test_slot_cannot_take_another_position_label(self):
        result = self._assign("DC", "p1", position_label="DM")
        self.assertEqual(result.status, AssignmentStatus.INVALID_SLOT)
        self.assertIsNone(self.store.occupant(0, "first-half", "DC"))

        result = self._assign("DC", "p1", position_label=" dc ")
        self.assertEqual(result.status, AssignmentStatus.ASSIGNED)
        self.assertEqual(self.store.occupant(0, "first-half", "DC").position_label, "DC")

    def test_unknown_position_label_is_rejected(self):
        result = self._assign("DC", "p1", position_label="XX")
        self.assertEqual(result.status, AssignmentStatus.INVALID_SLOT)
        self.assertIn("Unknown position label", result.message)
        self._assign("DC", "p2")
        self.assertEqual(self.store.occupant(0, "first-half", "DC").position_label, "DM")

    def test_remove_is_idempotent(self):
        self._assign("DC", "p1")
        removed = self.store.remove(0, "first-half", "DC")
        self.assertEqual(removed.player_id, "p1")
        self.assertIsNone(self.store.remove(0, "first-half", "DC"))
        self.assertIsNone(self.store.remove(0, "first-half", "not-a-slot"))

    def test_get_returns_a_copy(self):
        self._assign("DC", "p1")
        snapshot = self.store.get(0, "first-half")
        snapshot.clear()
        self.assertIsNotNone(self.store.occupant(0, "first-half", "DC"))

    def test_prune_players_clears_every_period(self):
        self._assign("DC", "p1")
        self.store.assign(0, "second-half", "GK", "p1")
        self.store.assign(0, "second-half", "DC", "p2")

        pruned = self.store.prune_players(0, ["p1"])

        self.assertEqual(sorted(pruned), [("first-half", "DC"), ("second-half", "GK")])
        self.assertEqual(set(self.store.get(0, "second-half")), {PositionSlot("DC")})

    def test_retag_period(self):
        self._assign("DC", "p1")
        self.store.retag_period(0, "first-half", "JAGS")
        self.assertEqual(self.store.occupant(0, "first-half", "DC").performance_category, "JAGS")
        self.assertEqual(self.state.period(0, "first-half").performance_category, "JAGS")


if __name__ == "__main__":
    unittest.main()
