"""
Unit tests for SquadService squad membership and captaincy.
"""
import unittest

from teamsheet.models import ErrorCode, SelectionState, Team
from teamsheet.services import AssignmentStore, PeriodService, SquadService


class TestSquadService(unittest.TestCase):
    """Test cases for SquadService."""

    def setUp(self):
        self.state = SelectionState(fixture_id="fx-1", teams={0: Team(id=0), 1: Team(id=1)})
        self.store = AssignmentStore(self.state)
        periods = PeriodService(self.state, self.store)
        periods.seed_team(0)
        periods.seed_team(1)
        self.squads = SquadService(self.state, self.store)

    def test_set_squad_ignores_sentinel_and_empty_ids(self):
        self.squads.set_squad(0, ["p1", "unassigned", "", "p2"])
        self.assertEqual(self.squads.squad_of(0), {"p1", "p2"})

    def test_removing_player_prunes_assignments(self):
        self.squads.set_squad(0, ["p1", "p2"])
        self.store.assign(0, "first-half", "DC", "p1")
        self.store.assign(0, "second-half", "GK", "p1")
        self.store.assign(0, "second-half", "DC", "p2")

        pruned = self.squads.set_squad(0, ["p2"])

        self.assertEqual(sorted(pruned), [("first-half", "DC"), ("second-half", "GK")])
        self.assertEqual(self.store.get(0, "first-half"), {})
        self.assertIsNone(self.store.slot_of(0, "second-half", "p1"))
        self.assertEqual(self.store.occupant(0, "second-half", "DC").player_id, "p2")

    def test_squad_change_logs_repairs(self):
        self.squads.set_squad(0, ["p1"])
        self.store.assign(0, "first-half", "DC", "p1")
        with self.assertLogs("teamsheet.services.squad_service", level="INFO"):
            self.squads.set_squad(0, [])

    def test_removing_captain_clears_captaincy(self):
        self.squads.set_squad(0, ["p1", "p2"])
        self.squads.set_captain(0, "p1")

        self.squads.remove_from_squad(0, "p1")

        self.assertIsNone(self.squads.captain_of(0))

    def test_captain_must_be_in_squad(self):
        self.squads.set_squad(0, ["p1"])
        result = self.squads.set_captain(0, "p9")
        self.assertFalse(result.ok)
        self.assertEqual(result.error, ErrorCode.NOT_IN_SQUAD)
        self.assertIsNone(self.squads.captain_of(0))

    def test_captain_does_not_need_a_slot(self):
        self.squads.set_squad(0, ["p1"])
        self.assertTrue(self.squads.set_captain(0, "p1").ok)
        self.assertEqual(self.squads.captain_of(0), "p1")

    def test_clear_captain(self):
        self.squads.set_squad(0, ["p1"])
        self.squads.set_captain(0, "p1")
        self.assertTrue(self.squads.set_captain(0, None).ok)
        self.assertIsNone(self.squads.captain_of(0))

    def test_teams_containing(self):
        self.squads.set_squad(0, ["p1", "p2"])
        self.squads.add_to_squad(1, "p1")
        self.assertEqual(self.squads.teams_containing("p1"), {0, 1})
        self.assertEqual(self.squads.teams_containing("p2"), {0})
        self.assertEqual(self.squads.teams_containing("p3"), set())

    def test_selected_players(self):
        self.squads.set_squad(0, ["p1", "p2"])
        self.store.assign(0, "first-half", "DC", "p1")
        self.assertEqual(self.squads.selected_players(), {"p1"})


if __name__ == "__main__":
    unittest.main()
