"""
Unit tests for SelectionSession and the undo/redo command history.
"""
import unittest

from teamsheet.models import (
    ErrorCode, FixtureDefinition, Player, SelectionState, StaticRosterProvider, UnknownTeamError
)
from teamsheet.services import (
    DropStatus, InMemorySelectionStorage, SaveStatus, SelectionCommand,
    SelectionCommandManager, SelectionPersistenceService, SelectionSession
)


class TestSelectionCommandManager(unittest.TestCase):
    """Test cases for the snapshot based command history."""

    def setUp(self):
        self.state = SelectionState(fixture_id="fx-1")
        self.manager = SelectionCommandManager(max_history=2)

    def _set_fixture(self, value):
        def action():
            self.state.fixture_id = value
        return SelectionCommand(self.state, action, f"Set {value}")

    def test_undo_and_redo(self):
        self.assertTrue(self.manager.execute_command(self._set_fixture("fx-2")))
        self.assertTrue(self.manager.undo())
        self.assertEqual(self.state.fixture_id, "fx-1")
        self.assertTrue(self.manager.redo())
        self.assertEqual(self.state.fixture_id, "fx-2")

    def test_history_is_trimmed(self):
        for value in ("a", "b", "c"):
            self.manager.execute_command(self._set_fixture(value))
        self.assertEqual(self.manager.get_command_history(), ["Set b", "Set c"])
        self.assertTrue(self.manager.undo())
        self.assertTrue(self.manager.undo())
        self.assertFalse(self.manager.undo())
        self.assertEqual(self.state.fixture_id, "a")

    def test_unchanged_state_is_not_recorded(self):
        self.assertFalse(self.manager.execute_command(self._set_fixture("fx-1")))
        self.assertFalse(self.manager.can_undo())

    def test_new_command_discards_redo(self):
        self.manager.execute_command(self._set_fixture("a"))
        self.manager.undo()
        self.manager.execute_command(self._set_fixture("b"))
        self.assertFalse(self.manager.can_redo())


class TestSelectionSession(unittest.TestCase):
    """Test cases for SelectionSession."""

    def setUp(self):
        self.roster = StaticRosterProvider({
            "U10": [Player("p1", "Ava"), Player("p2", "Ben"), Player("p3", "Cal")],
        })
        self.storage = InMemorySelectionStorage()
        fixture = FixtureDefinition("fx-1", number_of_teams=2, team_categories=["U10"],
                                    team_names=["Blues", "Reds"])
        self.session = SelectionSession.from_fixture(
            fixture, roster=self.roster, persistence=SelectionPersistenceService(self.storage)
        )
        self.session.set_squad(0, ["p1", "p2", "p3"])
        self.session.commands.clear_history()

    def test_from_fixture_seeds_teams(self):
        snapshot = self.session.snapshot()
        self.assertEqual([t.display_name for t in snapshot.ordered_teams()], ["Blues", "Reds"])
        self.assertEqual(snapshot.team(1).category, "U10")
        self.assertEqual([p["id"] for p in self.session.period_summaries(1)], ["first-half", "second-half"])
        self.assertTrue(all(p["protected"] for p in self.session.period_summaries(1)))

    def test_available_players_come_from_roster(self):
        self.assertEqual([p.id for p in self.session.available_players(0)], ["p1", "p2", "p3"])

    def test_unassigned_players(self):
        self.session.assign(0, "first-half", "GK", "p1")
        self.assertEqual(self.session.unassigned_players(0, "first-half"), ["p2", "p3"])

    def test_default_slots_follow_format(self):
        self.assertEqual(self.session.default_slots(0), ["GK", "DL", "DC", "DR", "MC", "STL", "STC"])

    def test_undo_restores_previous_state(self):
        self.session.assign(0, "first-half", "GK", "p1")
        before = self.session.snapshot()
        self.session.drop(0, "first-half", "DC", "p2")
        self.session.drop(0, "first-half", "DC", "p1")

        self.assertTrue(self.session.undo().ok)
        self.assertEqual(self.session.snapshot().assignment_map(),
                         self._after_drop_of_p2(before))
        self.assertTrue(self.session.undo().ok)
        self.assertEqual(self.session.snapshot(), before)
        self.assertTrue(self.session.redo().ok)
        self.assertEqual(self.session.snapshot().assignment_map(), self._after_drop_of_p2(before))

    def _after_drop_of_p2(self, before):
        session = SelectionSession(before.snapshot())
        session.drop(0, "first-half", "DC", "p2")
        return session.snapshot().assignment_map()

    def test_nothing_to_undo(self):
        result = self.session.undo()
        self.assertEqual(result.error, ErrorCode.NOTHING_TO_UNDO)
        self.assertEqual(self.session.redo().error, ErrorCode.NOTHING_TO_REDO)

    def test_rejected_edits_are_not_undoable(self):
        self.assertFalse(self.session.assign(0, "first-half", "GK", "stranger").ok)
        self.assertFalse(self.session.update_duration(0, "first-half", 91).ok)
        self.assertFalse(self.session.can_undo)

    def test_undo_period_deletion(self):
        period_id = self.session.add_period(0, 2).value
        self.session.assign(0, period_id, "GK", "p3")
        self.session.delete_period(0, period_id)

        self.session.undo()

        self.assertEqual(self.session.store.occupant(0, period_id, "GK").player_id, "p3")

    def test_swap_through_session(self):
        self.session.assign(0, "first-half", "DL", "p1")
        self.session.assign(0, "first-half", "DR", "p2")
        result = self.session.drop(0, "first-half", "DR", "p1", source_slot="DL")
        self.assertEqual(result.status, DropStatus.SWAPPED)

    def test_coordinator_is_cached(self):
        self.assertIs(self.session.coordinator(0, "first-half"), self.session.coordinator(0, "first-half"))

    def test_substitution_flags(self):
        self.session.assign(0, "first-half", "DC", "p1")
        self.session.assign(0, "second-half", "DC", "p2")
        self.assertEqual(self.session.substitution_flags(0, "first-half"), {"DC": False})
        self.assertEqual(self.session.substitution_flags(0, "second-half"), {"DC": True})

    def test_teams_containing(self):
        self.session.set_squad(1, ["p1"])
        self.assertEqual(self.session.teams_containing("p1"), {0, 1})

    def test_squad_removal_is_undoable(self):
        self.session.assign(0, "first-half", "GK", "p1")
        self.session.set_squad(0, ["p2", "p3"])
        self.assertIsNone(self.session.store.slot_of(0, "first-half", "p1"))

        self.session.undo()

        self.assertEqual(self.session.store.occupant(0, "first-half", "GK").player_id, "p1")

    def test_save_and_load(self):
        self.session.assign(0, "first-half", "GK", "p1")
        self.session.set_captain(0, "p1")
        expected = self.session.snapshot()

        self.assertEqual(self.session.save().status, SaveStatus.SAVED)
        self.session.assign(0, "first-half", "GK", "p2")
        loaded = self.session.load()

        self.assertEqual(loaded.assignment_map(), expected.assignment_map())
        self.assertEqual(loaded.captains, {0: "p1"})
        self.assertEqual(loaded.team(0).display_name, "Blues")
        self.assertFalse(self.session.can_undo)

    def test_save_without_storage_raises(self):
        session = SelectionSession(SelectionState(fixture_id="fx-2"))
        with self.assertRaises(RuntimeError):
            session.save()

    def test_unknown_team_is_fatal(self):
        with self.assertRaises(UnknownTeamError):
            self.session.assign(9, "first-half", "GK", "p1")


if __name__ == "__main__":
    unittest.main()
