"""
Unit tests for the flat record format: flatten, reconstruct and the round trip.
"""
import unittest

from teamsheet.models import SelectionState, SubstituteSlot, Team
from teamsheet.services import (
    AssignmentStore, PeriodService, SelectionRecord, SquadService, flatten, reconstruct
)


def _row(**overrides):
    row = {
        "team_number": 1,
        "period_id": "first-half",
        "position": "GK",
        "player_id": "p1",
        "performance_category": "MESSI",
        "is_captain": False,
        "duration": 20,
    }
    row.update(overrides)
    return row


class TestSelectionRecord(unittest.TestCase):

    def test_row_uses_storage_columns(self):
        record = SelectionRecord(2, "first-half", "DC", "p1", "JAGS", True, 25)
        self.assertEqual(record.to_dict(), {
            "team_number": 2,
            "period_id": "first-half",
            "position": "DC",
            "player_id": "p1",
            "performance_category": "JAGS",
            "is_captain": True,
            "duration": 25,
        })
        self.assertEqual(SelectionRecord.from_dict(record.to_dict()), record)

    def test_missing_columns_raise(self):
        with self.assertRaises(ValueError):
            SelectionRecord.from_dict({"team_number": 1, "period_id": "first-half"})

    def test_non_numeric_team_number_raises(self):
        with self.assertRaises(ValueError):
            SelectionRecord.from_dict(_row(team_number="one"))


class TestFlattenReconstruct(unittest.TestCase):
    """Test cases for flatten/reconstruct."""

    def setUp(self):
        self.state = SelectionState(fixture_id="fx-1", teams={0: Team(id=0), 1: Team(id=1)})
        self.store = AssignmentStore(self.state)
        self.periods = PeriodService(self.state, self.store)
        self.squads = SquadService(self.state, self.store)
        for team_id in (0, 1):
            self.periods.seed_team(team_id)
        self.squads.set_squad(0, ["p1", "p2", "p3"])
        self.squads.set_squad(1, ["p4", "p5"])

    def _populate(self):
        self.store.assign(0, "first-half", "GK", "p1")
        self.store.assign(0, "first-half", "DC", "p2")
        sub = self.store.allocate_substitute_slot(0, "first-half")
        self.store.assign(0, "first-half", sub, "p3")
        extra = self.periods.add_period(0, 1, 15).value
        self.store.assign(0, extra, "DC", "p3")
        self.periods.set_performance_category(0, extra, "JAGS")
        self.store.assign(0, "second-half", "GK", "p2")
        self.periods.update_duration(0, "second-half", 25)
        self.store.assign(1, "first-half", "STC", "p4")
        self.squads.set_captain(0, "p2")
        self.squads.set_captain(1, "p4")
        return extra

    def test_flatten_writes_one_record_per_occupied_slot(self):
        self.store.assign(0, "first-half", "GK", "p1")
        self.store.assign(1, "first-half", "GK", "p4")

        records = flatten(self.state)

        self.assertEqual([(r.team_number, r.slot_label, r.player_id) for r in records],
                         [(1, "GK", "p1"), (2, "GK", "p4")])

    def test_flatten_marks_captain(self):
        self.store.assign(0, "first-half", "GK", "p1")
        self.store.assign(0, "first-half", "DC", "p2")
        self.squads.set_captain(0, "p2")

        captains = [r.player_id for r in flatten(self.state) if r.is_captain]

        self.assertEqual(captains, ["p2"])

    def test_round_trip(self):
        extra = self._populate()

        restored = reconstruct(flatten(self.state), fixture_id="fx-1")

        self.assertEqual(restored.assignment_map(), self.state.assignment_map())
        self.assertEqual(restored.captains, self.state.captains)
        self.assertEqual(restored.period(0, extra).duration_minutes, 15)
        self.assertEqual(restored.period(0, extra).order_within_half, 2)
        self.assertEqual(restored.period(0, "second-half").duration_minutes, 25)
        self.assertEqual(restored.period(0, extra).performance_category, "JAGS")

    def test_round_trip_through_rows(self):
        self._populate()
        rows = [record.to_dict() for record in flatten(self.state)]
        restored = reconstruct(rows, fixture_id="fx-1")
        self.assertEqual(restored.assignment_map(), self.state.assignment_map())

    def test_round_trip_with_explicit_position_labels(self):
        self.store.assign(0, "first-half", "DC", "p1", position_label="dc")
        self.store.assign(0, "first-half", "DCL", "p2", position_label="DCL")

        restored = reconstruct(flatten(self.state), fixture_id="fx-1")

        self.assertEqual(restored.assignment_map(), self.state.assignment_map())

    def test_reconstruct_keeps_substitute_counter_ahead(self):
        self._populate()
        restored = reconstruct(flatten(self.state))
        period = restored.period(0, "first-half")
        self.assertIn(SubstituteSlot(1), period.assignments)
        self.assertEqual(period.next_substitute_index, 2)

    def test_reconstruct_always_has_reserved_periods(self):
        restored = reconstruct([_row(team_number=2, period_id="half-2-period-4")])
        self.assertEqual(
            [p.id for p in restored.team(1).ordered_periods()],
            ["first-half", "second-half", "half-2-period-4"],
        )
        self.assertEqual(restored.team(1).next_period_number, 5)

    def test_reconstruct_keeps_periods_inside_the_two_halves(self):
        rows = [
            _row(period_id="half-3-period-1"),
            _row(period_id="half-0-period-2", player_id="p2"),
        ]
        with self.assertLogs("teamsheet.services.selection_format", level="WARNING"):
            restored = reconstruct(rows)
        self.assertEqual({p.half_index for p in restored.team(0).ordered_periods()}, {1, 2})
        self.assertEqual(restored.period(0, "half-3-period-1").half_index, 1)
        self.assertEqual(restored.period(0, "half-0-period-2").half_index, 1)

    def test_reconstruct_adds_players_to_squads(self):
        restored = reconstruct([_row(player_id="p9")])
        self.assertEqual(restored.team(0).squad_player_ids, {"p9"})

    def test_missing_category_defaults_to_messi(self):
        restored = reconstruct([_row(performance_category=None)])
        assignment = next(iter(restored.period(0, "first-half").assignments.values()))
        self.assertEqual(assignment.performance_category, "MESSI")

    def test_invalid_duration_falls_back(self):
        with self.assertLogs("teamsheet.services.selection_format", level="WARNING"):
            restored = reconstruct([_row(duration=0)])
        self.assertEqual(restored.period(0, "first-half").duration_minutes, 20)

    def test_first_captain_wins(self):
        rows = [
            _row(player_id="p1", is_captain=True),
            _row(position="DC", player_id="p2", is_captain=True),
        ]
        with self.assertLogs("teamsheet.services.selection_format", level="WARNING") as logs:
            restored = reconstruct(rows)
        self.assertEqual(restored.captains, {0: "p1"})
        self.assertTrue(any("more than one captain" in line for line in logs.output))

    def test_bad_rows_are_skipped(self):
        rows = [
            _row(),
            {"team_number": 1},
            _row(team_number=0, player_id="p2"),
            _row(position="XX", player_id="p3"),
            _row(player_id="unassigned", position="DC"),
            _row(player_id="p4"),
            _row(position="DL", player_id="p1"),
        ]
        with self.assertLogs("teamsheet.services.selection_format", level="WARNING"):
            restored = reconstruct(rows)
        assignments = restored.period(0, "first-half").assignments
        self.assertEqual({s.key: a.player_id for s, a in assignments.items()}, {"GK": "p1"})

    def test_known_teams_are_merged_not_modified(self):
        self.store.assign(0, "first-half", "GK", "p1")
        self.state.team(0).display_name = "Under 9 Blues"

        restored = reconstruct([_row(player_id="p2", position="DC")], teams=self.state.teams)

        self.assertEqual(restored.team(0).display_name, "Under 9 Blues")
        self.assertEqual(restored.team(0).squad_player_ids, {"p1", "p2", "p3"})
        self.assertEqual(
            {s.key: a.player_id for s, a in restored.period(0, "first-half").assignments.items()},
            {"DC": "p2"},
        )
        self.assertEqual(self.store.occupant(0, "first-half", "GK").player_id, "p1")


if __name__ == "__main__":
    unittest.main()
