"""
Unit tests for substitution detection between periods.
"""
import unittest

from teamsheet.models import Assignment, PositionSlot
from teamsheet.services import is_substitution, substitution_flags


def _map(**players):
    return {PositionSlot(code): Assignment(player_id, code) for code, player_id in players.items()}


class TestSubstitutionDiff(unittest.TestCase):

    def test_changed_player_is_substitution(self):
        self.assertTrue(is_substitution(_map(DC="p2"), _map(DC="p1"), "DC"))

    def test_same_player_is_not_substitution(self):
        self.assertFalse(is_substitution(_map(DC="p1"), _map(DC="p1"), "DC"))

    def test_first_period_has_no_substitutions(self):
        self.assertFalse(is_substitution(_map(DC="p1"), None, "DC"))
        self.assertFalse(is_substitution(_map(DC="p1"), {}, "DC"))

    def test_new_position_is_an_addition(self):
        self.assertFalse(is_substitution(_map(DC="p1", GK="p3"), _map(DC="p1"), "GK"))

    def test_vacated_position_is_not_substitution(self):
        self.assertFalse(is_substitution(_map(), _map(DC="p1"), "DC"))

    def test_flags_cover_current_labels(self):
        flags = substitution_flags(_map(DC="p2", GK="p3"), _map(DC="p1", GK="p3", DL="p4"))
        self.assertEqual(flags, {"DC": True, "GK": False})


if __name__ == "__main__":
    unittest.main()
