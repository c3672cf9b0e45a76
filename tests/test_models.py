"""Tests for the season filter and per-game row mapping."""

from __future__ import annotations

import unittest

from hoop_data.core.models import IndexEntry, SeasonStatRow, is_persistable_season


class SeasonFilterTestCase(unittest.TestCase):
    def test_real_seasons_are_persistable(self) -> None:
        self.assertTrue(is_persistable_season("2023-24"))
        self.assertTrue(is_persistable_season("1999"))
        self.assertTrue(is_persistable_season(1999.0))
        self.assertTrue(is_persistable_season("2003-04 "))

    def test_aggregates_and_blanks_are_not(self) -> None:
        self.assertFalse(is_persistable_season("Career"))
        self.assertFalse(is_persistable_season(""))
        self.assertFalse(is_persistable_season("   "))
        self.assertFalse(is_persistable_season(None))
        self.assertFalse(is_persistable_season("2 Yrs"))
        self.assertFalse(is_persistable_season("LAL (6 yrs)"))


class SeasonStatRowTestCase(unittest.TestCase):
    def test_modern_column_names(self) -> None:
        row = SeasonStatRow.from_per_game(
            {
                "year_id": "2023-24",
                "team_name_abbr": "LAL",
                "comp_name_abbr": "NBA",
                "games": 71.0,
                "games_started": 71.0,
                "pts_per_g": 25.7,
                "fg_pct": 0.54,
            }
        )
        self.assertEqual(row.season, "2023-24")
        self.assertEqual(row.team, "LAL")
        self.assertEqual(row.league, "NBA")
        self.assertEqual(row.games, 71)
        self.assertEqual(row.games_started, 71)
        self.assertEqual(row.pts_per_g, 25.7)
        self.assertIsNone(row.stl_per_g)
        self.assertTrue(row.is_persistable)

    def test_legacy_column_names(self) -> None:
        row = SeasonStatRow.from_per_game(
            {"season": 1999.0, "team_id": "CHI", "lg_id": "NBA", "g": 50.0, "gs": 50.0, "trb_per_g": "6.2"}
        )
        self.assertEqual(row.season, "1999")
        self.assertEqual(row.team, "CHI")
        self.assertEqual(row.league, "NBA")
        self.assertEqual(row.games, 50)
        self.assertEqual(row.games_started, 50)
        self.assertEqual(row.trb_per_g, 6.2)

    def test_career_row_is_not_persistable(self) -> None:
        row = SeasonStatRow.from_per_game({"year_id": "Career", "games": 1562.0})
        self.assertFalse(row.is_persistable)


class IndexEntryTestCase(unittest.TestCase):
    def test_to_dict(self) -> None:
        entry = IndexEntry("jamesle01", "LeBron James")
        self.assertEqual(entry.to_dict(), {"player_id": "jamesle01", "name": "LeBron James"})


if __name__ == "__main__":
    unittest.main()
