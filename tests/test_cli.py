"""Tests for the command line entry point."""

from __future__ import annotations

from pathlib import Path
import tempfile
from typing import Any
import types
import unittest
from unittest import mock

import requests

from hoop_data import cli
from hoop_data.config import Settings
from hoop_data.data.bref.client import BRefClient
from hoop_data.data.store import PlayerStore


FIXTURES = Path(__file__).resolve().parent / "data" / "bref"
BASE = "https://www.basketball-reference.com"


class _StubResponse(types.SimpleNamespace):
    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}", response=self)


def _stub_client(_settings: Settings) -> BRefClient:
    pages = {
        f"{BASE}/players/j/": (FIXTURES / "players_index.html").read_text(encoding="utf-8"),
        f"{BASE}/players/j/jamesle01.html": (FIXTURES / "player_page.html").read_text(encoding="utf-8"),
        f"{BASE}/teams/LAL/2025.html": (FIXTURES / "team_page.html").read_text(encoding="utf-8"),
    }
    client = BRefClient(enable_cache=False, min_delay=0)

    def fake_get(url: str, **_kwargs: Any) -> _StubResponse:
        response = _StubResponse(status_code=200 if url in pages else 404, text=pages.get(url, ""))
        response.raise_for_status()
        return response

    client.get = fake_get  # type: ignore[assignment]
    return client


class CLITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.settings = Settings(database_path=Path(self.tmp.name) / "hoop.duckdb", index_delay=0)
        patches = [
            mock.patch.object(cli, "build_client", _stub_client),
            mock.patch.object(cli, "get_settings", return_value=self.settings),
            mock.patch.object(cli, "configure_logging"),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_parse_args(self) -> None:
        args = cli.parse_args(["sync", "--letters", "ab", "--limit", "3", "--delay", "0.5"])
        self.assertEqual((args.command, args.letters, args.limit, args.delay), ("sync", "ab", 3, 0.5))
        args = cli.parse_args(["team", "LAL"])
        self.assertIsNone(args.season)

    def test_player_command(self) -> None:
        self.assertEqual(cli.main(["player", "jamesle01"]), 0)

    def test_team_command(self) -> None:
        self.assertEqual(cli.main(["team", "lal", "2025"]), 0)

    def test_fetch_failure_exit_code(self) -> None:
        self.assertEqual(cli.main(["player", "nobody01"]), 1)

    def test_sync_command_persists_players(self) -> None:
        exit_code = cli.main(["sync", "--letters", "j", "--limit", "1", "--delay", "0"])
        self.assertEqual(exit_code, 0)
        with PlayerStore(self.settings.database_path) as store:
            self.assertEqual(store.count_players(), 1)
            self.assertEqual(store.get_player("jamesle01")["name"], "LeBron James")


if __name__ == "__main__":
    unittest.main()
