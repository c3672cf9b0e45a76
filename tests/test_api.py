"""Tests for the FastAPI application."""

from __future__ import annotations

from datetime import date
from pathlib import Path
import threading
import unittest

from fastapi.testclient import TestClient

from hoop_data.api.app import create_app
from hoop_data.config import Settings
from hoop_data.data.bref.client import UpstreamFetchError
from hoop_data.data.bref.players import parse_player_page
from hoop_data.data.bref.teams import default_season
from hoop_data.data.store import PlayerStore
from hoop_data.sync.runner import SyncRunner
from hoop_data.sync.status import SyncState, SyncStatus


FIXTURES = Path(__file__).resolve().parent / "data" / "bref"
BASE = "https://www.basketball-reference.com"


class _FakeUpstream:
    def __init__(self) -> None:
        self.pages = {
            f"{BASE}/players/j/jamesle01.html": (FIXTURES / "player_page.html").read_text(encoding="utf-8"),
            f"{BASE}/teams/LAL/2025.html": (FIXTURES / "team_page.html").read_text(encoding="utf-8"),
            f"{BASE}/players/j/": (FIXTURES / "players_index.html").read_text(encoding="utf-8"),
        }
        self.requested: list[str] = []

    def fetch_html(self, url: str) -> str:
        self.requested.append(url)
        if url.startswith(f"{BASE}/teams/LAL/"):
            return self.pages[f"{BASE}/teams/LAL/2025.html"]
        try:
            return self.pages[url]
        except KeyError:
            raise UpstreamFetchError(url, f"HTTP 404: {url}", status_code=404) from None


class APITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = Settings(schedule_enabled=False, database_path=":memory:")
        self.upstream = _FakeUpstream()
        self.store = PlayerStore(":memory:")
        self.runner = SyncRunner(
            self.upstream.fetch_html,
            self.store.upsert_player,
            letters="j",
            sleep=lambda _s: None,
        )
        self.app = create_app(
            self.settings,
            store=self.store,
            fetch_html=self.upstream.fetch_html,
            runner=self.runner,
        )
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self.runner.join(timeout=5)
        self.store.close()

    def test_health(self) -> None:
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"ok": True})

    def test_live_player_scrape(self) -> None:
        response = self.client.get("/api/player/jamesle01")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["name"], "LeBron James")
        self.assertEqual(payload["summary"]["PTS"], {"current": "24.4", "career": "27.0"})
        self.assertEqual(len(payload["per_game"]), 3)

    def test_upstream_failure_maps_to_502(self) -> None:
        response = self.client.get("/api/player/nobody01")
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {"error": f"HTTP 404: {BASE}/players/n/nobody01.html"})

    def test_unexpected_failure_maps_to_500(self) -> None:
        def broken_fetch(url: str) -> str:
            raise ValueError("parser exploded")

        app = create_app(self.settings, store=self.store, fetch_html=broken_fetch, runner=self.runner)
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/api/player/jamesle01")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "parser exploded"})

    def test_team_scrape_upper_cases_id(self) -> None:
        response = self.client.get("/api/team/lal/2025")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["team_id"], "LAL")
        self.assertEqual(payload["record"], {"wins": 50, "losses": 32})
        self.assertEqual(len(payload["roster"]), 3)
        self.assertEqual(self.upstream.requested, [f"{BASE}/teams/LAL/2025.html"])

    def test_team_season_is_passed_through_to_upstream(self) -> None:
        response = self.client.get("/api/team/LAL/latest")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["season"], "latest")
        self.assertEqual(self.upstream.requested, [f"{BASE}/teams/LAL/latest.html"])

    def test_team_scrape_defaults_to_current_season(self) -> None:
        response = self.client.get("/api/team/LAL")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.upstream.requested, [f"{BASE}/teams/LAL/{default_season()}.html"])

    def test_stored_players(self) -> None:
        html = self.upstream.pages[f"{BASE}/players/j/jamesle01.html"]
        self.store.upsert_player(parse_player_page(html, "jamesle01", today=date(2025, 1, 15)))

        response = self.client.get("/api/players", params={"limit": 10})
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["total"], 1)
        self.assertEqual((payload["limit"], payload["offset"]), (10, 0))
        self.assertEqual(payload["players"][0]["player_id"], "jamesle01")

        response = self.client.get("/api/players/jamesle01")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["birth_date"], "1984-12-30")

        response = self.client.get("/api/player/jamesle01/seasons")
        self.assertEqual([row["season"] for row in response.json()["seasons"]], ["2022-23", "2023-24"])

    def test_stored_player_not_found(self) -> None:
        response = self.client.get("/api/players/nobody01")
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())

    def test_sync_accepted_then_reported(self) -> None:
        response = self.client.post("/api/sync", params={"limit": 1})
        self.assertEqual(response.status_code, 202)
        self.assertTrue(response.json()["accepted"])

        self.runner.join(timeout=5)
        status = self.client.get("/api/sync/status").json()
        self.assertFalse(status["running"])
        self.assertEqual(status["processed"], 1)
        self.assertEqual(status["errors"], 0)
        self.assertEqual(self.store.count_players(), 1)

    def test_sync_rejected_while_running(self) -> None:
        running = SyncStatus(running=True, processed=7, total=10, errors=1)
        runner = SyncRunner(self.upstream.fetch_html, self.store.upsert_player, state=SyncState(running))
        client = TestClient(create_app(self.settings, store=self.store, fetch_html=self.upstream.fetch_html, runner=runner))

        response = client.post("/api/sync")
        self.assertEqual(response.status_code, 409)
        payload = response.json()
        self.assertEqual(payload["error"], "Sync already running")
        self.assertEqual(payload["status"]["processed"], 7)
        self.assertEqual(runner.status.processed, 7)

    def test_lifespan_leaves_injected_store_open(self) -> None:
        with TestClient(self.app) as client:
            self.assertEqual(client.get("/api/health").status_code, 200)
        self.assertEqual(self.store.count_players(), 0)

    def test_shutdown_stops_active_sync_before_closing_store(self) -> None:
        started = threading.Event()
        upstream = self.upstream

        def fetch_html(url: str) -> str:
            if url.endswith(".html"):
                started.set()
            return upstream.fetch_html(url)

        settings = Settings(database_path=":memory:", index_delay=0, player_delay=60, schedule_enabled=False)
        app = create_app(settings, fetch_html=fetch_html)
        with TestClient(app) as client:
            response = client.post("/api/sync", params={"letters": "j"})
            self.assertEqual(response.status_code, 202)
            self.assertTrue(started.wait(timeout=5))

        status = app.state.runner.status
        self.assertFalse(status.running)
        self.assertEqual((status.processed, status.total, status.errors), (1, 2, 0))
        self.assertTrue(status.message.startswith("Stopped: 1/2"))


if __name__ == "__main__":
    unittest.main()
