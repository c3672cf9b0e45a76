"""FastAPI application exposing live scrapes, stored players and the sync job."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from hoop_data.config import Settings, build_client, get_settings
from hoop_data.data.bref.client import UpstreamFetchError
from hoop_data.data.bref.players import parse_player_page, player_url
from hoop_data.data.bref.teams import default_season, parse_team_page, team_url
from hoop_data.data.store import PlayerStore
from hoop_data.sync.runner import SyncRunner, SyncScheduler

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def create_app(
    settings: Settings | None = None,
    *,
    store: PlayerStore | None = None,
    fetch_html: Optional[Callable[[str], str]] = None,
    runner: SyncRunner | None = None,
) -> FastAPI:
    """Build the API around the given collaborators.

    Anything not supplied is created from ``settings``. On shutdown an active
    sync is stopped and joined before the resources created here are closed.
    """

    settings = settings or get_settings()
    owned: list = []

    if fetch_html is None:
        client = build_client(settings)
        owned.append(client)
        fetch_html = client.fetch_html

    if store is None:
        store = PlayerStore(settings.database_path)
        owned.append(store)

    if runner is None:
        runner = SyncRunner(
            fetch_html,
            store.upsert_player,
            index_delay=settings.index_delay,
            player_delay=settings.player_delay,
            batch_size=settings.batch_size,
            base_url=settings.base_url,
        )

    scheduler = SyncScheduler(
        runner,
        initial_delay=settings.schedule_initial_delay,
        interval=settings.schedule_interval,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.schedule_enabled:
            scheduler.start()
        try:
            yield
        finally:
            scheduler.stop()
            runner.stop(timeout=settings.shutdown_timeout)
            for resource in owned:
                resource.close()

    app = FastAPI(title="hoop-data", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.runner = runner
    app.state.scheduler = scheduler

    @app.exception_handler(UpstreamFetchError)
    async def upstream_error(request: Request, exc: UpstreamFetchError) -> JSONResponse:
        logger.warning("Upstream fetch failed for %s: %s", exc.url, exc)
        return _error(502, str(exc))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return _error(500, str(exc) or type(exc).__name__)

    @app.get("/api/health")
    def health() -> dict:
        return {"ok": True}

    # -- live scrapes ----------------------------------------------------------

    @app.get("/api/player/{player_id}")
    def scrape_player(player_id: str) -> dict:
        html = fetch_html(player_url(player_id, settings.base_url))
        return parse_player_page(html, player_id, base_url=settings.base_url).to_dict()

    def _scrape_team(team_id: str, season: int | str) -> dict:
        team_id = team_id.upper()
        html = fetch_html(team_url(team_id, season, settings.base_url))
        return parse_team_page(html, team_id, season, base_url=settings.base_url).to_dict()

    @app.get("/api/team/{team_id}")
    def scrape_team_current(team_id: str) -> dict:
        return _scrape_team(team_id, default_season())

    @app.get("/api/team/{team_id}/{season}")
    def scrape_team(team_id: str, season: str) -> dict:
        return _scrape_team(team_id, season)

    # -- stored data -----------------------------------------------------------

    @app.get("/api/players")
    def list_players(
        limit: int = Query(5000, ge=1, le=10000),
        offset: int = Query(0, ge=0),
    ) -> dict:
        return {
            "players": store.get_players(limit=limit, offset=offset),
            "total": store.count_players(),
            "limit": limit,
            "offset": offset,
        }

    @app.get("/api/players/{player_id}")
    def stored_player(player_id: str):
        player = store.get_player(player_id)
        if player is None:
            return _error(404, f"Player not found: {player_id}")
        return player

    @app.get("/api/player/{player_id}/seasons")
    def stored_seasons(player_id: str) -> dict:
        return {"player_id": player_id, "seasons": store.get_player_stats(player_id)}

    # -- sync ------------------------------------------------------------------

    @app.post("/api/sync")
    def start_sync(
        limit: Optional[int] = Query(None, ge=0),
        letters: Optional[str] = Query(None, pattern="^[A-Za-z]+$"),
    ):
        result = runner.submit(limit=limit, letters=letters.lower() if letters else None)
        payload = result.status.to_dict()
        if not result.accepted:
            return _error(409, "Sync already running", status=payload)
        return JSONResponse(status_code=202, content={"accepted": True, "status": payload})

    @app.get("/api/sync/status")
    def sync_status() -> dict:
        return runner.status.to_dict()

    return app


__all__ = ["create_app"]
