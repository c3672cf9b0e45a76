"""Client for a running hoop-data API server.

Usage:
    client = HoopDataAPIClient("http://localhost:3001")
    player = client.get_player_stats("jamesle01")
    team = client.get_team_stats("LAL", 2025)

With the default empty ``base_url`` requests go to relative paths, which
suits sessions that carry their own base URL (for instance a FastAPI
``TestClient``).
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import requests


class APIClientError(RuntimeError):
    """Raised for non-2xx responses; carries the server's ``error`` message."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class HoopDataAPIClient:
    def __init__(
        self,
        base_url: str = "",
        *,
        session: Any = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        response = self.session.get(self._url(path), params=params, timeout=self.timeout)
        if response.status_code >= 400:
            raise APIClientError(_error_message(response), status_code=response.status_code)
        return response.json()

    def get_player_stats(self, player_id: str) -> dict[str, Any]:
        """Scrape ``player_id`` live through the API."""

        return self._get(f"/api/player/{quote(player_id, safe='')}")

    def get_team_stats(self, team_id: str, season: int | str | None = None) -> dict[str, Any]:
        """Scrape a team page live; the server picks the current season when omitted."""

        path = f"/api/team/{quote(team_id, safe='')}"
        if season is not None:
            path = f"{path}/{quote(str(season), safe='')}"
        return self._get(path)

    def get_players_from_db(self, limit: int = 5000, offset: int = 0) -> dict[str, Any]:
        return self._get("/api/players", params={"limit": limit, "offset": offset})

    def get_player_from_db(self, player_id: str) -> Optional[dict[str, Any]]:
        """Return the stored player or ``None`` when the server has no row for it."""

        try:
            return self._get(f"/api/players/{quote(player_id, safe='')}")
        except APIClientError as exc:
            if exc.status_code == 404:
                return None
            raise

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HoopDataAPIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _error_message(response: Any) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"HTTP {response.status_code}"


__all__ = ["APIClientError", "HoopDataAPIClient"]
