"""Utilities for retrieving NBA data from Basketball-Reference."""

from __future__ import annotations

from .client import BASE_URL, DEFAULT_USER_AGENT, BRefClient, UpstreamFetchError
from .index import index_url, parse_players_index
from .players import fetch_player, parse_player_page, player_url
from .teams import default_season, fetch_team, parse_team_page, team_url

__all__ = [
    "BASE_URL",
    "DEFAULT_USER_AGENT",
    "BRefClient",
    "UpstreamFetchError",
    "default_season",
    "fetch_player",
    "fetch_team",
    "index_url",
    "parse_player_page",
    "parse_players_index",
    "parse_team_page",
    "player_url",
    "team_url",
]
