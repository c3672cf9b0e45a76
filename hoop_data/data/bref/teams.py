"""Team-specific scraping helpers for Basketball-Reference."""

from __future__ import annotations

from datetime import date
import re
from typing import Optional

from bs4 import Tag

from hoop_data.core.coerce import coerce_cell, to_float
from hoop_data.core.models import CellValue, RosterEntry, TeamRecord, TeamRecordLine

from .client import BASE_URL, BRefClient
from .html import (
    clean_text,
    find_table,
    has_data_stat,
    iter_body_rows,
    make_soup,
    player_id_from_href,
)

FRANCHISE_FRAGMENTS = (
    "Lakers", "Celtics", "Nets", "Knicks", "76ers", "Raptors", "Bulls",
    "Cavaliers", "Pistons", "Pacers", "Bucks", "Hawks", "Hornets", "Heat",
    "Magic", "Wizards", "Nuggets", "Timberwolves", "Thunder", "Trail Blazers",
    "Jazz", "Warriors", "Clippers", "Suns", "Kings", "Mavericks", "Rockets",
    "Grizzlies", "Pelicans", "Spurs",
)

_FRANCHISE_HEADING = re.compile(
    r"\s+([^\n]+(?:" + "|".join(FRANCHISE_FRAGMENTS) + r")[^\n]*)",
    re.IGNORECASE,
)
_GENERIC_HEADING = re.compile(r"\n\s+([A-Za-z ].+?)(?:\n|Roster|$)")
_ROSTER_SUFFIX = re.compile(r"\s*Roster and Stats\s*$", re.IGNORECASE)
_ROSTER_TAIL = re.compile(r"\s*Roster.*$", re.IGNORECASE | re.DOTALL)

_RECORD = re.compile(r"Record:\s*(\d+)-(\d+)")
_RATING_PATTERNS = {
    "pts_per_game": re.compile(r"PTS/G:\s*([\d.]+)"),
    "opp_pts_per_game": re.compile(r"Opp PTS/G:\s*([\d.]+)"),
    "srs": re.compile(r"SRS[:\s]*([-\d.]+)"),
    "pace": re.compile(r"Pace[:\s]*([\d.]+)"),
    "off_rtg": re.compile(r"Off Rtg[:\s]*([\d.]+)"),
    "def_rtg": re.compile(r"Def Rtg[:\s]*([\d.]+)"),
}

# Team tables label games/games started differently than player tables.
_CELL_ALIASES = {
    "g": ("g", "games"),
    "gs": ("gs", "games_started"),
}


def team_path(team_id: str, season: int | str) -> str:
    return f"/teams/{team_id}/{season}.html"


def team_url(team_id: str, season: int | str, base_url: str = BASE_URL) -> str:
    return f"{base_url.rstrip('/')}{team_path(team_id, season)}"


def default_season(today: date | None = None) -> int:
    """Return the end year of the current season (seasons roll over in October)."""

    today = today or date.today()
    return today.year + (1 if today.month >= 10 else 0)


def parse_team_name(heading: str) -> str:
    """Pull the franchise name out of a multi-line ``<h1>`` heading."""

    matcher = _FRANCHISE_HEADING.search(heading) or _GENERIC_HEADING.search(heading)
    name = matcher.group(1).strip() if matcher else heading
    name = _ROSTER_SUFFIX.sub("", name).strip()
    return name or _ROSTER_TAIL.sub("", heading).strip()


def _labeled_float(text: str, pattern: re.Pattern[str]) -> Optional[float]:
    matcher = pattern.search(text)
    return to_float(matcher.group(1)) if matcher else None


def parse_record(text: str) -> Optional[TeamRecordLine]:
    matcher = _RECORD.search(text)
    if not matcher:
        return None
    return TeamRecordLine(wins=int(matcher.group(1)), losses=int(matcher.group(2)))


def _is_roster_table(table: Tag) -> bool:
    return has_data_stat(table, "pts_per_g", cell="td") and has_data_stat(
        table, "name_display", cell="td"
    )


def _cell(row: Tag, stat: str) -> CellValue:
    for alias in _CELL_ALIASES.get(stat, (stat,)):
        cell = row.find("td", attrs={"data-stat": alias})
        if cell is None:
            continue
        value = coerce_cell(cell.get_text())
        if value is not None:
            return value
    return None


def _roster_entry(row: Tag) -> RosterEntry:
    name_cell = row.find("td", attrs={"data-stat": "name_display"})
    link = name_cell.find("a") if name_cell is not None else None
    source = link if link is not None else name_cell
    pos_cell = row.find("td", attrs={"data-stat": "pos"})

    return RosterEntry(
        player_id=player_id_from_href(link.get("href")) if link is not None else None,
        player=clean_text(source),
        pos=clean_text(pos_cell) or None,
        age=_cell(row, "age"),
        games=_cell(row, "g"),
        games_started=_cell(row, "gs"),
        mp_per_g=_cell(row, "mp_per_g"),
        pts_per_g=_cell(row, "pts_per_g"),
        trb_per_g=_cell(row, "trb_per_g"),
        ast_per_g=_cell(row, "ast_per_g"),
        fg_pct=_cell(row, "fg_pct"),
        fg3_pct=_cell(row, "fg3_pct"),
        ft_pct=_cell(row, "ft_pct"),
    )


def parse_roster(table: Tag) -> tuple[RosterEntry, ...]:
    return tuple(_roster_entry(row) for row in iter_body_rows(table))


def parse_team_page(html: str, team_id: str, season: int | str, *, base_url: str = BASE_URL) -> TeamRecord:
    """Extract a :class:`TeamRecord` from a team season page.

    Every rating is matched independently, so a label missing from the page
    only nulls out its own field.
    """

    soup = make_soup(html)
    heading_tag = soup.find("h1")
    heading = heading_tag.get_text().strip() if heading_tag is not None else ""

    paragraphs = " ".join(paragraph.get_text() for paragraph in soup.find_all("p"))
    ratings = {
        field: _labeled_float(paragraphs, pattern)
        for field, pattern in _RATING_PATTERNS.items()
    }

    table = find_table(soup, _is_roster_table)

    return TeamRecord(
        team_id=team_id,
        season=str(season),
        name=parse_team_name(heading),
        record=parse_record(paragraphs),
        roster=parse_roster(table) if table is not None else (),
        url=team_url(team_id, season, base_url),
        **ratings,
    )


def fetch_team_season_html(client: BRefClient, team_id: str, season: int | str) -> str:
    """Return the raw HTML for a team season page."""

    return client.fetch_html(team_path(team_id, season))


def fetch_team(client: BRefClient, team_id: str, season: int | str) -> TeamRecord:
    """Fetch and parse the page for ``team_id`` in ``season``."""

    html = fetch_team_season_html(client, team_id, season)
    return parse_team_page(html, team_id, season, base_url=client.base_url)


__all__ = [
    "FRANCHISE_FRAGMENTS",
    "default_season",
    "fetch_team",
    "fetch_team_season_html",
    "parse_record",
    "parse_roster",
    "parse_team_name",
    "parse_team_page",
    "team_path",
    "team_url",
]
