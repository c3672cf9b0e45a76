"""Scraper for the alphabetical player index pages (``/players/<letter>/``)."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from hoop_data.core.models import IndexEntry

from .client import BASE_URL
from .html import clean_text, make_soup, player_id_from_href

INDEX_ROW_SELECTOR = "table#players tbody tr, .stats_table tbody tr"


def index_path(letter: str) -> str:
    return f"/players/{letter.lower()}/"


def index_url(letter: str, base_url: str = BASE_URL) -> str:
    return f"{base_url.rstrip('/')}{index_path(letter)}"


def _row_player_link(row: Tag) -> Tag | None:
    for cell_name in ("td", "th"):
        for cell in row.find_all(cell_name):
            link = cell.select_one('a[href*="/players/"]')
            if link is not None:
                return link
    return None


def _entries_from_rows(soup: BeautifulSoup) -> list[IndexEntry]:
    entries: list[IndexEntry] = []
    seen: set[str] = set()
    for row in soup.select(INDEX_ROW_SELECTOR):
        link = _row_player_link(row)
        if link is None:
            continue
        player_id = player_id_from_href(link.get("href"))
        if player_id is None or player_id in seen:
            continue
        seen.add(player_id)
        entries.append(IndexEntry(player_id=player_id, name=clean_text(link)))
    return entries


def _entries_from_links(soup: BeautifulSoup, letter: str) -> list[IndexEntry]:
    entries: list[IndexEntry] = []
    seen: set[str] = set()
    for link in soup.select(f'a[href*="/players/{letter.lower()}/"]'):
        player_id = player_id_from_href(link.get("href"))
        name = clean_text(link)
        if player_id is None or not name or player_id in seen:
            continue
        seen.add(player_id)
        entries.append(IndexEntry(player_id=player_id, name=name))
    return entries


def parse_players_index(html: str, letter: str) -> list[IndexEntry]:
    """Return the players listed on the index page for ``letter``.

    Rows of the index table are scanned first. When no row yields a player
    (markup variants), every link pointing into ``/players/<letter>/`` is
    scanned instead.
    """

    soup = make_soup(html)
    entries = _entries_from_rows(soup)
    if not entries:
        entries = _entries_from_links(soup, letter)
    return entries


__all__ = ["index_path", "index_url", "parse_players_index"]
