"""Player-specific scraping helpers for Basketball-Reference.

Every field of :class:`~hoop_data.core.models.PlayerRecord` is resolved by an
ordered tuple of strategies. Each strategy is a pure function taking the
parsed :class:`PlayerPage` and returning a value or ``None``; the first
non-empty result wins. Missing markup therefore degrades a single field to
``None`` instead of failing the whole page.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from functools import cached_property
import re
from typing import Optional, TypeVar

from bs4 import BeautifulSoup, Tag

from hoop_data.core.coerce import age_from_birth_date, coerce_cell, parse_born_date
from hoop_data.core.models import (
    CellValue,
    PlayerRecord,
    SummaryPair,
    SummaryScalar,
    SummaryValue,
)

from .client import BASE_URL, BRefClient
from .html import (
    clean_text,
    find_table,
    find_table_by_id,
    has_data_stat,
    header_data_stats,
    iter_body_rows,
    make_soup,
    paragraph_texts,
)

T = TypeVar("T")

BULLET = "▪"
PER_GAME_CONTAINER_ID = "div_per_game_stats"
SUMMARY_CLASS = "stats_pullout"
SUMMARY_COLUMN_CLASSES = frozenset({"p1", "p2", "p3"})

_TEAM_HREF = re.compile(r"/teams/")
_TEAM_ABBR = re.compile(r"^[A-Z]{3}$")
_TITLE_STATS_SUFFIX = re.compile(r"\s*Stats.*$", re.IGNORECASE)
_POSITION = re.compile(r"Position:\s*(.*)", re.IGNORECASE)
_HEIGHT_WEIGHT = re.compile(r"(\d-\d{1,2})\s*,\s*(\d{2,3})\s*lb")
_BORN = re.compile(r"Born:\s*(.+?)\s+in\s+(.+)")
_JERSEY = re.compile(r"(?:No\.\s*|#)(\d{1,3})\b")


def player_path(player_id: str) -> str:
    return f"/players/{player_id[:1].lower()}/{player_id}.html"


def player_url(player_id: str, base_url: str = BASE_URL) -> str:
    return f"{base_url.rstrip('/')}{player_path(player_id)}"


@dataclass
class PlayerPage:
    """Parsed player document plus the derived text blocks strategies share."""

    soup: BeautifulSoup
    player_id: str

    @cached_property
    def bio_paragraphs(self) -> list[str]:
        meta = self.soup.find("div", id="meta")
        return paragraph_texts(meta if meta is not None else self.soup)

    @cached_property
    def bio_text(self) -> str:
        return "\n".join(self.bio_paragraphs)

    @cached_property
    def born_match(self) -> Optional[re.Match[str]]:
        return _BORN.search(self.bio_text)

    @cached_property
    def height_weight_match(self) -> Optional[re.Match[str]]:
        return _HEIGHT_WEIGHT.search(self.bio_text)


Strategy = Callable[[PlayerPage], Optional[T]]


def first_result(page: PlayerPage, strategies: Sequence[Strategy[T]]) -> Optional[T]:
    """Return the first non-empty value produced by ``strategies``."""

    for strategy in strategies:
        value = strategy(page)
        if value is None:
            continue
        if isinstance(value, str) and not value:
            continue
        return value
    return None


# -- name ---------------------------------------------------------------------

def name_from_heading(page: PlayerPage) -> Optional[str]:
    return clean_text(page.soup.find("h1", attrs={"itemprop": "name"})) or None


def name_from_title(page: PlayerPage) -> Optional[str]:
    title = clean_text(page.soup.find("title"))
    head = title.split("|", 1)[0]
    return _TITLE_STATS_SUFFIX.sub("", head).strip() or None


# -- team / position ----------------------------------------------------------

def team_from_links(page: PlayerPage) -> Optional[str]:
    for link in page.soup.find_all("a", href=_TEAM_HREF):
        text = link.get_text(strip=True)
        if _TEAM_ABBR.match(text):
            return text
    return None


def position_from_bio(page: PlayerPage) -> Optional[str]:
    for text in page.bio_paragraphs:
        matcher = _POSITION.search(text)
        if matcher:
            return matcher.group(1).split(BULLET)[0].strip() or None
    return None


# -- height / weight ----------------------------------------------------------

def _itemprop_span(prop: str) -> Strategy[str]:
    def strategy(page: PlayerPage) -> Optional[str]:
        return clean_text(page.soup.find("span", attrs={"itemprop": prop})) or None

    strategy.__name__ = f"{prop}_from_itemprop"
    return strategy


def height_from_bio(page: PlayerPage) -> Optional[str]:
    matcher = page.height_weight_match
    return matcher.group(1) if matcher else None


def weight_from_bio(page: PlayerPage) -> Optional[str]:
    matcher = page.height_weight_match
    return f"{matcher.group(2)}lb" if matcher else None


# -- birth / hometown / jersey ------------------------------------------------

def birth_date_from_markup(page: PlayerPage) -> Optional[str]:
    node = page.soup.find(attrs={"data-birth": True})
    if node is not None:
        return parse_born_date(node.get("data-birth"))
    node = page.soup.find(attrs={"itemprop": "birthDate"})
    if node is not None:
        return parse_born_date(node.get("content") or clean_text(node))
    return None


def birth_date_from_bio(page: PlayerPage) -> Optional[str]:
    matcher = page.born_match
    return parse_born_date(matcher.group(1)) if matcher else None


def hometown_from_bio(page: PlayerPage) -> Optional[str]:
    matcher = page.born_match
    if not matcher:
        return None
    return matcher.group(2).split(BULLET)[0].strip() or None


def jersey_from_bio(page: PlayerPage) -> Optional[str]:
    matcher = _JERSEY.search(page.bio_text)
    return matcher.group(1) if matcher else None


NAME_STRATEGIES: tuple[Strategy[str], ...] = (name_from_heading, name_from_title)
TEAM_STRATEGIES: tuple[Strategy[str], ...] = (team_from_links,)
POSITION_STRATEGIES: tuple[Strategy[str], ...] = (position_from_bio,)
HEIGHT_STRATEGIES: tuple[Strategy[str], ...] = (_itemprop_span("height"), height_from_bio)
WEIGHT_STRATEGIES: tuple[Strategy[str], ...] = (_itemprop_span("weight"), weight_from_bio)
BIRTH_DATE_STRATEGIES: tuple[Strategy[str], ...] = (birth_date_from_markup, birth_date_from_bio)
HOMETOWN_STRATEGIES: tuple[Strategy[str], ...] = (hometown_from_bio,)
JERSEY_STRATEGIES: tuple[Strategy[str], ...] = (jersey_from_bio,)


# -- summary grid -------------------------------------------------------------

def _summary_label(block: Tag) -> str:
    marked = block.find(class_="p1", recursive=False)
    if marked is not None:
        return clean_text(marked)
    for child in block.find_all(recursive=False):
        if child.name == "p":
            continue
        heading = child if child.name in {"h4", "strong"} else child.find(["h4", "strong"])
        if heading is not None:
            return clean_text(heading)
    return ""


def _summary_values(block: Tag) -> list[str]:
    marked = block.find_all(class_=["p2", "p3"], recursive=False)
    cells = marked or block.find_all("p", recursive=False)
    return [clean_text(cell) for cell in cells]


def _summary_blocks(grid: Tag) -> list[Tag]:
    """Return the stat blocks held by the grid's p1/p2/p3 columns.

    The leading season header sits outside those columns and is skipped.
    Grids without marked columns fall back to their direct child blocks.
    """

    columns = [
        child
        for child in grid.find_all("div", recursive=False)
        if SUMMARY_COLUMN_CLASSES.intersection(child.get("class") or ())
    ]
    if not columns:
        return grid.find_all("div", recursive=False)
    return [block for column in columns for block in column.find_all("div", recursive=False)]


def parse_summary(soup: BeautifulSoup) -> dict[str, SummaryValue]:
    """Return the label → value mapping from the summary grid."""

    grid = soup.find("div", class_=SUMMARY_CLASS)
    if grid is None:
        return {}

    summary: dict[str, SummaryValue] = {}
    for block in _summary_blocks(grid):
        values = _summary_values(block)
        if not values:
            continue
        label = _summary_label(block)
        if not label:
            continue
        if len(values) == 2:
            summary[label] = SummaryPair(current=values[0], career=values[1])
        else:
            summary[label] = SummaryScalar(values[0])
    return summary


# -- per-game table -----------------------------------------------------------

def per_game_table_by_id(page: PlayerPage) -> Optional[Tag]:
    return find_table_by_id(page.soup, page.player_id, container_id=PER_GAME_CONTAINER_ID)


def per_game_table_by_column(page: PlayerPage) -> Optional[Tag]:
    return find_table(page.soup, lambda table: has_data_stat(table, "pts_per_g"))


PER_GAME_TABLE_STRATEGIES: tuple[Strategy[Tag], ...] = (
    per_game_table_by_id,
    per_game_table_by_column,
)


def parse_stat_rows(table: Tag) -> tuple[dict[str, CellValue], ...]:
    """Return one mapping per body row, keyed by the column ``data-stat``.

    Rows without a single populated cell are dropped.
    """

    columns = set(header_data_stats(table))
    rows: list[dict[str, CellValue]] = []
    for tr in iter_body_rows(table):
        row: dict[str, CellValue] = {}
        for cell in tr.find_all(["th", "td"]):
            stat = cell.get("data-stat")
            if stat and stat in columns:
                row[stat] = coerce_cell(cell.get_text())
        if any(value is not None for value in row.values()):
            rows.append(row)
    return tuple(rows)


# -- public API ---------------------------------------------------------------

def parse_player_page(
    html: str,
    player_id: str,
    *,
    today: date | None = None,
    base_url: str = BASE_URL,
) -> PlayerRecord:
    """Extract a :class:`PlayerRecord` from a player page."""

    page = PlayerPage(soup=make_soup(html), player_id=player_id)
    birth_date = first_result(page, BIRTH_DATE_STRATEGIES)
    table = first_result(page, PER_GAME_TABLE_STRATEGIES)

    return PlayerRecord(
        player_id=player_id,
        name=first_result(page, NAME_STRATEGIES),
        team=first_result(page, TEAM_STRATEGIES),
        position=first_result(page, POSITION_STRATEGIES),
        height=first_result(page, HEIGHT_STRATEGIES),
        weight=first_result(page, WEIGHT_STRATEGIES),
        birth_date=birth_date,
        hometown=first_result(page, HOMETOWN_STRATEGIES),
        jersey_number=first_result(page, JERSEY_STRATEGIES),
        age=age_from_birth_date(birth_date, today),
        summary=parse_summary(page.soup),
        per_game=parse_stat_rows(table) if table is not None else (),
        url=player_url(player_id, base_url),
    )


def fetch_player_page(client: BRefClient, player_id: str) -> str:
    """Return the raw HTML for a player's profile page."""

    return client.fetch_html(player_path(player_id))


def fetch_player(client: BRefClient, player_id: str) -> PlayerRecord:
    """Fetch and parse the page for ``player_id``."""

    html = fetch_player_page(client, player_id)
    return parse_player_page(html, player_id, base_url=client.base_url)


__all__ = [
    "PlayerPage",
    "fetch_player",
    "fetch_player_page",
    "first_result",
    "parse_player_page",
    "parse_stat_rows",
    "parse_summary",
    "player_path",
    "player_url",
]
