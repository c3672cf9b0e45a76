"""HTML parsing helpers tailored for Basketball-Reference pages."""

from __future__ import annotations

from collections.abc import Callable, Iterator
import re
from typing import Optional

from bs4 import BeautifulSoup, Comment, Tag

PLAYER_HREF_PATTERN = re.compile(r"/players/[a-z]/([a-z]+\d+)\.html")


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def clean_text(node: Tag | str | None) -> str:
    """Return whitespace-collapsed text for ``node`` (``""`` for ``None``)."""

    if node is None:
        return ""
    text = node if isinstance(node, str) else node.get_text()
    return " ".join(text.replace("\xa0", " ").split())


def player_id_from_href(href: str | None) -> Optional[str]:
    """Extract a player id such as ``jamesle01`` from a player page link."""

    if not href:
        return None
    matcher = PLAYER_HREF_PATTERN.search(href)
    return matcher.group(1) if matcher else None


def _commented_soups(source: BeautifulSoup | Tag) -> Iterator[BeautifulSoup]:
    """Yield soups for HTML comments that wrap tables.

    Sports Reference sites ship many secondary tables inside comments and
    reveal them client-side.
    """

    for comment in source.find_all(string=lambda text: isinstance(text, Comment)):
        if "<table" not in comment:
            continue
        yield BeautifulSoup(comment, "lxml")


def iter_tables(source: BeautifulSoup | Tag) -> Iterator[Tag]:
    """Yield every table in ``source``, then the comment-wrapped ones."""

    yield from source.find_all("table")
    for comment_soup in _commented_soups(source):
        yield from comment_soup.find_all("table")


def find_table(
    source: BeautifulSoup | Tag,
    predicate: Callable[[Tag], bool],
) -> Optional[Tag]:
    """Return the first table (visible or comment-wrapped) matching ``predicate``."""

    for table in iter_tables(source):
        if predicate(table):
            return table
    return None


def find_table_by_id(
    soup: BeautifulSoup,
    table_id: str,
    *,
    container_id: str | None = None,
) -> Optional[Tag]:
    """Return the table whose ``id`` is ``table_id``.

    When ``container_id`` is supplied only tables inside that ``div`` are
    considered, mirroring the ``div_<name>`` wrappers used on the site.
    """

    scope: BeautifulSoup | Tag | None = soup
    if container_id is not None:
        scope = soup.find("div", id=container_id)
        if scope is None:
            return None
    return find_table(scope, lambda table: table.get("id") == table_id)


def has_data_stat(table: Tag, stat: str, *, cell: str = "th") -> bool:
    return table.find(cell, attrs={"data-stat": stat}) is not None


def header_data_stats(table: Tag) -> list[str]:
    """Return the ``data-stat`` identifiers declared by the table header."""

    head = table.find("thead")
    if head is None:
        return []
    stats: list[str] = []
    for th in head.find_all("th"):
        stat = th.get("data-stat")
        if stat and stat not in stats:
            stats.append(stat)
    return stats


def iter_body_rows(table: Tag) -> Iterator[Tag]:
    """Yield body rows, skipping the repeated header rows inserted mid-table."""

    body = table.find("tbody")
    if body is None:
        return
    for row in body.find_all("tr"):
        if "thead" in (row.get("class") or []):
            continue
        yield row


def paragraph_texts(source: BeautifulSoup | Tag) -> list[str]:
    """Return the cleaned text of every non-empty ``<p>`` in ``source``."""

    texts = (clean_text(paragraph) for paragraph in source.find_all("p"))
    return [text for text in texts if text]


__all__ = [
    "PLAYER_HREF_PATTERN",
    "clean_text",
    "find_table",
    "find_table_by_id",
    "has_data_stat",
    "header_data_stats",
    "iter_body_rows",
    "iter_tables",
    "make_soup",
    "paragraph_texts",
    "player_id_from_href",
]
