"""Batch synchronization of every indexed player into the local store.

The job has two phases. The alphabetical index pages are fetched one letter
at a time to enumerate player ids, then every player page is fetched, parsed
and handed to a persistence callback in fixed-size batches. All I/O is
injected so the loops can be driven by fakes in tests.

Requests are strictly sequential; ``delay`` seconds separate consecutive
upstream fetches. Both loops accept a ``should_stop`` callable that is polled
before every fetch so a run can be cut short between items.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
import logging
import string
import time
from typing import Optional, Union

from hoop_data.core.models import IndexEntry, PlayerRecord
from hoop_data.data.bref.client import BASE_URL
from hoop_data.data.bref.index import index_url, parse_players_index
from hoop_data.data.bref.players import player_url

logger = logging.getLogger(__name__)

LETTERS = string.ascii_lowercase
DEFAULT_INDEX_DELAY = 1.5
DEFAULT_PLAYER_DELAY = 2.0
DEFAULT_BATCH_SIZE = 20

FetchHtml = Callable[[str], str]
ParseIndex = Callable[[str, str], Sequence[IndexEntry]]
ParsePage = Callable[[str, str], PlayerRecord]
Persist = Callable[[PlayerRecord], None]
Sleep = Callable[[float], None]
ShouldStop = Callable[[], bool]


@dataclass(frozen=True)
class SyncProgress:
    """Cumulative counters reported after each batch."""

    processed: int
    total: int
    errors: int


@dataclass(frozen=True)
class SyncResult:
    processed: int
    errors: int
    stopped: bool = False

    @property
    def persisted(self) -> int:
        return self.processed - self.errors


def get_all_player_ids_from_index(
    fetch_html: FetchHtml,
    parse_index: ParseIndex = parse_players_index,
    *,
    letters: Iterable[str] = LETTERS,
    delay: float = DEFAULT_INDEX_DELAY,
    sleep: Sleep = time.sleep,
    base_url: str = BASE_URL,
    should_stop: Optional[ShouldStop] = None,
) -> list[IndexEntry]:
    """Return the index entries of every requested letter, in letter order.

    A letter that fails to fetch or parse is logged and skipped. When
    ``should_stop`` turns true the entries gathered so far are returned.
    """

    entries: list[IndexEntry] = []
    for position, letter in enumerate(letters):
        if position and delay > 0:
            logger.debug("Sleeping %.2fs before index letter '%s'.", delay, letter)
            sleep(delay)
        if should_stop is not None and should_stop():
            logger.info("Index fetch stopped before letter '%s'.", letter)
            break
        url = index_url(letter, base_url)
        try:
            html = fetch_html(url)
            found = parse_index(html, letter)
        except Exception as exc:
            logger.warning("Failed to fetch index letter '%s': %s", letter, exc)
            continue
        logger.debug("Index letter '%s': %s players", letter, len(found))
        entries.extend(found)
    return entries


def _entry_id(entry: Union[IndexEntry, str]) -> str:
    return entry.player_id if isinstance(entry, IndexEntry) else str(entry)


def _batches(items: Sequence[str], size: int) -> Iterable[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def sync_players_in_batches(
    entries: Sequence[Union[IndexEntry, str]],
    fetch_html: FetchHtml,
    parse_page: ParsePage,
    persist: Persist,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_PLAYER_DELAY,
    on_progress: Optional[Callable[[SyncProgress], None]] = None,
    sleep: Sleep = time.sleep,
    base_url: str = BASE_URL,
    should_stop: Optional[ShouldStop] = None,
) -> SyncResult:
    """Fetch, parse and persist every player in ``entries``.

    ``processed`` counts every attempted player, ``errors`` the ones whose
    fetch, parse or persist step raised. A failure never stops the loop;
    only ``should_stop`` does, and then ``stopped`` is set on the result.
    """

    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    player_ids = [_entry_id(entry) for entry in entries]
    total = len(player_ids)
    processed = 0
    errors = 0
    stopped = False

    for batch in _batches(player_ids, batch_size):
        for player_id in batch:
            if processed and delay > 0:
                sleep(delay)
            if should_stop is not None and should_stop():
                stopped = True
                break
            processed += 1
            try:
                html = fetch_html(player_url(player_id, base_url))
                record = parse_page(html, player_id)
                persist(record)
            except Exception as exc:
                errors += 1
                logger.warning("Failed to sync player '%s': %s", player_id, exc)

        logger.info("Synced %s/%s players (%s errors)", processed, total, errors)
        if on_progress is not None:
            on_progress(SyncProgress(processed=processed, total=total, errors=errors))
        if stopped:
            logger.info("Sync stopped after %s/%s players.", processed, total)
            break

    return SyncResult(processed=processed, errors=errors, stopped=stopped)


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_INDEX_DELAY",
    "DEFAULT_PLAYER_DELAY",
    "LETTERS",
    "SyncProgress",
    "SyncResult",
    "get_all_player_ids_from_index",
    "sync_players_in_batches",
]
