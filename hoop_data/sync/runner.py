"""Single-slot background runner and interval scheduler for the sync job."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
import threading
from typing import Optional

from hoop_data.core.models import IndexEntry
from hoop_data.data.bref.client import BASE_URL
from hoop_data.data.bref.index import parse_players_index
from hoop_data.data.bref.players import parse_player_page

from .jobs import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_INDEX_DELAY,
    DEFAULT_PLAYER_DELAY,
    LETTERS,
    FetchHtml,
    ParseIndex,
    ParsePage,
    Persist,
    Sleep,
    SyncProgress,
    get_all_player_ids_from_index,
    sync_players_in_batches,
)
from .status import SyncPhase, SyncState, SyncStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of asking the runner to start a sync.

    When ``accepted`` is false, ``status`` is the snapshot of the run that is
    already in progress.
    """

    accepted: bool
    status: SyncStatus


class SyncRunner:
    """Run the full index-then-players sync, at most one run at a time.

    Usage:
        runner = SyncRunner(client.fetch_html, store.upsert_player)
        result = runner.submit(limit=50)
        runner.state.snapshot()
    """

    def __init__(
        self,
        fetch_html: FetchHtml,
        persist: Persist,
        *,
        state: SyncState | None = None,
        parse_index: ParseIndex = parse_players_index,
        parse_page: ParsePage = parse_player_page,
        letters: str = LETTERS,
        index_delay: float = DEFAULT_INDEX_DELAY,
        player_delay: float = DEFAULT_PLAYER_DELAY,
        batch_size: int = DEFAULT_BATCH_SIZE,
        sleep: Optional[Sleep] = None,
        base_url: str = BASE_URL,
    ) -> None:
        self.fetch_html = fetch_html
        self.persist = persist
        self.state = state or SyncState()
        self.parse_index = parse_index
        self.parse_page = parse_page
        self.letters = letters
        self.index_delay = index_delay
        self.player_delay = player_delay
        self.batch_size = batch_size
        self._stop_requested = threading.Event()
        self.sleep = sleep if sleep is not None else self._wait
        self.base_url = base_url
        self._worker: Optional[threading.Thread] = None

    @property
    def status(self) -> SyncStatus:
        return self.state.snapshot()

    def _wait(self, seconds: float) -> None:
        self._stop_requested.wait(seconds)

    def run(self, *, limit: int | None = None, letters: Iterable[str] | None = None) -> SubmitResult:
        """Run a sync in the calling thread and return its final status."""

        accepted, status = self.state.try_begin()
        if not accepted:
            return SubmitResult(accepted=False, status=status)
        self._stop_requested.clear()
        return SubmitResult(accepted=True, status=self._execute(limit=limit, letters=letters))

    def submit(self, *, limit: int | None = None, letters: Iterable[str] | None = None) -> SubmitResult:
        """Start a sync on a daemon thread unless one is already running."""

        accepted, status = self.state.try_begin()
        if not accepted:
            logger.info("Sync already running (%s/%s); request rejected.", status.processed, status.total)
            return SubmitResult(accepted=False, status=status)

        self._stop_requested.clear()
        self._worker = threading.Thread(
            target=self._execute,
            kwargs={"limit": limit, "letters": letters},
            name="hoop-data-sync",
            daemon=True,
        )
        self._worker.start()
        return SubmitResult(accepted=True, status=status)

    def join(self, timeout: float | None = None) -> None:
        worker = self._worker
        if worker is not None:
            worker.join(timeout)

    def stop(self, timeout: float | None = None) -> SyncStatus:
        """Ask an active run to stop after its current player and wait for it.

        The in-flight fetch is not interrupted; pacing sleeps are.
        """

        self._stop_requested.set()
        self.join(timeout)
        worker = self._worker
        if worker is not None and worker.is_alive():
            logger.warning("Sync thread still running after %ss; continuing shutdown.", timeout)
        return self.status

    def _on_progress(self, progress: SyncProgress) -> None:
        self.state.update(
            processed=progress.processed,
            total=progress.total,
            errors=progress.errors,
            message=f"Synced {progress.processed}/{progress.total} players",
        )

    def _execute(self, *, limit: int | None, letters: Iterable[str] | None) -> SyncStatus:
        message = "Sync failed"
        try:
            self.state.update(phase=SyncPhase.FETCHING_INDEX, message="Fetching player index")
            entries = get_all_player_ids_from_index(
                self.fetch_html,
                self.parse_index,
                letters=letters if letters is not None else self.letters,
                delay=self.index_delay,
                sleep=self.sleep,
                base_url=self.base_url,
                should_stop=self._stop_requested.is_set,
            )
            if self._stop_requested.is_set():
                message = "Sync stopped while fetching the player index"
            else:
                message = self._sync_entries(entries, limit)
        except Exception as exc:
            logger.exception("Sync run crashed")
            message = f"Sync failed: {exc}"
        finally:
            status = self.state.finish(message)
        logger.info(message)
        return status

    def _sync_entries(self, entries: list[IndexEntry], limit: int | None) -> str:
        if limit is not None:
            entries = entries[: max(0, limit)]

        logger.info("Found %s players in the index; starting sync.", len(entries))
        self.state.update(
            phase=SyncPhase.SYNCING,
            total=len(entries),
            message=f"Syncing {len(entries)} players",
        )
        result = sync_players_in_batches(
            entries,
            self.fetch_html,
            self.parse_page,
            self.persist,
            batch_size=self.batch_size,
            delay=self.player_delay,
            on_progress=self._on_progress,
            sleep=self.sleep,
            base_url=self.base_url,
            should_stop=self._stop_requested.is_set,
        )
        if result.stopped:
            return (
                f"Stopped: {result.persisted}/{len(entries)} players synced, "
                f"{result.errors} errors"
            )
        if result.errors:
            return (
                f"Completed with errors: {result.persisted}/{result.processed} players "
                f"synced, {result.errors} errors"
            )
        return f"Completed: {result.processed} players synced"


class SyncScheduler:
    """Submit a sync after ``initial_delay`` seconds, then every ``interval``.

    Overlapping triggers are rejected by the runner itself.
    """

    def __init__(
        self,
        runner: SyncRunner,
        *,
        initial_delay: float = 15.0,
        interval: float = 24 * 60 * 60.0,
    ) -> None:
        self.runner = runner
        self.initial_delay = initial_delay
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="hoop-data-scheduler", daemon=True)
        self._thread.start()
        logger.info(
            "Scheduled sync every %.0fs (first run in %.0fs).", self.interval, self.initial_delay
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        if self._stop.wait(self.initial_delay):
            return
        while True:
            result = self.runner.submit()
            if not result.accepted:
                logger.info("Scheduled sync skipped; a run is already in progress.")
            if self._stop.wait(self.interval):
                return


__all__ = ["SubmitResult", "SyncRunner", "SyncScheduler"]
