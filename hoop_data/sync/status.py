"""Owned, thread-safe sync status shared by the job runner and its readers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from enum import Enum
import threading
from typing import Any, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncPhase(str, Enum):
    IDLE = "idle"
    FETCHING_INDEX = "fetching_index"
    SYNCING = "syncing"


@dataclass(frozen=True)
class SyncStatus:
    """Immutable snapshot of the sync job's progress."""

    running: bool = False
    phase: SyncPhase = SyncPhase.IDLE
    processed: int = 0
    total: int = 0
    errors: int = 0
    message: str = "Idle"
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["phase"] = self.phase.value
        for key in ("started_at", "finished_at"):
            value = payload[key]
            payload[key] = value.isoformat() if value is not None else None
        return payload


class SyncState:
    """Holder for the current :class:`SyncStatus`.

    Writers swap in a new snapshot under a lock; readers call
    :meth:`snapshot` and never observe a half-updated status.
    """

    def __init__(self, initial: SyncStatus | None = None) -> None:
        self._lock = threading.Lock()
        self._status = initial or SyncStatus()

    def snapshot(self) -> SyncStatus:
        with self._lock:
            return self._status

    def try_begin(self, message: str = "Starting sync") -> tuple[bool, SyncStatus]:
        """Mark a run as started unless one is already running.

        Returns ``(True, new_status)`` when the run may proceed, otherwise
        ``(False, current_status)`` with the counters untouched.
        """

        with self._lock:
            if self._status.running:
                return False, self._status
            self._status = SyncStatus(
                running=True,
                phase=SyncPhase.FETCHING_INDEX,
                message=message,
                started_at=_utcnow(),
            )
            return True, self._status

    def update(self, **fields: Any) -> SyncStatus:
        with self._lock:
            self._status = replace(self._status, **fields)
            return self._status

    def finish(self, message: str) -> SyncStatus:
        """Return to idle, keeping the final counters for later readers."""

        with self._lock:
            self._status = replace(
                self._status,
                running=False,
                phase=SyncPhase.IDLE,
                message=message,
                finished_at=_utcnow(),
            )
            return self._status


__all__ = ["SyncPhase", "SyncState", "SyncStatus"]
