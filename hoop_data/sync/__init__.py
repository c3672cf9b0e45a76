"""Batch synchronization of the player index into the local store."""

from .jobs import (
    SyncProgress,
    SyncResult,
    get_all_player_ids_from_index,
    sync_players_in_batches,
)
from .runner import SubmitResult, SyncRunner, SyncScheduler
from .status import SyncPhase, SyncState, SyncStatus

__all__ = [
    "SubmitResult",
    "SyncPhase",
    "SyncProgress",
    "SyncResult",
    "SyncRunner",
    "SyncScheduler",
    "SyncState",
    "SyncStatus",
    "get_all_player_ids_from_index",
    "sync_players_in_batches",
]
