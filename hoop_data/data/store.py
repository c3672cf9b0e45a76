"""DuckDB-backed storage for scraped players and their season statistics.

Tables:
- player_info: one row per player (bio columns, summary grid, raw per-game rows)
- player_stats: one row per player-season, replaced wholesale on every sync
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
import json
import logging
from pathlib import Path
import threading
from typing import Any

import duckdb
import polars as pl

from hoop_data.core.models import PlayerRecord, SeasonStatRow

logger = logging.getLogger(__name__)

PLAYER_INFO_TABLE = "player_info"
PLAYER_STATS_TABLE = "player_stats"

PLAYER_STATS_SCHEMA: dict[str, pl.DataType] = {
    "player_id": pl.Utf8,
    "season": pl.Utf8,
    "team": pl.Utf8,
    "league": pl.Utf8,
    "games": pl.Int32,
    "games_started": pl.Int32,
    "pts_per_g": pl.Float64,
    "trb_per_g": pl.Float64,
    "ast_per_g": pl.Float64,
    "stl_per_g": pl.Float64,
    "blk_per_g": pl.Float64,
    "fg_pct": pl.Float64,
    "fg3_pct": pl.Float64,
    "ft_pct": pl.Float64,
}

_PLAYER_INFO_COLUMNS = (
    "player_id",
    "name",
    "team",
    "position",
    "height",
    "weight",
    "jersey_number",
    "birth_date",
    "age",
    "hometown",
    "summary",
    "raw_data",
)

_CREATE_PLAYER_INFO = f"""
CREATE TABLE IF NOT EXISTS {PLAYER_INFO_TABLE} (
    player_id VARCHAR PRIMARY KEY,
    name VARCHAR,
    team VARCHAR,
    position VARCHAR,
    height VARCHAR,
    weight VARCHAR,
    jersey_number VARCHAR,
    birth_date DATE,
    age INTEGER,
    hometown VARCHAR,
    summary VARCHAR,
    raw_data VARCHAR,
    updated_at TIMESTAMP
)
"""

_CREATE_PLAYER_STATS = f"""
CREATE TABLE IF NOT EXISTS {PLAYER_STATS_TABLE} (
    player_id VARCHAR NOT NULL,
    season VARCHAR NOT NULL,
    team VARCHAR,
    league VARCHAR,
    games INTEGER,
    games_started INTEGER,
    pts_per_g DOUBLE,
    trb_per_g DOUBLE,
    ast_per_g DOUBLE,
    stl_per_g DOUBLE,
    blk_per_g DOUBLE,
    fg_pct DOUBLE,
    fg3_pct DOUBLE,
    ft_pct DOUBLE
)
"""

_UPSERT_PLAYER = (
    f"INSERT OR REPLACE INTO {PLAYER_INFO_TABLE} "
    f"({', '.join(_PLAYER_INFO_COLUMNS)}, updated_at) "
    f"VALUES ({', '.join('?' for _ in _PLAYER_INFO_COLUMNS)}, ?)"
)

_INSERT_STATS = (
    f"INSERT INTO {PLAYER_STATS_TABLE} ({', '.join(PLAYER_STATS_SCHEMA)}) "
    f"VALUES ({', '.join('?' for _ in PLAYER_STATS_SCHEMA)})"
)


def _empty_player_stats_frame() -> pl.DataFrame:
    return pl.DataFrame(schema=PLAYER_STATS_SCHEMA)


def season_stats_frame(
    player_id: str,
    per_game_rows: Iterable[Mapping[str, Any]],
) -> pl.DataFrame:
    """Shape raw per-game rows into typed ``player_stats`` rows.

    Rows whose season is not a real season label (headers, "Career"
    aggregates, blanks) are dropped.
    """

    records = []
    for raw in per_game_rows:
        row = SeasonStatRow.from_per_game(raw)
        if row.is_persistable:
            records.append({"player_id": player_id, **row.to_dict()})
    if not records:
        return _empty_player_stats_frame()
    return pl.from_dicts(records, schema=PLAYER_STATS_SCHEMA)


def _as_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.debug("Dropping unparseable birth date '%s'", value)
        return None


def _player_params(record: PlayerRecord) -> list[Any]:
    raw_data = {"per_game": [dict(row) for row in record.per_game], "url": record.url}
    return [
        record.player_id,
        record.name,
        record.team,
        record.position,
        record.height,
        record.weight,
        record.jersey_number,
        _as_date(record.birth_date),
        record.age,
        record.hometown,
        json.dumps(record.summary_json()),
        json.dumps(raw_data),
        datetime.now(),
    ]


def _row_to_player(columns: Sequence[str], values: Sequence[Any]) -> dict[str, Any]:
    row = dict(zip(columns, values))
    birth_date = row.get("birth_date")
    if isinstance(birth_date, date):
        row["birth_date"] = birth_date.isoformat()
    row["summary"] = json.loads(row["summary"]) if row.get("summary") else {}
    raw_data = json.loads(row.pop("raw_data") or "{}")
    row["per_game"] = raw_data.get("per_game", [])
    row["url"] = raw_data.get("url")
    return row


class PlayerStore:
    """Persist :class:`PlayerRecord` objects into a DuckDB database.

    Usage:
        store = PlayerStore("data/hoop_data.duckdb")
        store.upsert_player(record)
        store.get_player("jamesle01")

    A single connection is shared; calls are serialised with a lock so the
    sync worker thread and API request threads can use one store.
    """

    def __init__(self, path: Path | str = ":memory:") -> None:
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._connection: duckdb.DuckDBPyConnection | None = duckdb.connect(self.path)
        self.initialize()

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        if self._connection is None:
            raise RuntimeError("PlayerStore is closed.")
        return self._connection

    def initialize(self) -> None:
        """Create the tables if they do not exist yet."""

        with self._lock:
            self.connection.execute(_CREATE_PLAYER_INFO)
            self.connection.execute(_CREATE_PLAYER_STATS)
        logger.debug("Player store initialized at %s", self.path)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def upsert_player(self, record: PlayerRecord) -> None:
        """Upsert ``record`` into ``player_info`` and replace its season rows.

        A failing season-stats write is logged and does not undo the
        player-info write.
        """

        with self._lock:
            self.connection.execute(_UPSERT_PLAYER, _player_params(record))

        try:
            inserted = self.upsert_player_stats(record.player_id, record.per_game)
        except duckdb.Error as exc:
            logger.error(
                "player_stats insert failed for player_id=%s: %s", record.player_id, exc
            )
            return
        if inserted:
            logger.debug("player_stats: inserted %s rows for player_id=%s", inserted, record.player_id)

    def upsert_player_stats(
        self,
        player_id: str,
        per_game_rows: Sequence[Mapping[str, Any]],
    ) -> int:
        """Replace the season rows for ``player_id``; return the rows inserted."""

        if not per_game_rows:
            return 0

        frame = season_stats_frame(player_id, per_game_rows)
        with self._lock:
            connection = self.connection
            connection.begin()
            try:
                connection.execute(
                    f"DELETE FROM {PLAYER_STATS_TABLE} WHERE player_id = ?", [player_id]
                )
                if frame.height:
                    connection.executemany(_INSERT_STATS, frame.rows())
                connection.commit()
            except duckdb.Error:
                connection.rollback()
                raise

        if frame.height == 0:
            logger.warning(
                "player_stats: no season rows to insert for player_id=%s (per_game count=%s)",
                player_id,
                len(per_game_rows),
            )
        return frame.height

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _fetch(self, sql: str, params: Sequence[Any]) -> tuple[list[str], list[tuple]]:
        with self._lock:
            cursor = self.connection.execute(sql, params)
            rows = cursor.fetchall()
            columns = [column[0] for column in cursor.description]
        return columns, rows

    def get_players(self, limit: int = 5000, offset: int = 0) -> list[dict[str, Any]]:
        """Return stored players ordered by name."""

        columns, rows = self._fetch(
            f"SELECT {', '.join(_PLAYER_INFO_COLUMNS)} FROM {PLAYER_INFO_TABLE} "
            "ORDER BY name, player_id LIMIT ? OFFSET ?",
            [limit, offset],
        )
        return [_row_to_player(columns, row) for row in rows]

    def get_player(self, player_id: str) -> dict[str, Any] | None:
        """Return the stored player for ``player_id`` or ``None``."""

        columns, rows = self._fetch(
            f"SELECT {', '.join(_PLAYER_INFO_COLUMNS)} FROM {PLAYER_INFO_TABLE} "
            "WHERE player_id = ?",
            [player_id],
        )
        if not rows:
            return None
        return _row_to_player(columns, rows[0])

    def get_player_stats(self, player_id: str) -> list[dict[str, Any]]:
        """Return the stored season rows for ``player_id`` in season order."""

        columns, rows = self._fetch(
            f"SELECT {', '.join(PLAYER_STATS_SCHEMA)} FROM {PLAYER_STATS_TABLE} "
            "WHERE player_id = ? ORDER BY season",
            [player_id],
        )
        return [dict(zip(columns, row)) for row in rows]

    def count_players(self) -> int:
        _, rows = self._fetch(f"SELECT COUNT(*) FROM {PLAYER_INFO_TABLE}", [])
        return int(rows[0][0])

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def __enter__(self) -> "PlayerStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "PLAYER_STATS_SCHEMA",
    "PlayerStore",
    "season_stats_frame",
]
