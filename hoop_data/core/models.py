"""Immutable records produced by the Basketball-Reference extractors."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
import re
from typing import Any, Union

from hoop_data.core.coerce import to_float, to_non_negative_int

CellValue = Union[float, str, None]

_SEASON_LABEL = re.compile(r"^\d{4}(-\d{2})?$")
_SEASON_PREFIX = re.compile(r"^(19|20)\d{2}")


def is_persistable_season(season: Any) -> bool:
    """Return ``True`` when ``season`` looks like a real season label.

    Header, footer and "Career" aggregate rows fail this check.
    """

    if season is None:
        return False
    if isinstance(season, float) and season.is_integer():
        season = int(season)
    text = str(season).strip()
    if not text:
        return False
    return bool(_SEASON_LABEL.match(text) or _SEASON_PREFIX.match(text))


@dataclass(frozen=True)
class SummaryScalar:
    """Summary grid entry with a single value."""

    value: str

    def to_json(self) -> str:
        return self.value


@dataclass(frozen=True)
class SummaryPair:
    """Summary grid entry with current-season and career values."""

    current: str
    career: str

    def to_json(self) -> dict[str, str]:
        return {"current": self.current, "career": self.career}


SummaryValue = Union[SummaryScalar, SummaryPair]


def _first_present(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class SeasonStatRow:
    """One season of per-game statistics, as stored in ``player_stats``."""

    season: str
    team: str | None = None
    league: str | None = None
    games: int | None = None
    games_started: int | None = None
    pts_per_g: float | None = None
    trb_per_g: float | None = None
    ast_per_g: float | None = None
    stl_per_g: float | None = None
    blk_per_g: float | None = None
    fg_pct: float | None = None
    fg3_pct: float | None = None
    ft_pct: float | None = None

    @property
    def is_persistable(self) -> bool:
        return is_persistable_season(self.season)

    @classmethod
    def from_per_game(cls, row: Mapping[str, Any]) -> "SeasonStatRow":
        """Map a raw per-game table row (keyed by ``data-stat``) onto a season row."""

        return cls(
            season=_text_or_none(_first_present(row, "season", "year_id")) or "",
            team=_text_or_none(_first_present(row, "team_id", "team_name_abbr", "team")),
            league=_text_or_none(_first_present(row, "comp_name_abbr", "lg_id", "league")),
            games=to_non_negative_int(_first_present(row, "games", "g")),
            games_started=to_non_negative_int(_first_present(row, "games_started", "gs")),
            pts_per_g=to_float(row.get("pts_per_g")),
            trb_per_g=to_float(row.get("trb_per_g")),
            ast_per_g=to_float(row.get("ast_per_g")),
            stl_per_g=to_float(row.get("stl_per_g")),
            blk_per_g=to_float(row.get("blk_per_g")),
            fg_pct=to_float(row.get("fg_pct")),
            fg3_pct=to_float(row.get("fg3_pct")),
            ft_pct=to_float(row.get("ft_pct")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlayerRecord:
    """Everything scraped from a single player page."""

    player_id: str
    name: str | None
    url: str
    team: str | None = None
    position: str | None = None
    height: str | None = None
    weight: str | None = None
    birth_date: str | None = None
    hometown: str | None = None
    jersey_number: str | None = None
    age: int | None = None
    summary: Mapping[str, SummaryValue] = field(default_factory=dict)
    per_game: tuple[Mapping[str, CellValue], ...] = ()

    def season_stats(self) -> tuple[SeasonStatRow, ...]:
        """Return the per-game rows that map onto a real season."""

        rows = (SeasonStatRow.from_per_game(row) for row in self.per_game)
        return tuple(row for row in rows if row.is_persistable)

    def summary_json(self) -> dict[str, Any]:
        return {label: value.to_json() for label, value in self.summary.items()}

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a JSON-serialisable dictionary."""

        return {
            "player_id": self.player_id,
            "name": self.name,
            "team": self.team,
            "position": self.position,
            "height": self.height,
            "weight": self.weight,
            "birth_date": self.birth_date,
            "hometown": self.hometown,
            "jersey_number": self.jersey_number,
            "age": self.age,
            "summary": self.summary_json(),
            "per_game": [dict(row) for row in self.per_game],
            "url": self.url,
        }


@dataclass(frozen=True)
class TeamRecordLine:
    wins: int
    losses: int


@dataclass(frozen=True)
class RosterEntry:
    """One row of a team's per-game roster table."""

    player_id: str | None
    player: str
    pos: str | None = None
    age: CellValue = None
    games: CellValue = None
    games_started: CellValue = None
    mp_per_g: CellValue = None
    pts_per_g: CellValue = None
    trb_per_g: CellValue = None
    ast_per_g: CellValue = None
    fg_pct: CellValue = None
    fg3_pct: CellValue = None
    ft_pct: CellValue = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TeamRecord:
    """Team identity, season ratings and roster scraped from a team page."""

    team_id: str
    season: str
    name: str
    url: str
    record: TeamRecordLine | None = None
    pts_per_game: float | None = None
    opp_pts_per_game: float | None = None
    srs: float | None = None
    pace: float | None = None
    off_rtg: float | None = None
    def_rtg: float | None = None
    roster: tuple[RosterEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["roster"] = [entry.to_dict() for entry in self.roster]
        return payload


@dataclass(frozen=True)
class IndexEntry:
    """A ``(player_id, name)`` pair listed on an alphabetical index page."""

    player_id: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"player_id": self.player_id, "name": self.name}


__all__ = [
    "CellValue",
    "IndexEntry",
    "PlayerRecord",
    "RosterEntry",
    "SeasonStatRow",
    "SummaryPair",
    "SummaryScalar",
    "SummaryValue",
    "TeamRecord",
    "TeamRecordLine",
    "is_persistable_season",
]
