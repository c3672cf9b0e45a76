"""Core domain models and logic."""

from .coerce import age_from_birth_date, coerce_number_or_text, parse_born_date
from .models import (
    IndexEntry,
    PlayerRecord,
    RosterEntry,
    SeasonStatRow,
    SummaryPair,
    SummaryScalar,
    SummaryValue,
    TeamRecord,
    TeamRecordLine,
    is_persistable_season,
)

__all__ = [
    "IndexEntry",
    "PlayerRecord",
    "RosterEntry",
    "SeasonStatRow",
    "SummaryPair",
    "SummaryScalar",
    "SummaryValue",
    "TeamRecord",
    "TeamRecordLine",
    "age_from_birth_date",
    "coerce_number_or_text",
    "is_persistable_season",
    "parse_born_date",
]
