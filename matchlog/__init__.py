"""Core module for matchlog."""

from dataclasses import dataclass, field
from typing import Optional, Union

# Source origin of a merged record
SHEET = 'SHEET'
DATABASE = 'DATABASE'
BOTH = 'BOTH'

MatchId = Union[int, str]


class SourceUnavailableError(RuntimeError):
    """Raised when a match data source cannot be reached or read."""


@dataclass
class MatchRecord:
    """A match in the canonical shape shared by both data sources."""

    date: str                        # YYYY-MM-DD, '' if unknown
    opponent_name: str
    match_id: Optional[MatchId]
    stats_fields: dict = field(default_factory=dict)
    source_origin: str = SHEET       # SHEET, DATABASE, BOTH
    team_id: Optional[int] = None

    def to_row(self) -> dict:
        """Flatten the record into the dashboard row shape."""
        row: dict = {
            'Match ID': self.match_id,
            'Opponent': self.opponent_name,
            'Date': self.date,
        }
        if self.team_id is not None:
            row['Team ID'] = self.team_id
        for key, value in self.stats_fields.items():
            row.setdefault(key, value)
        return row


@dataclass(frozen=True)
class MergeFilter:
    """Filter applied when fetching matches for a merge."""

    team_id: Optional[int] = None
    team_ids: tuple = ()
    start_date: Optional[str] = None   # inclusive, YYYY-MM-DD
    end_date: Optional[str] = None     # inclusive, YYYY-MM-DD

    def __post_init__(self):
        # Keep the filter hashable, it is used as a cache key
        object.__setattr__(self, 'team_ids', tuple(self.team_ids))

    def all_team_ids(self) -> list[int]:
        """Union of team_id and team_ids, in first-seen order."""
        ids = [] if self.team_id is None else [self.team_id]
        for team_id in self.team_ids:
            if team_id not in ids:
                ids.append(team_id)
        return ids

    def has_date_range(self) -> bool:
        return bool(self.start_date or self.end_date)

    def covers_date(self, date: str) -> bool:
        """Check whether a normalized date lies inside the range."""
        if not date:
            return False
        if self.start_date and date < self.start_date:
            return False
        if self.end_date and date > self.end_date:
            return False
        return True


@dataclass
class OpponentMatch:
    """Best candidate found for an opponent name."""

    name: str
    similarity: float   # 0.0 – 1.0
