"""Typed records for every stored entity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    email: str
    full_name: str
    wallet_balance: float
    total_winnings: float
    created_at: datetime


@dataclass(frozen=True)
class MatchRecord:
    id: int
    team1: str
    team2: str
    team1_code: str
    team2_code: str
    match_type: str
    start_time: datetime
    team1_logo: Optional[str] = None
    team2_logo: Optional[str] = None
    is_live: bool = False
    is_completed: bool = False
    tag_text: Optional[str] = None
    tag_color: Optional[str] = None

    def involves(self, team_code: str) -> bool:
        return team_code in (self.team1_code, self.team2_code)

    @property
    def display(self) -> str:
        return f"{self.team1_code} vs {self.team2_code}"


@dataclass(frozen=True)
class TeamRecord:
    id: int
    user_id: int
    name: str
    match_id: int
    captain_id: int
    vice_captain_id: int
    created_at: datetime
    total_points: float = 0.0


@dataclass(frozen=True)
class TeamPlayerRecord:
    id: int
    team_id: int
    player_id: int


@dataclass(frozen=True)
class ContestRecord:
    id: int
    match_id: int
    name: str
    entry_fee: float
    total_spots: int
    prize_pool: float
    first_prize: float
    contest_type: str
    filled_spots: int = 0
    is_guaranteed: bool = True
    header_color: str = "#d13239"

    @property
    def is_full(self) -> bool:
        return self.filled_spots >= self.total_spots

    @property
    def spots_left(self) -> int:
        return max(0, self.total_spots - self.filled_spots)


@dataclass(frozen=True)
class ContestEntryRecord:
    id: int
    contest_id: int
    user_id: int
    team_id: int
    created_at: datetime
    rank: Optional[int] = None
    points: float = 0.0
    prize_won: float = 0.0


@dataclass(frozen=True)
class WinnerRecord:
    id: int
    user_id: int
    contest_id: int
    match_id: int
    amount: float
    created_at: datetime


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored times always compare."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
