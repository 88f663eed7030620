"""Storage interface implemented by every backend.

Lookups return ``None`` for unknown ids; mutations on unknown ids raise
``KeyError``. Every collection is keyed by an integer id that starts at 1 and
only ever grows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from cricfantasy.models import PlayerRecord

from .records import (
    ContestEntryRecord,
    ContestRecord,
    MatchRecord,
    TeamPlayerRecord,
    TeamRecord,
    UserRecord,
    WinnerRecord,
    ensure_utc,
)


class ContestFullError(ValueError):
    """Raised by a store when an entry would push filled spots past the total."""


class InsufficientBalanceError(ValueError):
    """Raised by a store when a guarded debit would leave the balance below its floor."""


class FantasyStore(ABC):
    starting_balance: float = 500.0

    # Users

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def create_user(self, *, username: str, email: str, full_name: str) -> UserRecord: ...

    @abstractmethod
    def update_user_wallet(
        self,
        user_id: int,
        amount: float,
        *,
        min_balance: Optional[float] = None,
    ) -> UserRecord:
        """Apply a signed delta; positive deltas also count as winnings.

        With ``min_balance`` the update is applied only if the resulting
        balance stays at or above it, otherwise ``InsufficientBalanceError``
        is raised and nothing changes. Raises ``KeyError`` for an unknown user.
        """

    @abstractmethod
    def restore_user(self, user: UserRecord) -> UserRecord:
        """Overwrite a user's wallet fields with a previously read snapshot."""

    # Players

    @abstractmethod
    def list_players(self) -> List[PlayerRecord]: ...

    def list_players_by_role(self, role: str) -> List[PlayerRecord]:
        return [player for player in self.list_players() if player.role == role]

    def list_players_by_team(self, team_code: str) -> List[PlayerRecord]:
        return [player for player in self.list_players() if player.team_code == team_code]

    def list_players_by_match(self, match_id: int) -> List[PlayerRecord]:
        match = self.get_match(match_id)
        if match is None:
            return []
        return [player for player in self.list_players() if match.involves(player.team_code)]

    @abstractmethod
    def get_player(self, player_id: int) -> Optional[PlayerRecord]: ...

    @abstractmethod
    def create_player(
        self,
        *,
        name: str,
        team_code: str,
        role: str,
        credits: float,
        points: float = 0.0,
        selection_percentage: float = 0.0,
        last_match_points: float = 0.0,
        image_url: Optional[str] = None,
    ) -> PlayerRecord: ...

    # Matches

    @abstractmethod
    def list_matches(self) -> List[MatchRecord]: ...

    def list_upcoming_matches(self, now: Optional[datetime] = None) -> List[MatchRecord]:
        now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
        return [
            match
            for match in self.list_matches()
            if match.start_time > now and not match.is_live and not match.is_completed
        ]

    def list_live_matches(self) -> List[MatchRecord]:
        return [match for match in self.list_matches() if match.is_live and not match.is_completed]

    def list_completed_matches(self) -> List[MatchRecord]:
        return [match for match in self.list_matches() if match.is_completed]

    @abstractmethod
    def get_match(self, match_id: int) -> Optional[MatchRecord]: ...

    @abstractmethod
    def create_match(
        self,
        *,
        team1: str,
        team2: str,
        team1_code: str,
        team2_code: str,
        match_type: str,
        start_time: datetime,
        team1_logo: Optional[str] = None,
        team2_logo: Optional[str] = None,
        tag_text: Optional[str] = None,
        tag_color: Optional[str] = None,
    ) -> MatchRecord: ...

    @abstractmethod
    def update_match_status(
        self,
        match_id: int,
        *,
        is_live: Optional[bool] = None,
        is_completed: Optional[bool] = None,
    ) -> MatchRecord: ...

    # Teams

    @abstractmethod
    def list_teams_by_user(self, user_id: int) -> List[TeamRecord]: ...

    @abstractmethod
    def list_teams_by_match(self, match_id: int) -> List[TeamRecord]: ...

    @abstractmethod
    def get_team(self, team_id: int) -> Optional[TeamRecord]: ...

    @abstractmethod
    def create_team(
        self,
        *,
        user_id: int,
        name: str,
        match_id: int,
        captain_id: int,
        vice_captain_id: int,
        player_ids: Sequence[int] = (),
    ) -> TeamRecord:
        """Create a team and, when given, link its players in the same step."""

    @abstractmethod
    def list_team_players(self, team_id: int) -> List[PlayerRecord]: ...

    @abstractmethod
    def add_player_to_team(self, *, team_id: int, player_id: int) -> TeamPlayerRecord: ...

    # Contests

    @abstractmethod
    def list_contests_by_match(self, match_id: int) -> List[ContestRecord]: ...

    def list_contests_by_user(self, user_id: int) -> List[ContestRecord]:
        contests: List[ContestRecord] = []
        for entry in self.list_entries_by_user(user_id):
            contest = self.get_contest(entry.contest_id)
            if contest is not None:
                contests.append(contest)
        return contests

    @abstractmethod
    def get_contest(self, contest_id: int) -> Optional[ContestRecord]: ...

    @abstractmethod
    def create_contest(
        self,
        *,
        match_id: int,
        name: str,
        entry_fee: float,
        total_spots: int,
        prize_pool: float,
        first_prize: float,
        contest_type: str,
        is_guaranteed: bool = True,
        header_color: str = "#d13239",
    ) -> ContestRecord: ...

    # Contest entries

    @abstractmethod
    def list_entries_by_contest(self, contest_id: int) -> List[ContestEntryRecord]: ...

    @abstractmethod
    def list_entries_by_user(self, user_id: int) -> List[ContestEntryRecord]: ...

    @abstractmethod
    def get_contest_entry(self, entry_id: int) -> Optional[ContestEntryRecord]: ...

    @abstractmethod
    def create_contest_entry(self, *, contest_id: int, user_id: int, team_id: int) -> ContestEntryRecord:
        """Insert an entry and bump the contest's filled spots by one.

        Raises ``KeyError`` for an unknown contest and ``ContestFullError`` when
        no spot is left.
        """

    # Winners

    @abstractmethod
    def list_recent_winners(self, limit: int = 10) -> List[WinnerRecord]: ...

    @abstractmethod
    def list_winners_by_user(self, user_id: int) -> List[WinnerRecord]: ...

    @abstractmethod
    def create_winner(
        self,
        *,
        user_id: int,
        contest_id: int,
        match_id: int,
        amount: float,
    ) -> WinnerRecord:
        """Record a payout and credit the winner's wallet when the user exists."""
