"""In-memory store backed by one dict per entity."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from cricfantasy.models import PlayerRecord

from .base import ContestFullError, FantasyStore, InsufficientBalanceError
from .records import (
    ContestEntryRecord,
    ContestRecord,
    MatchRecord,
    TeamPlayerRecord,
    TeamRecord,
    UserRecord,
    WinnerRecord,
    ensure_utc,
    utcnow,
)


_COLLECTIONS = (
    "users",
    "players",
    "matches",
    "teams",
    "team_players",
    "contests",
    "contest_entries",
    "winners",
)


class MemoryStore(FantasyStore):
    """Thread-safe store that keeps every collection in process memory."""

    def __init__(self, *, starting_balance: float = 500.0):
        self.starting_balance = starting_balance
        self._lock = threading.RLock()
        self._users: Dict[int, UserRecord] = {}
        self._players: Dict[int, PlayerRecord] = {}
        self._matches: Dict[int, MatchRecord] = {}
        self._teams: Dict[int, TeamRecord] = {}
        self._team_players: Dict[int, TeamPlayerRecord] = {}
        self._contests: Dict[int, ContestRecord] = {}
        self._contest_entries: Dict[int, ContestEntryRecord] = {}
        self._winners: Dict[int, WinnerRecord] = {}
        self._counters: Dict[str, int] = {name: 1 for name in _COLLECTIONS}

    def _next_id(self, collection: str) -> int:
        value = self._counters[collection]
        self._counters[collection] = value + 1
        return value

    # Users

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._lock:
            return next((user for user in self._users.values() if user.username == username), None)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            return next((user for user in self._users.values() if user.email == email), None)

    def create_user(self, *, username: str, email: str, full_name: str) -> UserRecord:
        with self._lock:
            user = UserRecord(
                id=self._next_id("users"),
                username=username,
                email=email,
                full_name=full_name,
                wallet_balance=self.starting_balance,
                total_winnings=0.0,
                created_at=utcnow(),
            )
            self._users[user.id] = user
            return user

    def update_user_wallet(
        self,
        user_id: int,
        amount: float,
        *,
        min_balance: Optional[float] = None,
    ) -> UserRecord:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise KeyError(f"User {user_id} not found")
            if min_balance is not None and user.wallet_balance + amount < min_balance:
                raise InsufficientBalanceError(f"User {user_id} balance {user.wallet_balance:.2f} too low")
            winnings = user.total_winnings + amount if amount > 0 else user.total_winnings
            updated = replace(user, wallet_balance=user.wallet_balance + amount, total_winnings=winnings)
            self._users[user_id] = updated
            return updated

    def restore_user(self, user: UserRecord) -> UserRecord:
        with self._lock:
            if user.id not in self._users:
                raise KeyError(f"User {user.id} not found")
            self._users[user.id] = user
            return user

    # Players

    def list_players(self) -> List[PlayerRecord]:
        with self._lock:
            return list(self._players.values())

    def get_player(self, player_id: int) -> Optional[PlayerRecord]:
        return self._players.get(player_id)

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
    ) -> PlayerRecord:
        with self._lock:
            player = PlayerRecord(
                id=self._counters["players"],
                name=name,
                team_code=team_code,
                role=role,
                credits=credits,
                points=points,
                selection_percentage=selection_percentage,
                last_match_points=last_match_points,
                image_url=image_url,
            )
            # Only consume the id once the record validated.
            self._next_id("players")
            self._players[player.id] = player
            return player

    # Matches

    def list_matches(self) -> List[MatchRecord]:
        with self._lock:
            return list(self._matches.values())

    def get_match(self, match_id: int) -> Optional[MatchRecord]:
        return self._matches.get(match_id)

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
    ) -> MatchRecord:
        with self._lock:
            match = MatchRecord(
                id=self._next_id("matches"),
                team1=team1,
                team2=team2,
                team1_code=team1_code,
                team2_code=team2_code,
                match_type=match_type,
                start_time=ensure_utc(start_time),
                team1_logo=team1_logo,
                team2_logo=team2_logo,
                tag_text=tag_text,
                tag_color=tag_color,
            )
            self._matches[match.id] = match
            return match

    def update_match_status(
        self,
        match_id: int,
        *,
        is_live: Optional[bool] = None,
        is_completed: Optional[bool] = None,
    ) -> MatchRecord:
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                raise KeyError(f"Match {match_id} not found")
            updated = replace(
                match,
                is_live=match.is_live if is_live is None else is_live,
                is_completed=match.is_completed if is_completed is None else is_completed,
            )
            self._matches[match_id] = updated
            return updated

    # Teams

    def list_teams_by_user(self, user_id: int) -> List[TeamRecord]:
        with self._lock:
            return [team for team in self._teams.values() if team.user_id == user_id]

    def list_teams_by_match(self, match_id: int) -> List[TeamRecord]:
        with self._lock:
            return [team for team in self._teams.values() if team.match_id == match_id]

    def get_team(self, team_id: int) -> Optional[TeamRecord]:
        return self._teams.get(team_id)

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
        with self._lock:
            missing = [player_id for player_id in player_ids if player_id not in self._players]
            if missing:
                raise KeyError(f"Players not found: {missing}")
            team = TeamRecord(
                id=self._next_id("teams"),
                user_id=user_id,
                name=name,
                match_id=match_id,
                captain_id=captain_id,
                vice_captain_id=vice_captain_id,
                created_at=utcnow(),
            )
            self._teams[team.id] = team
            for player_id in player_ids:
                self._link_player(team.id, player_id)
            return team

    def _link_player(self, team_id: int, player_id: int) -> TeamPlayerRecord:
        link = TeamPlayerRecord(id=self._next_id("team_players"), team_id=team_id, player_id=player_id)
        self._team_players[link.id] = link
        return link

    def list_team_players(self, team_id: int) -> List[PlayerRecord]:
        with self._lock:
            return [
                self._players[link.player_id]
                for link in self._team_players.values()
                if link.team_id == team_id and link.player_id in self._players
            ]

    def add_player_to_team(self, *, team_id: int, player_id: int) -> TeamPlayerRecord:
        with self._lock:
            if team_id not in self._teams:
                raise KeyError(f"Team {team_id} not found")
            if player_id not in self._players:
                raise KeyError(f"Player {player_id} not found")
            return self._link_player(team_id, player_id)

    # Contests

    def list_contests_by_match(self, match_id: int) -> List[ContestRecord]:
        with self._lock:
            return [contest for contest in self._contests.values() if contest.match_id == match_id]

    def get_contest(self, contest_id: int) -> Optional[ContestRecord]:
        return self._contests.get(contest_id)

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
    ) -> ContestRecord:
        with self._lock:
            contest = ContestRecord(
                id=self._next_id("contests"),
                match_id=match_id,
                name=name,
                entry_fee=entry_fee,
                total_spots=total_spots,
                prize_pool=prize_pool,
                first_prize=first_prize,
                contest_type=contest_type,
                is_guaranteed=is_guaranteed,
                header_color=header_color,
            )
            self._contests[contest.id] = contest
            return contest

    # Contest entries

    def list_entries_by_contest(self, contest_id: int) -> List[ContestEntryRecord]:
        with self._lock:
            return [entry for entry in self._contest_entries.values() if entry.contest_id == contest_id]

    def list_entries_by_user(self, user_id: int) -> List[ContestEntryRecord]:
        with self._lock:
            return [entry for entry in self._contest_entries.values() if entry.user_id == user_id]

    def get_contest_entry(self, entry_id: int) -> Optional[ContestEntryRecord]:
        return self._contest_entries.get(entry_id)

    def create_contest_entry(self, *, contest_id: int, user_id: int, team_id: int) -> ContestEntryRecord:
        with self._lock:
            contest = self._contests.get(contest_id)
            if contest is None:
                raise KeyError(f"Contest {contest_id} not found")
            if contest.is_full:
                raise ContestFullError(f"Contest {contest_id} is full")
            entry = ContestEntryRecord(
                id=self._next_id("contest_entries"),
                contest_id=contest_id,
                user_id=user_id,
                team_id=team_id,
                created_at=utcnow(),
            )
            self._contest_entries[entry.id] = entry
            self._contests[contest_id] = replace(contest, filled_spots=contest.filled_spots + 1)
            return entry

    # Winners

    def list_recent_winners(self, limit: int = 10) -> List[WinnerRecord]:
        with self._lock:
            winners = sorted(self._winners.values(), key=lambda item: (item.created_at, item.id), reverse=True)
        return winners[:limit]

    def list_winners_by_user(self, user_id: int) -> List[WinnerRecord]:
        with self._lock:
            return [winner for winner in self._winners.values() if winner.user_id == user_id]

    def create_winner(
        self,
        *,
        user_id: int,
        contest_id: int,
        match_id: int,
        amount: float,
    ) -> WinnerRecord:
        with self._lock:
            winner = WinnerRecord(
                id=self._next_id("winners"),
                user_id=user_id,
                contest_id=contest_id,
                match_id=match_id,
                amount=amount,
                created_at=utcnow(),
            )
            self._winners[winner.id] = winner
            if user_id in self._users:
                self.update_user_wallet(user_id, amount)
            return winner
