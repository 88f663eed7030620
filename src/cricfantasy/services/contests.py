"""Contest entry, wallet adjustments, payouts and leaderboards."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from cricfantasy.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationFailedError
from cricfantasy.persistence import (
    ContestEntryRecord,
    ContestFullError,
    ContestRecord,
    FantasyStore,
    InsufficientBalanceError,
    TeamRecord,
    UserRecord,
    WinnerRecord,
)
from cricfantasy.squad import validate_captains, validate_squad

from .locks import KeyedLocks
from .teams import rules_for_match


logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class EntryDetail:
    entry: ContestEntryRecord
    username: Optional[str]
    team_name: Optional[str]


@dataclass(frozen=True)
class WinnerDetail:
    winner: WinnerRecord
    username: Optional[str]
    full_name: Optional[str]
    contest_name: Optional[str]
    match_details: str


def _leaderboard_key(detail: EntryDetail) -> tuple:
    entry = detail.entry
    # Ranked entries first in rank order, the rest by points.
    return (entry.rank is None, entry.rank or 0, -entry.points, entry.id)


class ContestService:
    def __init__(self, store: FantasyStore, *, user_locks: KeyedLocks | None = None):
        self.store = store
        self._contest_locks = KeyedLocks()
        self._user_locks = user_locks or KeyedLocks()

    def _require_contest(self, contest_id: int) -> ContestRecord:
        contest = self.store.get_contest(contest_id)
        if contest is None:
            raise NotFoundError("Contest not found")
        return contest

    def get_contest(self, contest_id: int) -> ContestRecord:
        return self._require_contest(contest_id)

    def contests_for_match(self, match_id: int) -> List[ContestRecord]:
        return self.store.list_contests_by_match(match_id)

    def contests_for_user(self, user_id: int) -> List[ContestRecord]:
        return self.store.list_contests_by_user(user_id)

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
        if self.store.get_match(match_id) is None:
            raise NotFoundError("Match not found")
        if entry_fee < 0:
            raise ValidationFailedError("Entry fee cannot be negative")
        if total_spots < 1:
            raise ValidationFailedError("A contest needs at least one spot")
        contest = self.store.create_contest(
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
        logger.info("Created contest %s for match %s (%s spots)", contest.id, match_id, total_spots)
        return contest

    def _require_complete_team(self, team: TeamRecord) -> None:
        match = self.store.get_match(team.match_id)
        if match is None:
            raise NotFoundError("Match not found")
        players = self.store.list_team_players(team.id)
        for player in players:
            if not match.involves(player.team_code):
                raise InvalidStateError(f"{player.name} does not play in {match.display}")
        validation = validate_squad(players, rules_for_match(match))
        if not validation.valid:
            raise InvalidStateError(validation.violation.message)
        violation = validate_captains([player.id for player in players], team.captain_id, team.vice_captain_id)
        if violation is not None:
            raise InvalidStateError(violation.message)

    def join_contest(self, *, user_id: int, contest_id: int, team_id: int) -> ContestEntryRecord:
        """Enter ``team_id`` into a contest, charging the entry fee.

        Every check runs again here, under the contest lock and then the
        user lock, so concurrent joins can neither overfill the contest nor
        spend the same balance twice. The team must hold a complete squad
        for the contest's match, with its captain and vice-captain among the
        selected players. A failure after the debit restores the wallet
        before the error propagates.
        """

        with self._contest_locks(contest_id), self._user_locks(user_id):
            contest = self._require_contest(contest_id)
            team = self.store.get_team(team_id)
            if team is None:
                raise NotFoundError("Team not found")
            if team.user_id != user_id:
                raise ForbiddenError("Team does not belong to user")
            if team.match_id != contest.match_id:
                raise InvalidStateError("Team is not for this match")
            self._require_complete_team(team)
            user = self.store.get_user(user_id)
            if user is None:
                raise NotFoundError("User not found")
            if user.wallet_balance < contest.entry_fee:
                logger.info(
                    "Rejected join: user %s balance %.2f below entry fee %.2f for contest %s",
                    user_id,
                    user.wallet_balance,
                    contest.entry_fee,
                    contest_id,
                )
                raise InvalidStateError("Insufficient wallet balance")
            if contest.is_full:
                logger.info("Rejected join: contest %s is full (%s spots)", contest_id, contest.total_spots)
                raise InvalidStateError("Contest is full")

            try:
                self.store.update_user_wallet(user_id, -contest.entry_fee, min_balance=0.0)
            except InsufficientBalanceError as exc:
                # Another process sharing the database spent the balance first.
                raise InvalidStateError("Insufficient wallet balance") from exc
            try:
                entry = self.store.create_contest_entry(contest_id=contest_id, user_id=user_id, team_id=team_id)
            except Exception as exc:
                self.store.restore_user(user)
                logger.warning("Join for contest %s failed after debit; wallet restored: %s", contest_id, exc)
                if isinstance(exc, ContestFullError):
                    raise InvalidStateError("Contest is full") from exc
                raise

        logger.info(
            "User %s joined contest %s with team %s (fee %.2f, entry %s)",
            user_id,
            contest_id,
            team_id,
            contest.entry_fee,
            entry.id,
        )
        return entry

    def adjust_wallet(self, user_id: int, amount: float) -> UserRecord:
        """Apply a signed wallet delta; only positive deltas count as winnings."""

        with self._user_locks(user_id):
            try:
                return self.store.update_user_wallet(user_id, amount)
            except KeyError as exc:
                raise NotFoundError("User not found") from exc

    def record_winner(
        self,
        *,
        user_id: int,
        contest_id: int,
        amount: float,
        match_id: Optional[int] = None,
    ) -> WinnerRecord:
        if amount <= 0:
            raise ValidationFailedError("Winning amount must be positive")
        contest = self._require_contest(contest_id)
        with self._user_locks(user_id):
            if self.store.get_user(user_id) is None:
                raise NotFoundError("User not found")
            winner = self.store.create_winner(
                user_id=user_id,
                contest_id=contest_id,
                match_id=contest.match_id if match_id is None else match_id,
                amount=amount,
            )
        logger.info("Paid %.2f to user %s for contest %s", amount, user_id, contest_id)
        return winner

    def entries(self, contest_id: int) -> List[EntryDetail]:
        self._require_contest(contest_id)
        details: List[EntryDetail] = []
        for entry in self.store.list_entries_by_contest(contest_id):
            user = self.store.get_user(entry.user_id)
            team = self.store.get_team(entry.team_id)
            details.append(
                EntryDetail(
                    entry=entry,
                    username=user.username if user else None,
                    team_name=team.name if team else None,
                )
            )
        return details

    def leaderboard(self, contest_id: int) -> List[EntryDetail]:
        return sorted(self.entries(contest_id), key=_leaderboard_key)

    def recent_winners(self, limit: int = 10) -> List[WinnerDetail]:
        details: List[WinnerDetail] = []
        for winner in self.store.list_recent_winners(limit):
            user = self.store.get_user(winner.user_id)
            contest = self.store.get_contest(winner.contest_id)
            match = self.store.get_match(winner.match_id)
            details.append(
                WinnerDetail(
                    winner=winner,
                    username=user.username if user else None,
                    full_name=user.full_name if user else None,
                    contest_name=contest.name if contest else None,
                    match_details=match.display if match else "",
                )
            )
        return details

    def winners_for_user(self, user_id: int) -> List[WinnerRecord]:
        return self.store.list_winners_by_user(user_id)
