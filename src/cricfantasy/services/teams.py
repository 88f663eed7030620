"""Fantasy team creation and lookups."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from cricfantasy.config import SquadRules, get_rules
from cricfantasy.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationFailedError
from cricfantasy.models import PlayerRecord
from cricfantasy.persistence import FantasyStore, MatchRecord, TeamPlayerRecord, TeamRecord
from cricfantasy.squad import SquadValidation, selection_violation, validate_captains, validate_squad

from .locks import KeyedLocks


logger = logging.getLogger("uvicorn.error")


def rules_for_match(match: MatchRecord) -> SquadRules:
    try:
        return get_rules(match.match_type)
    except KeyError:
        return get_rules()


class TeamService:
    def __init__(self, store: FantasyStore):
        self.store = store
        self._team_locks = KeyedLocks()

    def _require_match(self, match_id: int) -> MatchRecord:
        match = self.store.get_match(match_id)
        if match is None:
            raise NotFoundError("Match not found")
        return match

    def _require_player(self, player_id: int) -> PlayerRecord:
        player = self.store.get_player(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found")
        return player

    def get_owned_team(self, *, user_id: int, team_id: int) -> TeamRecord:
        team = self.store.get_team(team_id)
        if team is None:
            raise NotFoundError("Team not found")
        if team.user_id != user_id:
            raise ForbiddenError("Forbidden")
        return team

    def team_players(self, *, user_id: int, team_id: int) -> List[PlayerRecord]:
        self.get_owned_team(user_id=user_id, team_id=team_id)
        return self.store.list_team_players(team_id)

    def teams_for_user(self, *, requesting_user_id: int, user_id: int) -> List[TeamRecord]:
        if requesting_user_id != user_id:
            raise ForbiddenError("Forbidden")
        return self.store.list_teams_by_user(user_id)

    def teams_for_match(self, *, user_id: int, match_id: int) -> List[TeamRecord]:
        return [team for team in self.store.list_teams_by_user(user_id) if team.match_id == match_id]

    def check_squad(self, player_ids: Sequence[int], *, match_id: Optional[int] = None) -> SquadValidation:
        """Validate a proposed squad without storing anything."""

        players = [self._require_player(player_id) for player_id in player_ids]
        rules = get_rules()
        if match_id is not None:
            match = self._require_match(match_id)
            self._require_eligible(match, players)
            rules = rules_for_match(match)
        return validate_squad(players, rules)

    @staticmethod
    def _require_eligible(match: MatchRecord, players: Sequence[PlayerRecord]) -> None:
        for player in players:
            if not match.involves(player.team_code):
                raise InvalidStateError(f"{player.name} does not play in {match.display}")

    def create_team(
        self,
        *,
        user_id: int,
        name: str,
        match_id: int,
        captain_id: int,
        vice_captain_id: int,
        player_ids: Optional[Sequence[int]] = None,
    ) -> TeamRecord:
        """Create a team, optionally with its full squad in one step.

        With ``player_ids`` the squad and captaincy are validated before
        anything is stored. Without it the players are linked one at a time
        through :meth:`add_player`.
        """

        match = self._require_match(match_id)
        if captain_id == vice_captain_id:
            raise ValidationFailedError("Captain and Vice Captain must be different players")

        if player_ids is not None:
            players = [self._require_player(player_id) for player_id in player_ids]
            self._require_eligible(match, players)
            validation = validate_squad(players, rules_for_match(match))
            if not validation.valid:
                raise InvalidStateError(validation.violation.message)
            violation = validate_captains(player_ids, captain_id, vice_captain_id)
            if violation is not None:
                raise InvalidStateError(violation.message)

        team = self.store.create_team(
            user_id=user_id,
            name=name,
            match_id=match_id,
            captain_id=captain_id,
            vice_captain_id=vice_captain_id,
            player_ids=tuple(player_ids or ()),
        )
        logger.info(
            "User %s created team %s for match %s with %s players",
            user_id,
            team.id,
            match_id,
            len(player_ids or ()),
        )
        return team

    def add_player(self, *, user_id: int, team_id: int, player_id: int) -> TeamPlayerRecord:
        with self._team_locks(team_id):
            team = self.get_owned_team(user_id=user_id, team_id=team_id)
            player = self._require_player(player_id)
            match = self._require_match(team.match_id)
            self._require_eligible(match, [player])
            current = self.store.list_team_players(team_id)
            violation = selection_violation(current, player, rules_for_match(match))
            if violation is not None:
                raise InvalidStateError(violation.message)
            return self.store.add_player_to_team(team_id=team_id, player_id=player_id)
