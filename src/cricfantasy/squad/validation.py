"""Squad composition rules applied to complete and partial selections."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from cricfantasy.config.squad import ROLE_LABELS, ROLES, SquadRules, get_rules
from cricfantasy.models import PlayerRecord


@dataclass(frozen=True)
class SquadViolation:
    code: str
    message: str


@dataclass(frozen=True)
class SquadValidation:
    violation: Optional[SquadViolation]
    role_counts: Mapping[str, int]
    team_counts: Mapping[str, int]
    credits_used: Decimal

    @property
    def valid(self) -> bool:
        return self.violation is None


class SelectionError(ValueError):
    def __init__(self, violation: SquadViolation):
        super().__init__(violation.message)
        self.violation = violation


def _credits(player: PlayerRecord) -> Decimal:
    # str() keeps 9.5 and 8.3 exact instead of inheriting binary float error.
    return Decimal(str(player.credits))


def credits_used(players: Iterable[PlayerRecord]) -> Decimal:
    return sum((_credits(player) for player in players), Decimal("0"))


def role_counts(players: Iterable[PlayerRecord]) -> Dict[str, int]:
    counts = Counter(player.role for player in players)
    return {role: counts.get(role, 0) for role in ROLES}


def team_counts(players: Iterable[PlayerRecord]) -> Dict[str, int]:
    return dict(Counter(player.team_code for player in players))


def _format_credits(value: Decimal) -> str:
    return f"{value.normalize():f}"


def validate_squad(players: Sequence[PlayerRecord], rules: SquadRules | None = None) -> SquadValidation:
    """Check a finished squad and report the first rule it breaks.

    Rules are applied in order: squad size (with distinct players), role
    bounds, credit cap, then the per-team limit.
    """

    rules = rules or get_rules()
    roles = role_counts(players)
    teams = team_counts(players)
    used = credits_used(players)

    def result(violation: Optional[SquadViolation]) -> SquadValidation:
        return SquadValidation(violation=violation, role_counts=roles, team_counts=teams, credits_used=used)

    if len(players) != rules.squad_size:
        return result(
            SquadViolation(
                "squad_size",
                f"A team needs exactly {rules.squad_size} players, got {len(players)}",
            )
        )
    if len({player.id for player in players}) != len(players):
        return result(SquadViolation("duplicate_player", "A player can only be picked once"))

    for role in ROLES:
        bounds = rules.bounds_for(role)
        count = roles[role]
        if count > bounds.maximum:
            return result(
                SquadViolation("role_max", f"Maximum {bounds.maximum} {ROLE_LABELS[role]} allowed, got {count}")
            )
        if count < bounds.minimum:
            return result(
                SquadViolation("role_min", f"Minimum {bounds.minimum} {ROLE_LABELS[role]} required, got {count}")
            )

    if used > rules.credit_cap:
        return result(
            SquadViolation(
                "credit_cap",
                f"Team uses {_format_credits(used)} credits, limit is {_format_credits(rules.credit_cap)}",
            )
        )

    for team_code, count in teams.items():
        if count > rules.team_max_players:
            return result(
                SquadViolation(
                    "team_limit",
                    f"Maximum {rules.team_max_players} players from one team, got {count} from {team_code}",
                )
            )

    return result(None)


def validate_captains(
    player_ids: Iterable[int],
    captain_id: Optional[int],
    vice_captain_id: Optional[int],
) -> Optional[SquadViolation]:
    if captain_id is None or vice_captain_id is None:
        return SquadViolation("captain_missing", "Please select both Captain and Vice Captain")
    if captain_id == vice_captain_id:
        return SquadViolation("captain_duplicate", "Captain and Vice Captain must be different players")
    members = set(player_ids)
    if captain_id not in members:
        return SquadViolation("captain_not_in_team", f"Captain {captain_id} is not part of the team")
    if vice_captain_id not in members:
        return SquadViolation("vice_captain_not_in_team", f"Vice Captain {vice_captain_id} is not part of the team")
    return None


def selection_violation(
    selection: Sequence[PlayerRecord],
    candidate: PlayerRecord,
    rules: SquadRules | None = None,
) -> Optional[SquadViolation]:
    """Return why ``candidate`` cannot join the partial ``selection``, if anything."""

    rules = rules or get_rules()
    if len(selection) >= rules.squad_size:
        return SquadViolation("squad_full", f"You cannot select more than {rules.squad_size} players")
    if any(player.id == candidate.id for player in selection):
        return SquadViolation("already_selected", f"{candidate.name} is already in the team")

    bounds = rules.bounds_for(candidate.role)
    if role_counts(selection)[candidate.role] >= bounds.maximum:
        return SquadViolation(
            "role_max",
            f"Position limit reached: maximum {bounds.maximum} {ROLE_LABELS[candidate.role]}",
        )

    remaining = rules.credit_cap - credits_used(selection)
    if _credits(candidate) > remaining:
        return SquadViolation(
            "credit_cap",
            f"Not enough credits: {candidate.name} costs {candidate.credits}, {_format_credits(remaining)} left",
        )

    if team_counts(selection).get(candidate.team_code, 0) >= rules.team_max_players:
        return SquadViolation(
            "team_limit",
            f"Maximum {rules.team_max_players} players from one team",
        )

    # The slots left after this pick must still cover every role minimum.
    counts = role_counts([*selection, candidate])
    open_slots = rules.squad_size - (len(selection) + 1)
    shortfalls = {role: max(0, rules.bounds_for(role).minimum - counts[role]) for role in ROLES}
    if sum(shortfalls.values()) > open_slots:
        short_role = next(role for role in ROLES if shortfalls[role])
        return SquadViolation(
            "role_min",
            f"Minimum {rules.bounds_for(short_role).minimum} {ROLE_LABELS[short_role]} required, "
            f"not enough slots left after {candidate.name}",
        )
    return None


@dataclass
class SquadSelection:
    """Squad under construction, enforcing the rules on every pick."""

    rules: SquadRules = field(default_factory=get_rules)
    players: List[PlayerRecord] = field(default_factory=list)
    captain_id: Optional[int] = None
    vice_captain_id: Optional[int] = None

    def can_select(self, player: PlayerRecord) -> bool:
        return selection_violation(self.players, player, self.rules) is None

    def add(self, player: PlayerRecord) -> None:
        violation = selection_violation(self.players, player, self.rules)
        if violation is not None:
            raise SelectionError(violation)
        self.players.append(player)

    def remove(self, player_id: int) -> None:
        self.players = [player for player in self.players if player.id != player_id]
        if self.captain_id == player_id:
            self.captain_id = None
        if self.vice_captain_id == player_id:
            self.vice_captain_id = None

    def _require_member(self, player_id: int) -> None:
        if player_id not in self.player_ids:
            raise SelectionError(SquadViolation("not_selected", f"Player {player_id} is not in the team"))

    def set_captain(self, player_id: int) -> None:
        self._require_member(player_id)
        if self.vice_captain_id == player_id:
            self.vice_captain_id = None
        self.captain_id = player_id

    def set_vice_captain(self, player_id: int) -> None:
        self._require_member(player_id)
        if self.captain_id == player_id:
            self.captain_id = None
        self.vice_captain_id = player_id

    @property
    def player_ids(self) -> List[int]:
        return [player.id for player in self.players]

    @property
    def remaining_credits(self) -> Decimal:
        return self.rules.credit_cap - credits_used(self.players)

    @property
    def role_counts(self) -> Dict[str, int]:
        return role_counts(self.players)

    @property
    def team_counts(self) -> Dict[str, int]:
        return team_counts(self.players)

    @property
    def is_complete(self) -> bool:
        return len(self.players) == self.rules.squad_size

    def validate(self) -> SquadValidation:
        return validate_squad(self.players, self.rules)

    def captain_violation(self) -> Optional[SquadViolation]:
        return validate_captains(self.player_ids, self.captain_id, self.vice_captain_id)
