"""Squad-building rules for supported match formats."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Tuple


ROLES: Tuple[str, ...] = ("WK", "BAT", "AR", "BOWL")

ROLE_LABELS: Mapping[str, str] = {
    "WK": "wicketkeepers",
    "BAT": "batsmen",
    "AR": "all-rounders",
    "BOWL": "bowlers",
}


@dataclass(frozen=True)
class RoleBounds:
    minimum: int
    maximum: int


@dataclass(frozen=True)
class SquadRules:
    match_type: str
    squad_size: int
    credit_cap: Decimal
    role_bounds: Mapping[str, RoleBounds]
    team_max_players: int

    def bounds_for(self, role: str) -> RoleBounds:
        try:
            return self.role_bounds[role]
        except KeyError:
            raise KeyError(f"Unknown player role {role!r}") from None

    def describe(self) -> str:
        parts = [
            f"{bounds.minimum}-{bounds.maximum} {role}"
            for role, bounds in self.role_bounds.items()
        ]
        return ", ".join(parts)


_DEFAULT_BOUNDS: Mapping[str, RoleBounds] = {
    "WK": RoleBounds(1, 4),
    "BAT": RoleBounds(3, 6),
    "AR": RoleBounds(1, 4),
    "BOWL": RoleBounds(3, 6),
}

_SQUAD_RULES: Dict[str, SquadRules] = {
    match_type: SquadRules(
        match_type=match_type,
        squad_size=11,
        credit_cap=Decimal("100"),
        role_bounds=_DEFAULT_BOUNDS,
        team_max_players=7,
    )
    for match_type in ("T20", "IPL", "ODI", "TEST")
}

DEFAULT_MATCH_TYPE = "T20"


def iter_rules() -> Iterable[SquadRules]:
    """Return an iterator of all configured rule sets."""

    return _SQUAD_RULES.values()


def get_rules(match_type: str | None = None) -> SquadRules:
    """Fetch rules for a match type, raising KeyError if missing."""

    key = (match_type or DEFAULT_MATCH_TYPE).upper()
    if key not in _SQUAD_RULES:
        raise KeyError(f"No squad rules configured for match_type={match_type!r}")
    return _SQUAD_RULES[key]
