"""Configuration helpers for squad rules and runtime settings."""

from .settings import Settings
from .squad import ROLES, RoleBounds, SquadRules, get_rules, iter_rules

__all__ = [
    "ROLES",
    "RoleBounds",
    "Settings",
    "SquadRules",
    "get_rules",
    "iter_rules",
]
