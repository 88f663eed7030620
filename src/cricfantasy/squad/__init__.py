"""Team composition validation."""

from .validation import (
    SelectionError,
    SquadSelection,
    SquadValidation,
    SquadViolation,
    credits_used,
    role_counts,
    selection_violation,
    team_counts,
    validate_captains,
    validate_squad,
)

__all__ = [
    "SelectionError",
    "SquadSelection",
    "SquadValidation",
    "SquadViolation",
    "credits_used",
    "role_counts",
    "selection_violation",
    "team_counts",
    "validate_captains",
    "validate_squad",
]
