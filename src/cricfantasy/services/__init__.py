"""Business operations layered over a store."""

from .accounts import AccountService
from .contests import ContestService, EntryDetail, WinnerDetail
from .locks import KeyedLocks
from .teams import TeamService, rules_for_match

__all__ = [
    "AccountService",
    "ContestService",
    "EntryDetail",
    "KeyedLocks",
    "TeamService",
    "WinnerDetail",
    "rules_for_match",
]
