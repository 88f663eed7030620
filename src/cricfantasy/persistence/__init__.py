"""Persistence layer for users, players, matches, teams and contests."""

from __future__ import annotations

from cricfantasy.config import Settings

from .base import ContestFullError, FantasyStore, InsufficientBalanceError
from .memory import MemoryStore
from .records import (
    ContestEntryRecord,
    ContestRecord,
    MatchRecord,
    TeamPlayerRecord,
    TeamRecord,
    UserRecord,
    WinnerRecord,
)
from .seed import seed_demo_data
from .sqlite import SqliteStore


def open_store(settings: Settings) -> FantasyStore:
    """Build the configured backend, seeding it when it starts out empty."""

    store: FantasyStore
    if settings.db_path:
        store = SqliteStore(settings.db_path, starting_balance=settings.starting_balance)
    else:
        store = MemoryStore(starting_balance=settings.starting_balance)
    if settings.seed_demo_data and not store.list_matches():
        seed_demo_data(store)
    return store


__all__ = [
    "ContestEntryRecord",
    "ContestFullError",
    "ContestRecord",
    "FantasyStore",
    "InsufficientBalanceError",
    "MatchRecord",
    "MemoryStore",
    "SqliteStore",
    "TeamPlayerRecord",
    "TeamRecord",
    "UserRecord",
    "WinnerRecord",
    "open_store",
    "seed_demo_data",
]
