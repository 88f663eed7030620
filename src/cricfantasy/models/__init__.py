"""Domain models shared across storage, validation and API layers."""

from .player import PlayerRecord, PlayerRole

__all__ = ["PlayerRecord", "PlayerRole"]
