"""Pydantic models for API I/O."""

from .contests import (
    ContestCreate,
    ContestEntryDetailResponse,
    ContestEntryResponse,
    ContestResponse,
    JoinContestRequest,
    WinnerDetailResponse,
    WinnerResponse,
)
from .matches import MatchCreate, MatchResponse, PlayerResponse
from .teams import (
    SquadCheckRequest,
    SquadCheckResponse,
    TeamCreate,
    TeamPlayerCreate,
    TeamPlayerResponse,
    TeamResponse,
)
from .users import UserCreate, UserResponse, WalletResponse

__all__ = [
    "ContestCreate",
    "ContestEntryDetailResponse",
    "ContestEntryResponse",
    "ContestResponse",
    "JoinContestRequest",
    "MatchCreate",
    "MatchResponse",
    "PlayerResponse",
    "SquadCheckRequest",
    "SquadCheckResponse",
    "TeamCreate",
    "TeamPlayerCreate",
    "TeamPlayerResponse",
    "TeamResponse",
    "UserCreate",
    "UserResponse",
    "WalletResponse",
    "WinnerDetailResponse",
    "WinnerResponse",
]
