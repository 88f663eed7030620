from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import ApiModel


class ContestCreate(ApiModel):
    match_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    entry_fee: float = Field(..., ge=0.0)
    total_spots: int = Field(..., ge=1)
    prize_pool: float = Field(..., ge=0.0)
    first_prize: float = Field(..., ge=0.0)
    contest_type: str = Field(..., min_length=1)
    is_guaranteed: bool = True
    header_color: str = "#d13239"


class ContestResponse(ApiModel):
    id: int
    match_id: int
    name: str
    entry_fee: float
    total_spots: int
    filled_spots: int
    prize_pool: float
    first_prize: float
    is_guaranteed: bool
    contest_type: str
    header_color: str
    spots_left: int


class JoinContestRequest(ApiModel):
    team_id: int = Field(..., ge=1)


class ContestEntryResponse(ApiModel):
    id: int
    contest_id: int
    user_id: int
    team_id: int
    rank: int | None
    points: float
    prize_won: float
    created_at: datetime


class ContestEntryDetailResponse(ContestEntryResponse):
    username: str | None = None
    team_name: str | None = None


class WinnerResponse(ApiModel):
    id: int
    user_id: int
    contest_id: int
    match_id: int
    amount: float
    created_at: datetime


class WinnerDetailResponse(WinnerResponse):
    username: str | None = None
    full_name: str | None = None
    contest_name: str | None = None
    match_details: str = ""
