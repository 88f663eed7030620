from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import Field

from .base import ApiModel


class TeamCreate(ApiModel):
    name: str = Field(..., min_length=1)
    match_id: int = Field(..., ge=1)
    captain_id: int = Field(..., ge=1)
    vice_captain_id: int = Field(..., ge=1)
    player_ids: List[int] | None = None


class TeamResponse(ApiModel):
    id: int
    user_id: int
    name: str
    match_id: int
    total_points: float
    captain_id: int
    vice_captain_id: int
    created_at: datetime


class TeamPlayerCreate(ApiModel):
    player_id: int = Field(..., ge=1)


class TeamPlayerResponse(ApiModel):
    id: int
    team_id: int
    player_id: int


class SquadCheckRequest(ApiModel):
    player_ids: List[int]
    match_id: int | None = None


class SquadCheckResponse(ApiModel):
    valid: bool
    code: str | None = None
    message: str | None = None
    role_counts: Dict[str, int]
    team_counts: Dict[str, int]
    credits_used: float
