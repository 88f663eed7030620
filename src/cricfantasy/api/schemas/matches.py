from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import ApiModel


class MatchCreate(ApiModel):
    team1: str = Field(..., min_length=1)
    team2: str = Field(..., min_length=1)
    team1_code: str = Field(..., min_length=1)
    team2_code: str = Field(..., min_length=1)
    match_type: str = Field(..., min_length=1)
    start_time: datetime
    team1_logo: str | None = None
    team2_logo: str | None = None
    tag_text: str | None = None
    tag_color: str | None = None


class MatchResponse(ApiModel):
    id: int
    team1: str
    team2: str
    team1_code: str
    team2_code: str
    team1_logo: str | None
    team2_logo: str | None
    match_type: str
    start_time: datetime
    is_live: bool
    is_completed: bool
    tag_text: str | None
    tag_color: str | None


class PlayerResponse(ApiModel):
    id: int
    name: str
    team_code: str
    role: str
    credits: float
    points: float
    selection_percentage: float
    last_match_points: float
    image_url: str | None
