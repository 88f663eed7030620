"""Canonical player model shared across storage and squad validation."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


PlayerRole = Literal["WK", "BAT", "AR", "BOWL"]


class PlayerRecord(BaseModel):
    """Selectable cricketer with a credit cost."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    team_code: str = Field(..., min_length=1)
    role: PlayerRole
    credits: float = Field(..., ge=0.0)
    points: float = 0.0
    selection_percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    last_match_points: float = 0.0
    image_url: Optional[str] = None

    model_config = ConfigDict(frozen=True)
