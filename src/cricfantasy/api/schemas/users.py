from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import ApiModel


class UserCreate(ApiModel):
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    full_name: str = Field(..., min_length=1)


class UserResponse(ApiModel):
    id: int
    username: str
    email: str
    full_name: str
    wallet_balance: float
    total_winnings: float
    created_at: datetime


class WalletResponse(ApiModel):
    wallet_balance: float
    total_winnings: float
