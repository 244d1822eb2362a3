"""
Pydantic models for profile creation and the points ledger views.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from sleeprewards.models.sleep_log import LogTotals, SleepLogDocument


# ──────────────────────────────────────────────
# Input model (request body)
# ──────────────────────────────────────────────

class ProfileCreateRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="Opaque id from the auth provider")
    email: str = Field(default="", description="User email address")
    display_name: str = Field(default="", max_length=100)


# ──────────────────────────────────────────────
# Full profile document (as stored in MongoDB)
# ──────────────────────────────────────────────

class ProfileDocument(BaseModel):
    user_id: str
    email: str = ""
    display_name: str = ""
    total_points: int = Field(default=0, ge=0)
    redemptions: list[dict] = Field(default_factory=list)
    created_at: datetime


# ──────────────────────────────────────────────
# API response schemas
# ──────────────────────────────────────────────

class ProfileResponse(BaseModel):
    status: str          # "created" | "exists"
    user_id: str
    email: str
    display_name: str
    total_points: int


class ProfileOverview(BaseModel):
    user_id: str
    email: str
    display_name: str
    total_points: int
    totals: LogTotals
    recent_logs: list[SleepLogDocument]


class BalanceResponse(BaseModel):
    user_id: str
    total_points: int


class BalanceAudit(BaseModel):
    user_id: str
    balance: int
    earned: int
    redeemed: int
    expected: int
    drift: int
