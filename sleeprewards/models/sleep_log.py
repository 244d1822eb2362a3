"""
Pydantic models for sleep log endpoints and the stored sleep_logs document.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ── Request ──────────────────────────────────────────────────────────────────

class SleepLogRequest(BaseModel):
    """
    Both times are required. ISO-8601 with or without an offset;
    naive values (HTML datetime-local, e.g. "2024-01-01T23:00") are read
    in the configured day-boundary timezone.
    """
    sleep_time : Optional[str] = Field(None, description="When the user fell asleep")
    wake_time  : Optional[str] = Field(None, description="When the user woke up")


# ── Stored document ──────────────────────────────────────────────────────────

class SleepLogDocument(BaseModel):
    log_id         : str
    user_id        : str
    day            : str       = Field(..., description="YYYY-MM-DD request day bucket")
    sleep_time     : datetime
    wake_time      : datetime
    duration_hours : float     = Field(..., ge=0)
    points_earned  : int       = Field(..., ge=0)
    created_at     : datetime


# ── Responses ────────────────────────────────────────────────────────────────

class SleepLogResponse(BaseModel):
    status         : str       # "logged"
    log            : SleepLogDocument
    total_points   : int


class LogTotals(BaseModel):
    total_logs  : int   = 0
    total_hours : float = 0.0
