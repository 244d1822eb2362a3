"""
Weekly summary response shape.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class NightPoint(BaseModel):
    date  : str     # "Jan 02"
    hours : float


class WeeklySummary(BaseModel):
    log_count        : int
    average_duration : float            # 0.0 when log_count == 0
    best_day         : Optional[str]    # weekday name, None when empty
    best_duration    : float
    total_points     : int
    nights           : list[NightPoint] = []
