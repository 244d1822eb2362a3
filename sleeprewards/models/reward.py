"""
Pydantic models for the reward catalog and redemption records.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RewardCatalogItem(BaseModel):
    reward_id   : str
    name        : str
    description : str = ""
    icon        : str = ""
    points_cost : int = Field(..., gt=0)


class RedemptionRecord(BaseModel):
    """Embedded in the profile document; written in the same update as the debit."""
    redemption_id : str
    reward_id     : str
    reward_name   : str
    points_cost   : int = Field(..., gt=0)
    redeemed_at   : datetime


class RedemptionView(RedemptionRecord):
    icon : Optional[str] = None


class RedemptionResponse(BaseModel):
    status       : str       # "redeemed"
    redemption   : RedemptionRecord
    total_points : int
