"""
Admin schemas. Field aliases keep the camelCase JSON keys the admin panel
already consumes (totalUsers, userId, ...).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AdminUserSummary(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    plan_type: str
    created_at: datetime
    is_disabled: bool

    model_config = {"from_attributes": True}


class AdminStatsResponse(BaseModel):
    total_users: int = Field(alias="totalUsers")
    pro_users: int = Field(alias="proUsers")
    total_moods: int = Field(alias="totalMoods")
    recent_users: List[AdminUserSummary] = Field(alias="recentUsers")

    model_config = {"populate_by_name": True}


class ToggleUserStatusRequest(BaseModel):
    user_id: int = Field(alias="userId")
    is_disabled: bool

    model_config = {"populate_by_name": True}
