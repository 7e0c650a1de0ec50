"""Chant catalog schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ChantResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    frequency: Optional[str] = None
    audio_url: Optional[str] = None
    category: Optional[str] = None
    is_premium: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ChantCreate(BaseModel):
    """Admin payload for POST /api/admin/chants. `is_premium` defaults to false."""
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    frequency: Optional[str] = Field(default=None, max_length=50)
    audio_url: Optional[str] = Field(default=None, max_length=1024)
    category: Optional[str] = Field(default="General", max_length=100)
    is_premium: bool = Field(default=False)
