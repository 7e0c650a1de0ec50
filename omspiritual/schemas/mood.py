"""
OM Spiritual Backend - Mood Journal Schemas
============================================

What:  Payload for logging a session and the history item shape.

Validation policy (enforced here, before anything reaches the database):
    rating               integer 1-5 inclusive
    meditation_duration  integer minutes 0-1440 inclusive (0 = mood only)
    note                 optional, at most 2000 characters
    frequency            optional label such as "528Hz", at most 50 characters

Out-of-range values produce HTTP 400 with error "validation_error".
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

MIN_RATING = 1
MAX_RATING = 5
MAX_DURATION_MINUTES = 1440


class MoodCreate(BaseModel):
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING, description="Mood rating, 1 (low) to 5 (great)")
    note: Optional[str] = Field(default=None, max_length=2000)
    meditation_duration: int = Field(
        default=0,
        ge=0,
        le=MAX_DURATION_MINUTES,
        description="Session length in minutes",
    )
    frequency: Optional[str] = Field(default=None, max_length=50)


class MoodResponse(BaseModel):
    id: int
    user_id: int
    rating: int
    note: Optional[str] = None
    meditation_duration: int
    frequency: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
