"""Recommendation schema shared by the onboarding, AI and fallback paths."""

from pydantic import BaseModel, Field


class RecommendationResponse(BaseModel):
    frequency: str = Field(description="Suggested frequency label, e.g. '528Hz'")
    type: str = Field(description="Kind of meditation to try next")
    advice: str = Field(description="Short calming advice")
