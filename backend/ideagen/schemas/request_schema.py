"""Request bodies for the public endpoints.

Validation here is deliberately loose: the normalizer interprets vague
values instead of rejecting them, so only presence and bounded size are
enforced at the edge.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import ConfigDict, Field

from .base import CamelModel


class GenerateRequest(CamelModel):
    """Request body for POST /generate."""

    skills: str = Field(..., min_length=2, max_length=2000, description="What the user can do")
    interests: str = Field(..., min_length=2, max_length=2000)
    budget: str = Field(..., min_length=1, max_length=200, description="Budget bucket key or free text")
    location_type: str = Field(..., min_length=1, max_length=200, description="Location type key or free text")
    target_audience: str = Field(..., min_length=2, max_length=1000)

    goals: str = Field(default="", max_length=2000)
    local_data: str = Field(default="", max_length=2000)
    region: str = Field(default="", max_length=200)
    language: str = Field(default="English", max_length=40)
    session_id: Optional[str] = Field(default=None, max_length=128)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "skills": "teaching, cooking",
                "interests": "food, kids",
                "budget": "under-1k",
                "locationType": "rural",
                "targetAudience": "local families",
            }
        }
    )


class FeedbackRequest(CamelModel):
    """Thumbs up/down on a generated result."""

    session_id: str = Field(..., min_length=3, max_length=128)
    rating: Literal["up", "down"]
    notes: str = Field(default="", max_length=1000)
    result_id: Optional[str] = Field(default=None, max_length=128)
    idea_index: Optional[int] = Field(default=None, ge=0, le=4)
