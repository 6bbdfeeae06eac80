"""NormalizedProfile — the structured, immutable reading of a raw request."""

from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field

from .base import CamelModel


class _Frozen(CamelModel):
    model_config = ConfigDict(frozen=True)


class BudgetProfile(_Frozen):
    key: str
    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)
    label: str
    tier: str = Field(..., min_length=1)
    assumed: bool = False
    interpreted: bool = Field(default=False, description="Resolved by fuzzy keyword match")


class LocationProfile(_Frozen):
    type: str
    market_access: str
    foot_traffic: str
    rent_cost: str
    digital_infra: str
    competition_level: str
    assumed: bool = False
    interpreted: bool = False


class ProfileMeta(_Frozen):
    received_at: str
    has_assumed_values: bool = False
    assumptions: List[str] = Field(default_factory=list)


class NormalizedProfile(_Frozen):
    skills: str
    interests: str
    target_audience: str
    budget: BudgetProfile
    location: LocationProfile
    language: str = Field(..., description="Supported language code")
    goals: str
    local_data: str = ""
    region: str
    skill_categories: List[str] = Field(..., min_length=1)
    session_id: Optional[str] = None
    meta: ProfileMeta = Field(..., alias="_meta")
