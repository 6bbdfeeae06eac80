"""Context — the enriched, read-only object handed to the AI and simulation stages."""

from __future__ import annotations

from typing import List

from pydantic import ConfigDict, Field

from .base import CamelModel


class _Frozen(CamelModel):
    model_config = ConfigDict(frozen=True)


class UserProfileContext(_Frozen):
    skills: str
    skill_categories: List[str]
    interests: str
    target_audience: str
    goals: str


class BudgetRange(_Frozen):
    min: int
    max: int


class BudgetContext(_Frozen):
    tier: str
    range: BudgetRange
    label: str


class LocationContext(_Frozen):
    type: str
    market_access: str
    digital_infra: str
    competition_level: str
    rent_cost: str


class LocalEconomy(_Frozen):
    dominant_sectors: List[str]
    opportunities: List[str]
    challenges: List[str]
    avg_income: str
    digital_penetration: str
    source: str = Field(..., description="Region name or generic profile key")


class EconomicContext(_Frozen):
    budget: BudgetContext
    location: LocationContext
    local_economy: LocalEconomy
    additional_local_data: str = ""


class AudienceInsights(_Frozen):
    primary: str
    personas: List[str] = Field(default_factory=list)
    characteristics: List[str] = Field(default_factory=list)
    reach_channels: List[str] = Field(default_factory=list)
    price_sensitivity: str = "moderate"


class ResourceConstraints(_Frozen):
    budget_tier: str
    budget_range: BudgetRange
    can_afford: List[str]
    should_avoid: List[str]
    recommended_approach: str


class OutputPreferences(_Frozen):
    language: str
    language_name: str
    region: str


class ContextMetadata(_Frozen):
    built_at: str
    has_assumed_values: bool = False
    assumptions: List[str] = Field(default_factory=list)
    flagged_topics: List[str] = Field(default_factory=list)


class Context(_Frozen):
    user_profile: UserProfileContext
    economic_context: EconomicContext
    audience_insights: AudienceInsights
    resource_constraints: ResourceConstraints
    output_preferences: OutputPreferences
    metadata: ContextMetadata
