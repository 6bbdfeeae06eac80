"""Context builder — NormalizedProfile → Context.

Enriches the profile with three deterministic lookups:
  - local economy (named region by substring, else a generic profile keyed
    by location type)
  - audience insights (persona keyword match, channels filtered by the
    location's digital infrastructure)
  - resource constraints (budget-tier table, adjusted for high rent)

No AI calls happen here. Prompt rendering lives in `prompts.py`.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Union

from ..constants import (
    AUDIENCE_PERSONAS,
    DEFAULT_PRICE_SENSITIVITY,
    DIGITAL_ONLY_CHANNELS,
    GENERIC_ECONOMY_PROFILES,
    HIGH_RENT_AFFORD,
    HIGH_RENT_AVOID,
    LOCATION_TO_ECONOMY_PROFILE,
    OFFLINE_CHANNELS,
    PRICE_SENSITIVITY_ORDER,
    REGIONAL_ECONOMY_PROFILES,
    RESOURCE_CONSTRAINTS,
    SUPPORTED_LANGUAGES,
)
from ..schemas.context_schema import (
    AudienceInsights,
    BudgetContext,
    BudgetRange,
    Context,
    ContextMetadata,
    EconomicContext,
    LocalEconomy,
    LocationContext,
    OutputPreferences,
    ResourceConstraints,
    UserProfileContext,
)
from ..schemas.profile_schema import BudgetProfile, LocationProfile, NormalizedProfile
from ..schemas.request_schema import GenerateRequest

logger = logging.getLogger(__name__)


# ── Cache key ────────────────────────────────────────────────────────────

def context_cache_key(raw: Union[GenerateRequest, Mapping[str, Any]]) -> str:
    """SHA-256 over the raw request content. sessionId is excluded so
    identical inputs from different sessions share a cached context."""
    if isinstance(raw, GenerateRequest):
        data = raw.model_dump(by_alias=True)
    else:
        data = dict(raw)
    data.pop("sessionId", None)
    canonical = json.dumps(data, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


# ── Sub-builders ─────────────────────────────────────────────────────────

def get_local_economy(region: str, location_type: str) -> LocalEconomy:
    region_lower = (region or "").lower()
    for name, profile in REGIONAL_ECONOMY_PROFILES.items():
        if name in region_lower:
            return _economy(profile, source=name)

    generic_key = LOCATION_TO_ECONOMY_PROFILE.get(location_type, "semi-urban")
    return _economy(GENERIC_ECONOMY_PROFILES[generic_key], source=generic_key)


def _economy(profile: Dict[str, Any], source: str) -> LocalEconomy:
    return LocalEconomy(
        dominant_sectors=list(profile["dominantSectors"]),
        opportunities=list(profile["opportunities"]),
        challenges=list(profile["challenges"]),
        avg_income=profile["avgIncome"],
        digital_penetration=profile["digitalPenetration"],
        source=source,
    )


def _extend_unique(target: List[str], items: Iterable[str]) -> None:
    for item in items:
        if item not in target:
            target.append(item)


def build_audience_insights(target_audience: str, location: LocationProfile) -> AudienceInsights:
    audience_lower = (target_audience or "").lower()

    personas: List[str] = []
    characteristics: List[str] = []
    channels: List[str] = []
    sensitivities: List[str] = []

    for persona, spec in AUDIENCE_PERSONAS.items():
        if any(keyword in audience_lower for keyword in spec["keywords"]):
            personas.append(persona)
            _extend_unique(characteristics, spec["characteristics"])
            _extend_unique(channels, spec["channels"])
            sensitivities.append(spec["priceSensitivity"])

    # Most price-sensitive matched persona sets the tone
    price_sensitivity = (
        max(sensitivities, key=PRICE_SENSITIVITY_ORDER.index) if sensitivities else DEFAULT_PRICE_SENSITIVITY
    )

    if location.digital_infra == "limited":
        channels = [ch for ch in channels if ch not in DIGITAL_ONLY_CHANNELS]
        _extend_unique(channels, OFFLINE_CHANNELS)

    return AudienceInsights(
        primary=target_audience,
        personas=personas,
        characteristics=characteristics,
        reach_channels=channels,
        price_sensitivity=price_sensitivity,
    )


def build_resource_constraints(budget: BudgetProfile, location: LocationProfile) -> ResourceConstraints:
    table = RESOURCE_CONSTRAINTS.get(budget.tier, RESOURCE_CONSTRAINTS["scale"])
    can_afford = list(table["canAfford"])
    should_avoid = list(table["shouldAvoid"])

    if location.rent_cost == "high":
        _extend_unique(should_avoid, HIGH_RENT_AVOID)
        _extend_unique(can_afford, HIGH_RENT_AFFORD)

    return ResourceConstraints(
        budget_tier=budget.tier,
        budget_range=BudgetRange(min=budget.min, max=budget.max),
        can_afford=can_afford,
        should_avoid=should_avoid,
        recommended_approach=table["recommendedApproach"],
    )


# ── Main builder ─────────────────────────────────────────────────────────

def build_context(profile: NormalizedProfile, flagged_topics: Iterable[str] = ()) -> Context:
    """Assemble the read-only Context handed to the AI and simulation stages."""
    budget = profile.budget
    location = profile.location

    local_economy = get_local_economy(profile.region, location.type)
    audience = build_audience_insights(profile.target_audience, location)
    constraints = build_resource_constraints(budget, location)

    context = Context(
        user_profile=UserProfileContext(
            skills=profile.skills,
            skill_categories=list(profile.skill_categories),
            interests=profile.interests,
            target_audience=profile.target_audience,
            goals=profile.goals,
        ),
        economic_context=EconomicContext(
            budget=BudgetContext(
                tier=budget.tier,
                range=BudgetRange(min=budget.min, max=budget.max),
                label=budget.label,
            ),
            location=LocationContext(
                type=location.type,
                market_access=location.market_access,
                digital_infra=location.digital_infra,
                competition_level=location.competition_level,
                rent_cost=location.rent_cost,
            ),
            local_economy=local_economy,
            additional_local_data=profile.local_data,
        ),
        audience_insights=audience,
        resource_constraints=constraints,
        output_preferences=OutputPreferences(
            language=profile.language,
            language_name=SUPPORTED_LANGUAGES[profile.language],
            region=profile.region,
        ),
        metadata=ContextMetadata(
            built_at=datetime.now(timezone.utc).isoformat(),
            has_assumed_values=profile.meta.has_assumed_values,
            assumptions=list(profile.meta.assumptions),
            flagged_topics=list(flagged_topics),
        ),
    )

    logger.info(
        "[CONTEXT] Built context tier=%s location=%s economy=%s personas=%s",
        budget.tier,
        location.type,
        local_economy.source,
        audience.personas or "none",
    )
    return context
