"""Input normalizer — raw request → NormalizedProfile.

Rules
-----
- Never reject for vagueness: unreadable budget / location values fall
  back to a conservative default and are recorded in `_meta.assumptions`.
- Resolution order for budget and location: exact key → fuzzy keyword
  (first hit in table order) → default.
- Text is whitespace-collapsed and length-capped to bound prompt size.
- Pure: no I/O, no randomness (apart from the receivedAt timestamp).
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Union

from ..constants import (
    BUDGET_FUZZY_KEYWORDS,
    BUDGET_RANGES,
    DEFAULT_BUDGET_KEY,
    DEFAULT_LANGUAGE,
    DEFAULT_LOCATION_TYPE,
    GENERAL_SKILL_CATEGORY,
    LANGUAGE_ALIASES,
    LOCATION_CONTEXTS,
    LOCATION_FUZZY_KEYWORDS,
    SKILL_CATEGORY_KEYWORDS,
)
from ..schemas.profile_schema import BudgetProfile, LocationProfile, NormalizedProfile, ProfileMeta
from ..schemas.request_schema import GenerateRequest

# ── Length caps ──────────────────────────────────────────────────────────

MAX_KEY_TEXT = 60
MAX_LANGUAGE = 40
MAX_SKILLS = 400
MAX_INTERESTS = 300
MAX_AUDIENCE = 200
MAX_GOALS = 300
MAX_LOCAL_DATA = 400
MAX_REGION = 80

DEFAULT_GOALS = "Build a sustainable income source"
DEFAULT_REGION = "local area"

_WS_RE = re.compile(r"\s+")


def normalize_text(value: Any, max_len: int = 600) -> str:
    """Collapse whitespace, trim, cap length. None → ""."""
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value)).strip()[:max_len]


def normalize_language(value: Any) -> str:
    raw = normalize_text(value, MAX_LANGUAGE).lower()
    return LANGUAGE_ALIASES.get(raw, DEFAULT_LANGUAGE)


def normalize_budget(value: Any) -> BudgetProfile:
    raw = normalize_text(value, MAX_KEY_TEXT).lower()

    if raw in BUDGET_RANGES:
        return BudgetProfile(key=raw, **BUDGET_RANGES[raw])

    for keyword, budget_key in BUDGET_FUZZY_KEYWORDS:
        if keyword in raw:
            return BudgetProfile(key=budget_key, interpreted=True, **BUDGET_RANGES[budget_key])

    return BudgetProfile(key=DEFAULT_BUDGET_KEY, assumed=True, **BUDGET_RANGES[DEFAULT_BUDGET_KEY])


def _location_profile(location_type: str, **flags: bool) -> LocationProfile:
    ctx = LOCATION_CONTEXTS[location_type]
    return LocationProfile(
        type=location_type,
        market_access=ctx["marketAccess"],
        foot_traffic=ctx["footTraffic"],
        rent_cost=ctx["rentCost"],
        digital_infra=ctx["digitalInfra"],
        competition_level=ctx["competitionLevel"],
        **flags,
    )


def normalize_location(value: Any) -> LocationProfile:
    raw = normalize_text(value, MAX_KEY_TEXT).lower()

    if raw in LOCATION_CONTEXTS:
        return _location_profile(raw)

    for keyword, location_type in LOCATION_FUZZY_KEYWORDS:
        if keyword in raw:
            return _location_profile(location_type, interpreted=True)

    return _location_profile(DEFAULT_LOCATION_TYPE, assumed=True)


def extract_skill_categories(skills_text: Any) -> List[str]:
    """Multi-label keyword classifier. Never returns an empty list."""
    raw = normalize_text(skills_text, MAX_SKILLS).lower()
    detected = [
        category
        for category, keywords in SKILL_CATEGORY_KEYWORDS.items()
        if any(keyword in raw for keyword in keywords)
    ]
    return detected or [GENERAL_SKILL_CATEGORY]


def _as_mapping(raw: Union[GenerateRequest, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(raw, GenerateRequest):
        return raw.model_dump(by_alias=True)
    return dict(raw)


def normalize(raw: Union[GenerateRequest, Mapping[str, Any]]) -> NormalizedProfile:
    """Turn a raw request (model or camelCase dict) into an immutable NormalizedProfile."""
    data = _as_mapping(raw)

    budget = normalize_budget(data.get("budget"))
    location = normalize_location(data.get("locationType"))

    assumptions: List[str] = []
    if budget.assumed:
        assumptions.append("budget")
    if location.assumed:
        assumptions.append("location")

    region = (
        normalize_text(data.get("region"), MAX_REGION)
        or normalize_text(data.get("locationType"), MAX_REGION)
        or DEFAULT_REGION
    )

    return NormalizedProfile(
        skills=normalize_text(data.get("skills"), MAX_SKILLS),
        interests=normalize_text(data.get("interests"), MAX_INTERESTS),
        target_audience=normalize_text(data.get("targetAudience"), MAX_AUDIENCE),
        budget=budget,
        location=location,
        language=normalize_language(data.get("language")),
        goals=normalize_text(data.get("goals"), MAX_GOALS) or DEFAULT_GOALS,
        local_data=normalize_text(data.get("localData"), MAX_LOCAL_DATA),
        region=region,
        skill_categories=extract_skill_categories(data.get("skills")),
        session_id=data.get("sessionId") or None,
        meta=ProfileMeta(
            received_at=datetime.now(timezone.utc).isoformat(),
            has_assumed_values=bool(assumptions),
            assumptions=assumptions,
        ),
    )
