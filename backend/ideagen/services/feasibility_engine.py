"""Feasibility & simulation engine — deterministic post-processing of AI output.

Rules
-----
- Pure: no I/O, no randomness, never mutates its inputs.
- Scores are realigned to [market, execution, capital, risk] before any
  positional logic; a set that cannot be realigned is rejected.
- All scores end as integers in [0, 100].
- Revenue never exceeds REVENUE_CEILING_MULTIPLE × budget ceiling;
  min ≤ max for revenue and profit; a disclaimer is always attached.
- A micro budget is never rated "excellent".

Coefficients below are tunable, not load-bearing.
"""

from __future__ import annotations

import copy
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..constants import (
    CAPITAL_FLOOR_MICRO,
    GENERAL_SKILL_CATEGORY,
    MARKET_CAP_LOW_ACCESS,
    PROFIT_MARGIN_MAX,
    PROFIT_MARGIN_MIN,
    REVENUE_CEILING_MULTIPLE,
    REVENUE_DISCLAIMER,
    REVENUE_MULTIPLIERS,
    ROADMAP_PHASES,
    SCORE_ORDER,
)
from ..schemas.context_schema import Context
from .errors import SimulationInputError

logger = logging.getLogger(__name__)

# ── Score deltas ─────────────────────────────────────────────────────────

LOW_MARKET_ACCESS = ("low", "very-low")
HIGH_COMPETITION_PENALTY = 10
SKILL_BREADTH_BONUS = 5
LIMITED_INFRA_EXECUTION_PENALTY = 10
ASSUMED_VALUES_RISK_PENALTY = 10

# ── Ease-of-execution deltas and thresholds ─────────────────────────────

EASE_SKILL_BONUS = 10
EASE_STRONG_INFRA_BONUS = 10
EASE_LIMITED_INFRA_PENALTY = 15
EASE_THRESHOLDS = ((75, "easy"), (55, "moderate"), (35, "challenging"))

# ── Confidence ──────────────────────────────────────────────────────────

CONFIDENCE_BASE = 50
CONFIDENCE_HIGH = 70
CONFIDENCE_MEDIUM = 45


def _to_number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def clamp_score(value: Any) -> int:
    """Round and clamp to an integer in [0, 100]. Non-numeric → 0."""
    return int(min(100, max(0, round(_to_number(value)))))


# ---------------------------------------------------------------------------
# Structural checks and corrections
# ---------------------------------------------------------------------------
def enforce_score_order(scores: Iterable[Dict[str, Any]]) -> bool:
    keys = [score.get("iconKey") for score in scores if isinstance(score, dict)]
    return keys == SCORE_ORDER


def enforce_roadmap_phases(roadmap: Iterable[Dict[str, Any]]) -> bool:
    phases = [step.get("phase") for step in roadmap if isinstance(step, dict)]
    return phases == ROADMAP_PHASES


def realign_scores(scores: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Reorder into the fixed category order.

    Only possible when exactly the four categories are present, once each;
    anything else raises SimulationInputError.
    """
    if not isinstance(scores, list) or not all(isinstance(s, dict) for s in scores):
        raise SimulationInputError("feasibilityScores must be a list of objects")
    by_key = {score.get("iconKey"): score for score in scores}
    if len(scores) != len(SCORE_ORDER) or set(by_key) != set(SCORE_ORDER):
        raise SimulationInputError(
            f"Cannot realign feasibilityScores with keys {[s.get('iconKey') for s in scores]}"
        )
    return [by_key[key] for key in SCORE_ORDER]


def relabel_roadmap(roadmap: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Renumber a 4-step roadmap as Phase 1..4. Other lengths are returned unchanged."""
    if not isinstance(roadmap, list) or len(roadmap) != len(ROADMAP_PHASES):
        return roadmap
    if not all(isinstance(step, dict) for step in roadmap):
        return roadmap
    return [{**step, "phase": phase} for step, phase in zip(roadmap, ROADMAP_PHASES)]


# ---------------------------------------------------------------------------
# Confidence and score adjustment
# ---------------------------------------------------------------------------
def calculate_confidence(context: Context) -> str:
    score = CONFIDENCE_BASE

    if context.economic_context.additional_local_data:
        score += 10
    if len(context.user_profile.skill_categories) > 1:
        score += 10
    if not context.metadata.has_assumed_values:
        score += 15
    if context.audience_insights.characteristics:
        score += 10

    if "budget" in context.metadata.assumptions:
        score -= 10
    if "location" in context.metadata.assumptions:
        score -= 10

    if score >= CONFIDENCE_HIGH:
        return "high"
    if score >= CONFIDENCE_MEDIUM:
        return "medium"
    return "low"


def adjust_feasibility_scores(scores: List[Dict[str, Any]], context: Context) -> List[Dict[str, Any]]:
    """Apply context-driven deltas to already-ordered scores."""
    location = context.economic_context.location
    confidence = calculate_confidence(context)
    adjusted: List[Dict[str, Any]] = []

    for score in scores:
        key = score.get("iconKey")
        value = _to_number(score.get("value"))

        if key == "market":
            if location.market_access in LOW_MARKET_ACCESS:
                value = min(value, MARKET_CAP_LOW_ACCESS)
            if location.competition_level == "high":
                value -= HIGH_COMPETITION_PENALTY

        elif key == "execution":
            if len(context.user_profile.skill_categories) > 2:
                value += SKILL_BREADTH_BONUS
            if location.digital_infra == "limited":
                value -= LIMITED_INFRA_EXECUTION_PENALTY

        elif key == "capital":
            # Low-budget feasibility is satisfied by construction for micro
            if context.economic_context.budget.tier == "micro":
                value = max(value, CAPITAL_FLOOR_MICRO)

        elif key == "risk":
            if context.metadata.has_assumed_values:
                value -= ASSUMED_VALUES_RISK_PENALTY

        adjusted.append({**score, "value": clamp_score(value), "confidence": confidence})

    return adjusted


# ---------------------------------------------------------------------------
# Revenue simulation
# ---------------------------------------------------------------------------
def calculate_revenue_simulation(
    context: Context,
    ai_revenue: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    budget = context.economic_context.budget
    ceiling = budget.range.max * REVENUE_CEILING_MULTIPLE
    multiplier = REVENUE_MULTIPLIERS.get(budget.tier, REVENUE_MULTIPLIERS["small"])

    has_ai_estimate = (
        isinstance(ai_revenue, dict)
        and "year1RevenueMin" in ai_revenue
        and "year1RevenueMax" in ai_revenue
    )

    if has_ai_estimate:
        revenue_min = round(min(max(_to_number(ai_revenue["year1RevenueMin"]), 0), ceiling))
        revenue_max = round(min(max(_to_number(ai_revenue["year1RevenueMax"]), 0), ceiling))
        if revenue_min > revenue_max:
            revenue_min, revenue_max = revenue_max, revenue_min
        basis = "model estimate, capped at a realistic first-year ceiling"
    else:
        revenue_min = round(budget.range.max * multiplier["min"])
        revenue_max = round(budget.range.max * multiplier["max"])
        basis = "budget-tier multipliers"

    return {
        "year1RevenueMin": int(revenue_min),
        "year1RevenueMax": int(revenue_max),
        "year1ProfitMin": int(round(revenue_min * PROFIT_MARGIN_MIN)),
        "year1ProfitMax": int(round(revenue_max * PROFIT_MARGIN_MAX)),
        "currency": "USD",
        "notes": (
            f"Estimates based on the {budget.tier} budget tier and "
            f"{context.economic_context.location.type} location context ({basis}). "
            "Actual results depend on execution, market conditions and individual circumstances."
        ),
        "disclaimer": REVENUE_DISCLAIMER,
    }


# ---------------------------------------------------------------------------
# Classifications
# ---------------------------------------------------------------------------
def assess_budget_suitability(context: Context, idea_requirements: Optional[Iterable[Any]] = None) -> str:
    should_avoid = [item.lower() for item in context.resource_constraints.should_avoid]
    for requirement in idea_requirements or []:
        text = str(requirement).lower()
        if any(avoid in text for avoid in should_avoid):
            return "challenging"

    tier = context.economic_context.budget.tier
    if tier == "micro":
        return "moderate"
    if tier == "small":
        return "good"
    return "excellent"


def assess_ease_of_execution(context: Context, scores: List[Dict[str, Any]]) -> str:
    execution = next((s for s in scores if s.get("iconKey") == "execution"), None)
    ease = _to_number(execution.get("value"), 50) if execution else 50

    real_skills = [c for c in context.user_profile.skill_categories if c != GENERAL_SKILL_CATEGORY]
    if real_skills:
        ease += EASE_SKILL_BONUS

    digital_infra = context.economic_context.location.digital_infra
    if digital_infra == "limited":
        ease -= EASE_LIMITED_INFRA_PENALTY
    elif digital_infra == "strong":
        ease += EASE_STRONG_INFRA_BONUS

    for threshold, label in EASE_THRESHOLDS:
        if ease >= threshold:
            return label
    return "difficult"


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def process(ai_output: Dict[str, Any], context: Context) -> Dict[str, Any]:
    """Return an enriched copy of `ai_output`.

    Raises SimulationInputError when `results` / `decisionSupport` are
    missing or the scores cannot be put into the fixed order.
    """
    if not isinstance(ai_output, dict):
        raise SimulationInputError("AI output must be an object")
    results = ai_output.get("results")
    decision = ai_output.get("decisionSupport")
    if not isinstance(results, dict) or not isinstance(decision, dict):
        raise SimulationInputError("AI output is missing results or decisionSupport")

    output = copy.deepcopy(ai_output)
    results = output["results"]
    decision = output["decisionSupport"]

    scores = results.get("feasibilityScores")
    if not isinstance(scores, list) or not enforce_score_order(scores):
        scores = realign_scores(scores)
        logger.info("[SIMULATION] Realigned feasibility scores to fixed order")

    roadmap = results.get("roadmap")
    if isinstance(roadmap, list) and not enforce_roadmap_phases(roadmap):
        relabeled = relabel_roadmap(roadmap)
        if relabeled is not roadmap:
            logger.info("[SIMULATION] Relabeled roadmap phases")
        results["roadmap"] = relabeled

    adjusted = adjust_feasibility_scores(scores, context)
    results["feasibilityScores"] = adjusted

    decision["revenueSimulation"] = calculate_revenue_simulation(context, decision.get("revenueSimulation"))
    decision["budgetSuitability"] = assess_budget_suitability(context, decision.get("requirements"))
    decision["easeOfExecution"] = assess_ease_of_execution(context, adjusted)

    confidence = calculate_confidence(context)
    output["_simulation"] = {
        "processedAt": datetime.now(timezone.utc).isoformat(),
        "confidence": confidence,
        "adjustmentsApplied": True,
    }

    logger.info(
        "[SIMULATION] scores=%s suitability=%s ease=%s confidence=%s",
        [s["value"] for s in adjusted],
        decision["budgetSuitability"],
        decision["easeOfExecution"],
        confidence,
    )
    return output
