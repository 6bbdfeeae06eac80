"""Prompt templates for the two-model generation stage.

Primary model: idea generation, creativity-biased.
Secondary model: structuring and safety refinement only. It must never
invent ideas or claims that are not in the primary output.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from ..schemas.context_schema import Context

OUTPUT_CONTRACT = """{
  "results": {
    "businessIdea": { "title": string, "description": string, "whyItFits": string },
    "feasibilityScores": [
      { "label": "Market Demand", "value": number (0-100), "iconKey": "market", "description": string },
      { "label": "Ease of Execution", "value": number (0-100), "iconKey": "execution", "description": string },
      { "label": "Capital Efficiency", "value": number (0-100), "iconKey": "capital", "description": string },
      { "label": "Risk Level", "value": number (0-100), "iconKey": "risk", "description": string (higher = safer) }
    ],
    "roadmap": [
      { "phase": "Phase 1", "title": string, "description": string, "timeframe": string },
      { "phase": "Phase 2", "title": string, "description": string, "timeframe": string },
      { "phase": "Phase 3", "title": string, "description": string, "timeframe": string },
      { "phase": "Phase 4", "title": string, "description": string, "timeframe": string }
    ],
    "pitchSummary": string
  },
  "ideas": [
    {
      "title": string,
      "description": string,
      "whyItFits": string,
      "localAdaptation": string,
      "budgetRange": { "min": number, "max": number, "currency": "USD" },
      "riskLevel": "low" | "medium" | "high",
      "riskFactors": [string]
    }
  ],
  "decisionSupport": {
    "pros": [string],
    "cons": [string],
    "assumptions": [string],
    "risks": [string],
    "mitigations": [string],
    "requirements": [string],
    "revenueSimulation": {
      "year1RevenueMin": number,
      "year1RevenueMax": number,
      "year1ProfitMin": number,
      "year1ProfitMax": number,
      "currency": "USD",
      "notes": string
    },
    "explainability": string,
    "budgetSuitability": "excellent" | "good" | "moderate" | "challenging",
    "easeOfExecution": "easy" | "moderate" | "challenging" | "difficult"
  },
  "ethicalSafeguards": {
    "biasChecks": [string],
    "inclusivityNotes": [string],
    "harmAvoidance": [string]
  },
  "localAdaptation": {
    "regionFocus": string,
    "localEconomyTie": string,
    "accessibilityNotes": string
  }
}"""


def _join(items, default: str = "none") -> str:
    return ", ".join(items) if items else default


def _scrutiny_block(context: Context) -> str:
    flagged = context.metadata.flagged_topics
    if not flagged:
        return ""
    return f"""

EXTRA SCRUTINY:
The request touches sensitive business areas ({_join(flagged)}).
- Do NOT recommend businesses in these areas.
- Prefer legal, community-positive alternatives that use the same skills."""


def build_primary_system_prompt(context: Context) -> str:
    econ = context.economic_context
    return f"""You are a business idea advisor for first-time entrepreneurs with limited resources.

ROLE:
- Generate realistic, locally adapted business directions.
- Focus on low-budget, small-scale businesses.
- Use plain, non-technical language.
- Prioritize inclusivity and accessibility.

CONSTRAINTS:
- NEVER assume venture-scale funding.
- NEVER promise revenue or use guarantee language.
- NEVER suggest exploitative, unsafe or unethical businesses.
- NEVER exclude people by gender, age, disability or background.
- ALWAYS respect the user's actual budget and location.

CONTEXT FOR THIS USER:
- Budget Tier: {econ.budget.tier} ({econ.budget.label})
- Location Type: {econ.location.type}
- Market Access: {econ.location.market_access}
- Digital Infrastructure: {econ.location.digital_infra}
- Local Economy Sectors: {_join(econ.local_economy.dominant_sectors)}
- Local Opportunities: {_join(econ.local_economy.opportunities)}
- Local Challenges: {_join(econ.local_economy.challenges)}

OUTPUT LANGUAGE: {context.output_preferences.language_name}
Return ONLY a single JSON object. No markdown, no prose.{_scrutiny_block(context)}"""


def build_user_prompt(context: Context) -> str:
    profile = context.user_profile
    econ = context.economic_context
    audience = context.audience_insights
    constraints = context.resource_constraints

    local_info = ""
    if econ.additional_local_data:
        local_info = f"\n- Additional Local Info: {econ.additional_local_data}"

    return f"""Generate business ideas for this entrepreneur profile:

USER PROFILE:
- Skills: {profile.skills}
- Skill Categories: {_join(profile.skill_categories)}
- Interests: {profile.interests}
- Target Audience: {profile.target_audience}
- Goals: {profile.goals}

BUDGET CONTEXT:
- Budget Range: ${econ.budget.range.min} - ${econ.budget.range.max}
- Can Afford: {_join(constraints.can_afford)}
- Should Avoid: {_join(constraints.should_avoid)}
- Recommended Approach: {constraints.recommended_approach}

LOCATION CONTEXT:
- Region: {context.output_preferences.region}
- Location Type: {econ.location.type}
- Market Access: {econ.location.market_access}
- Competition Level: {econ.location.competition_level}
- Local Economy Focus: {_join(econ.local_economy.dominant_sectors)}{local_info}

AUDIENCE INSIGHTS:
- Primary Audience: {audience.primary}
- Characteristics: {_join(audience.characteristics, "general")}
- Best Reach Channels: {_join(audience.reach_channels, "local marketing")}
- Price Sensitivity: {audience.price_sensitivity}

REQUIREMENTS:
1. Generate 3 realistic business ideas that match this profile (the first is the primary recommendation).
2. Feasibility scores MUST appear in the order market, execution, capital, risk.
3. The roadmap MUST have exactly 4 entries labeled "Phase 1" to "Phase 4".
4. Revenue estimates MUST be based on realistic customer counts and stay within reach of the budget.
5. Label all projections as estimates with clear assumptions.
6. List in decisionSupport.requirements what the primary idea needs to start (space, inventory, advertising, staff, equipment).

Return your response as valid JSON following this exact schema:
{OUTPUT_CONTRACT}"""


def build_secondary_system_prompt() -> str:
    return """You are a structuring and safety refinement model.

ROLE (STRICT):
- Structure and format the input according to the schema.
- Simplify language for non-technical users.
- Remove unsupported claims and guarantee language.
- Ensure every estimate is labeled as an estimate.

YOU MUST NEVER:
- Generate new business ideas.
- Add information not present in the input.
- Remove safety warnings or disclaimers.

OUTPUT:
- A single valid JSON object with the same keys as the input.
- No markdown, no prose."""


def build_secondary_user_prompt(primary_json: Dict[str, Any]) -> str:
    """Wrap the primary model's parsed output for the structuring pass."""
    body = json.dumps(primary_json, ensure_ascii=False, indent=2)
    return f"""Refine and structure the following business idea output.
Keep every idea, number and section. Return the refined JSON only.

INPUT JSON:
{body}

Return your response as valid JSON following this exact schema:
{OUTPUT_CONTRACT}"""
