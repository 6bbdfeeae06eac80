"""Response formatter — the last stage before anything reaches a client.

Order of operations
-------------------
1. Recursive sanitization: HTML tags, `javascript:` URIs and inline
   `on*=` handlers removed from every string; `_`-prefixed and raw model
   text keys dropped.
2. Section-by-section backfill of missing or too-short fields with safe
   generic defaults.
3. Fresh `resultId`, metadata block.
4. Validation through `GenerationResponse`. Failure here is a
   programming error: logged CRITICAL and raised as ResponseContractError.

Formatting an already-complete output changes nothing but sanitization,
`resultId` and metadata.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..constants import REVENUE_DISCLAIMER, ROADMAP_PHASES, SCORE_ORDER
from ..schemas.output_schema import ErrorResponse, GenerationResponse
from .errors import ResponseContractError

logger = logging.getLogger(__name__)

RAW_TEXT_KEYS = frozenset({"rawModelResponse", "rawOutput", "rawText", "raw"})

MAX_IDEAS = 5
MIN_IDEAS = 3

BUDGET_SUITABILITY_VALUES = ("excellent", "good", "moderate", "challenging")
EASE_VALUES = ("easy", "moderate", "challenging", "difficult")
CONFIDENCE_VALUES = ("low", "medium", "high")

# ── Defaults ─────────────────────────────────────────────────────────────

DEFAULT_BUSINESS_IDEA = {
    "title": "Business Idea",
    "description": "A business opportunity tailored to your profile.",
    "whyItFits": "This idea aligns with your skills and interests.",
}

DEFAULT_SCORES = [
    {"label": "Market Demand", "value": 60, "iconKey": "market", "description": "Moderate market opportunity"},
    {"label": "Ease of Execution", "value": 55, "iconKey": "execution", "description": "Achievable with effort"},
    {"label": "Capital Efficiency", "value": 70, "iconKey": "capital", "description": "Good budget fit"},
    {"label": "Risk Level", "value": 50, "iconKey": "risk", "description": "Manageable risks"},
]

DEFAULT_ROADMAP = [
    {"phase": "Phase 1", "title": "Research & Validate", "description": "Understand your market", "timeframe": "Week 1-2"},
    {"phase": "Phase 2", "title": "Setup & Launch", "description": "Get started with basics", "timeframe": "Week 3-4"},
    {"phase": "Phase 3", "title": "First Customers", "description": "Acquire initial customers", "timeframe": "Month 2"},
    {"phase": "Phase 4", "title": "Grow & Iterate", "description": "Expand and improve", "timeframe": "Month 3-6"},
]

DEFAULT_PITCH = "A practical business opportunity designed for your unique situation."

DEFAULT_IDEA = {
    "title": "Alternative Idea",
    "description": "An alternative business direction to consider.",
    "whyItFits": "This option offers different advantages.",
    "localAdaptation": "Can be adapted to your local context.",
}

DEFAULT_DECISION_LISTS = {
    "pros": ["Aligned with your skills", "Low barrier to entry"],
    "cons": ["Requires consistent effort", "Market validation needed"],
    "assumptions": ["Based on provided information", "Market conditions may vary"],
    "risks": ["Competition", "Economic changes"],
    "mitigations": ["Start small and validate", "Diversify offerings"],
}

DEFAULT_REVENUE = {
    "year1RevenueMin": 300,
    "year1RevenueMax": 1500,
    "year1ProfitMin": 30,
    "year1ProfitMax": 450,
    "currency": "USD",
    "notes": "Estimates based on typical small business performance",
    "disclaimer": REVENUE_DISCLAIMER,
}

DEFAULT_EXPLAINABILITY = "These recommendations are based on your stated skills, budget, and location."

DEFAULT_SAFEGUARDS = {
    "biasChecks": ["Standard bias review completed"],
    "inclusivityNotes": ["Ideas suitable for various backgrounds"],
    "harmAvoidance": ["No harmful suggestions included"],
}

DEFAULT_LOCAL_ADAPTATION = {
    "regionFocus": "Your local area",
    "localEconomyTie": "Designed for local market conditions",
    "accessibilityNotes": "Accessible given your stated resources",
}

ERROR_MESSAGES = {
    "invalid_input": "Please check your inputs and try again.",
    "unsafe_input": "Some of your input couldn't be processed. Please rephrase and try again.",
    "provider_unavailable": "The service is temporarily unavailable. Please try again later.",
    "invalid_ai_output": "We couldn't generate results this time. Please try again.",
    "output_blocked": "We couldn't generate appropriate results for this request.",
    "rate_limited": "Too many requests. Please wait a moment and try again.",
    "not_found": "The requested item was not found or has expired.",
    "unauthorized": "Authentication required.",
}
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


# ---------------------------------------------------------------------------
# Sanitization
# ---------------------------------------------------------------------------
_TAG_RE = re.compile(r"<[^>]*>")
_JS_URI_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"\bon\w+\s*=", re.IGNORECASE)


def sanitize_text(text: Any) -> str:
    if text is None:
        return ""
    cleaned = _TAG_RE.sub("", str(text))
    cleaned = _JS_URI_RE.sub("", cleaned)
    cleaned = _EVENT_HANDLER_RE.sub("", cleaned)
    return cleaned.strip()


def sanitize_object(obj: Any) -> Any:
    """Sanitize strings recursively; drop internal and raw-text keys."""
    if isinstance(obj, str):
        return sanitize_text(obj)
    if isinstance(obj, list):
        return [sanitize_object(item) for item in obj]
    if isinstance(obj, dict):
        return {
            key: sanitize_object(value)
            for key, value in obj.items()
            if not (isinstance(key, str) and (key.startswith("_") or key in RAW_TEXT_KEYS))
        }
    return obj


# ---------------------------------------------------------------------------
# Backfill helpers
# ---------------------------------------------------------------------------
def _text(value: Any, default: str, min_len: int) -> str:
    if isinstance(value, str) and len(value.strip()) >= min_len:
        return value
    return default


def _dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _string_list(value: Any, defaults: List[str], min_items: int) -> List[str]:
    items = [item for item in value if isinstance(item, str) and item.strip()] if isinstance(value, list) else []
    for default in defaults:
        if len(items) >= min_items:
            break
        if default not in items:
            items.append(default)
    return items


def _int_in(value: Any, low: int, high: Optional[int], default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    number = int(round(value))
    if high is not None:
        number = min(number, high)
    return max(low, number)


def _scores(value: Any) -> List[Dict[str, Any]]:
    if (
        not isinstance(value, list)
        or len(value) != len(SCORE_ORDER)
        or not all(isinstance(s, dict) for s in value)
        or [s.get("iconKey") for s in value] != SCORE_ORDER
    ):
        return [dict(score) for score in DEFAULT_SCORES]

    filled = []
    for score, default in zip(value, DEFAULT_SCORES):
        entry = dict(score)
        entry["label"] = _text(entry.get("label"), default["label"], 3)
        entry["value"] = _int_in(entry.get("value"), 0, 100, default["value"])
        entry["description"] = _text(entry.get("description"), default["description"], 5)
        if entry.get("confidence") not in CONFIDENCE_VALUES:
            entry.pop("confidence", None)
        filled.append(entry)
    return filled


def _roadmap(value: Any) -> List[Dict[str, Any]]:
    if (
        not isinstance(value, list)
        or len(value) != len(ROADMAP_PHASES)
        or not all(isinstance(step, dict) for step in value)
        or [step.get("phase") for step in value] != ROADMAP_PHASES
    ):
        return [dict(step) for step in DEFAULT_ROADMAP]

    filled = []
    for step, default in zip(value, DEFAULT_ROADMAP):
        entry = dict(step)
        entry["title"] = _text(entry.get("title"), default["title"], 3)
        entry["description"] = _text(entry.get("description"), default["description"], 5)
        entry["timeframe"] = _text(entry.get("timeframe"), default["timeframe"], 3)
        if not isinstance(entry.get("dependencies", []), list):
            entry["dependencies"] = []
        filled.append(entry)
    return filled


def _ideas(value: Any) -> List[Dict[str, Any]]:
    ideas: List[Dict[str, Any]] = []
    for raw in value if isinstance(value, list) else []:
        if not isinstance(raw, dict):
            continue
        idea = dict(raw)
        idea["title"] = _text(idea.get("title"), DEFAULT_IDEA["title"], 3)
        idea["description"] = _text(idea.get("description"), DEFAULT_IDEA["description"], 10)
        idea["whyItFits"] = _text(idea.get("whyItFits"), DEFAULT_IDEA["whyItFits"], 10)
        if not isinstance(idea.get("localAdaptation", ""), str):
            idea["localAdaptation"] = DEFAULT_IDEA["localAdaptation"]
        ideas.append(idea)

    ideas = ideas[:MAX_IDEAS]
    while len(ideas) < MIN_IDEAS:
        idea = dict(DEFAULT_IDEA)
        idea["title"] = f"Alternative Idea {len(ideas) + 1}"
        ideas.append(idea)
    return ideas


def _revenue(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        return dict(DEFAULT_REVENUE)

    revenue = dict(value)
    for key in ("year1RevenueMin", "year1RevenueMax", "year1ProfitMin", "year1ProfitMax"):
        revenue[key] = _int_in(revenue.get(key), 0, None, DEFAULT_REVENUE[key])
    if revenue["year1RevenueMin"] > revenue["year1RevenueMax"]:
        revenue["year1RevenueMin"], revenue["year1RevenueMax"] = revenue["year1RevenueMax"], revenue["year1RevenueMin"]
    if revenue["year1ProfitMin"] > revenue["year1ProfitMax"]:
        revenue["year1ProfitMin"], revenue["year1ProfitMax"] = revenue["year1ProfitMax"], revenue["year1ProfitMin"]
    revenue["currency"] = _text(revenue.get("currency"), "USD", 1)
    revenue["notes"] = _text(revenue.get("notes"), DEFAULT_REVENUE["notes"], 5)
    revenue["disclaimer"] = _text(revenue.get("disclaimer"), REVENUE_DISCLAIMER, 10)
    return revenue


def ensure_defaults(output: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of `output` with every required section present and long enough."""
    complete = dict(output) if isinstance(output, dict) else {}

    results = _dict(complete.get("results"))
    idea = _dict(results.get("businessIdea"))
    results["businessIdea"] = {
        **idea,
        "title": _text(idea.get("title"), DEFAULT_BUSINESS_IDEA["title"], 3),
        "description": _text(idea.get("description"), DEFAULT_BUSINESS_IDEA["description"], 10),
        "whyItFits": _text(idea.get("whyItFits"), DEFAULT_BUSINESS_IDEA["whyItFits"], 10),
    }
    results["feasibilityScores"] = _scores(results.get("feasibilityScores"))
    results["roadmap"] = _roadmap(results.get("roadmap"))
    results["pitchSummary"] = _text(results.get("pitchSummary"), DEFAULT_PITCH, 10)
    complete["results"] = results

    complete["ideas"] = _ideas(complete.get("ideas"))

    decision = _dict(complete.get("decisionSupport"))
    for key, defaults in DEFAULT_DECISION_LISTS.items():
        decision[key] = _string_list(decision.get(key), defaults, 2)
    decision["revenueSimulation"] = _revenue(decision.get("revenueSimulation"))
    decision["explainability"] = _text(decision.get("explainability"), DEFAULT_EXPLAINABILITY, 10)
    if decision.get("budgetSuitability") not in BUDGET_SUITABILITY_VALUES:
        decision["budgetSuitability"] = "moderate"
    if decision.get("easeOfExecution") not in EASE_VALUES:
        decision["easeOfExecution"] = "moderate"
    if "additionalWarnings" in decision and not isinstance(decision["additionalWarnings"], list):
        decision["additionalWarnings"] = []
    complete["decisionSupport"] = decision

    safeguards = _dict(complete.get("ethicalSafeguards"))
    for key, defaults in DEFAULT_SAFEGUARDS.items():
        safeguards[key] = _string_list(safeguards.get(key), defaults, 1)
    if "safetyScore" in safeguards and safeguards["safetyScore"] is not None:
        safeguards["safetyScore"] = _int_in(safeguards["safetyScore"], 0, 100, 100)
    complete["ethicalSafeguards"] = safeguards

    local = _dict(complete.get("localAdaptation"))
    local["regionFocus"] = _text(local.get("regionFocus"), DEFAULT_LOCAL_ADAPTATION["regionFocus"], 2)
    local["localEconomyTie"] = _text(local.get("localEconomyTie"), DEFAULT_LOCAL_ADAPTATION["localEconomyTie"], 5)
    local["accessibilityNotes"] = _text(
        local.get("accessibilityNotes"), DEFAULT_LOCAL_ADAPTATION["accessibilityNotes"], 5
    )
    complete["localAdaptation"] = local

    return complete


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def generate_result_id() -> str:
    return str(uuid.uuid4())


def format_response(
    output: Dict[str, Any],
    session_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Assemble, validate and return the client-facing FinalResponse dict."""
    metadata = metadata or {}
    complete = ensure_defaults(sanitize_object(output))

    confidence = metadata.get("confidence")
    response = {
        "resultId": generate_result_id(),
        "sessionId": session_id or None,
        "results": complete["results"],
        "ideas": complete["ideas"],
        "decisionSupport": complete["decisionSupport"],
        "ethicalSafeguards": complete["ethicalSafeguards"],
        "localAdaptation": complete["localAdaptation"],
        "metadata": {
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "modelPrimary": metadata.get("primaryModel") or "unknown",
            "modelSecondary": metadata.get("secondaryModel") or "none",
            "processingTimeMs": max(0, int(metadata.get("totalProcessingTimeMs") or 0)),
            "confidence": confidence if confidence in CONFIDENCE_VALUES else "medium",
        },
    }

    try:
        validated = GenerationResponse.model_validate(response)
    except ValidationError as exc:
        logger.critical("[FORMATTER] Response failed output contract after defaulting: %s", exc)
        raise ResponseContractError("Response failed output contract", errors=exc.errors()) from exc

    return validated.model_dump(by_alias=True, mode="json")


def format_error_response(message_key: str, session_id: Optional[str] = None) -> Dict[str, Any]:
    """Map an internal error key to a generic client message. No internals leak."""
    return ErrorResponse(
        error=ERROR_MESSAGES.get(message_key, GENERIC_ERROR_MESSAGE),
        session_id=session_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
    ).to_wire()
