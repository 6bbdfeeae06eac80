"""Fallback provider — canned, pre-validated responses for demo continuity.

Used when providers are unavailable, the orchestrator fails, simulation
input is unusable, or the safety filter blocks an output. Every returned
object is a fresh copy tagged with `_meta.isFallback`; the formatter strips
that tag before anything reaches a client.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Optional

from ..schemas.context_schema import Context
from .fallback_templates import FALLBACK_TEMPLATES

logger = logging.getLogger(__name__)

DEFAULT_REASON = "Primary AI generation unavailable"


def resolve_fallback_keys(budget_tier: Optional[str], location_type: Optional[str]) -> tuple[str, str]:
    """Map any tier / location onto the (micro|small) × (urban|rural) matrix."""
    budget_key = budget_tier if budget_tier in ("micro", "small") else "small"
    location_key = "rural" if location_type in ("rural", "remote") else "urban"
    return budget_key, location_key


def get_fallback(context: Optional[Context], reason: str = DEFAULT_REASON) -> Dict[str, Any]:
    budget_tier = context.economic_context.budget.tier if context else None
    location_type = context.economic_context.location.type if context else None
    budget_key, location_key = resolve_fallback_keys(budget_tier, location_type)

    response = copy.deepcopy(FALLBACK_TEMPLATES[budget_key][location_key])
    response["_meta"] = {
        "isFallback": True,
        "fallbackReason": reason,
        "budgetKey": budget_key,
        "locationKey": location_key,
    }
    logger.warning("[FALLBACK] Serving %s/%s template: %s", budget_key, location_key, reason)
    return response


def is_fallback(obj: Any) -> bool:
    return isinstance(obj, dict) and isinstance(obj.get("_meta"), dict) and obj["_meta"].get("isFallback") is True
