"""Ethical safeguard filter — pre-generation input check, post-generation output check.

Rules
-----
- Term tables live in `constants.py` and are tunable; matching is
  case-insensitive on word boundaries ("kill" does not match "skills").
- Input: blocked term → reject; flagged business type → proceed with
  caution and carry the topics forward.
- Output severities:
    harmful_content, exploitative_labor, bias  → critical (block)
    financial_misinformation, sensitive_business_type → warning
- The safeguards section itself is not scanned for harmful phrases (it
  legitimately names what was avoided). Bias is scanned over the full
  serialized output.
- Pure and idempotent: same output in, same verdict out.
"""

from __future__ import annotations

import copy
import json
import re
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

from ..constants import (
    BIAS_PATTERNS,
    BLOCKED_TERMS,
    EXPLOITATIVE_LABOR_PATTERNS,
    FINANCIAL_MISINFORMATION_PATTERNS,
    FLAGGED_BUSINESS_TYPES,
    PROFIT_MARGIN_CEILING,
    REVENUE_RANGE_MAX_RATIO,
)
from ..schemas.context_schema import Context
from ..schemas.profile_schema import NormalizedProfile
from ..schemas.safety_schema import InputSafetyResult, SafetyIssue, SafetyVerdict

SAFETY_SCORE_BASE = 100
WARNING_PENALTY = 5
ISSUE_PENALTY = 10


# ── Matching ─────────────────────────────────────────────────────────────

@lru_cache(maxsize=512)
def _term_regex(term: str) -> "re.Pattern[str]":
    return re.compile(r"(?<!\w)" + re.escape(term.lower()) + r"(?!\w)")


def find_terms(text: str, terms: Iterable[str]) -> List[str]:
    """Terms (in table order, no duplicates) that occur in `text` as whole words."""
    lowered = (text or "").lower()
    found: List[str] = []
    for term in terms:
        if term not in found and _term_regex(term).search(lowered):
            found.append(term)
    return found


def contains_unsafe_content(text: str) -> bool:
    return bool(find_terms(text, BLOCKED_TERMS))


def find_flagged_business_types(text: str) -> List[str]:
    return find_terms(text, FLAGGED_BUSINESS_TYPES)


def _serialize(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)


def _phrase_scan_text(output: Dict[str, Any]) -> str:
    """Serialized output minus internal keys, the safeguards section and
    previously attached warnings."""
    scannable = {
        key: value
        for key, value in output.items()
        if not key.startswith("_") and key != "ethicalSafeguards"
    }
    decision = scannable.get("decisionSupport")
    if isinstance(decision, dict) and "additionalWarnings" in decision:
        scannable["decisionSupport"] = {k: v for k, v in decision.items() if k != "additionalWarnings"}
    return _serialize(scannable)


# ── Input check ──────────────────────────────────────────────────────────

def check_input_safety(profile: NormalizedProfile) -> InputSafetyResult:
    combined = " ".join(
        [
            profile.skills,
            profile.interests,
            profile.goals,
            profile.local_data,
            profile.target_audience,
        ]
    )

    if contains_unsafe_content(combined):
        return InputSafetyResult(
            safe=False,
            reason="Input contains potentially harmful content",
            action="reject",
        )

    flagged = find_flagged_business_types(combined)
    if flagged:
        return InputSafetyResult(
            safe=True,
            reason=f"Input mentions sensitive business types: {', '.join(flagged)}",
            action="proceed_with_caution",
            flagged=flagged,
        )

    return InputSafetyResult(safe=True, reason="Input passed safety checks", action="proceed")


# ── Output check ─────────────────────────────────────────────────────────

def _financial_issues(text: str, revenue: Optional[Dict[str, Any]]) -> List[str]:
    issues: List[str] = []

    if isinstance(revenue, dict):
        try:
            revenue_min = float(revenue.get("year1RevenueMin") or 0)
            revenue_max = float(revenue.get("year1RevenueMax") or 0)
            profit_max = float(revenue.get("year1ProfitMax") or 0)
        except (TypeError, ValueError):
            revenue_min = revenue_max = profit_max = 0.0

        if revenue_max > revenue_min * REVENUE_RANGE_MAX_RATIO:
            issues.append("Revenue range is unrealistically wide")
        if revenue_max > 0 and profit_max / revenue_max > PROFIT_MARGIN_CEILING:
            issues.append("Profit margin projections may be unrealistic")

    for phrase in find_terms(text, FINANCIAL_MISINFORMATION_PATTERNS):
        issues.append(f'Contains potentially misleading language: "{phrase}"')

    return issues


def detect_bias(output: Dict[str, Any]) -> List[SafetyIssue]:
    text = _serialize(output)
    found: List[SafetyIssue] = []
    for category, patterns in BIAS_PATTERNS.items():
        for pattern in find_terms(text, patterns):
            found.append(
                SafetyIssue(
                    type="bias",
                    severity="critical",
                    category=category,
                    message=f"Potential {category} bias detected: \"{pattern}\"",
                )
            )
    return found


def check_output_safety(output: Dict[str, Any], flagged_topics: Iterable[str] = ()) -> SafetyVerdict:
    issues: List[SafetyIssue] = []
    warnings: List[SafetyIssue] = []
    scan_text = _phrase_scan_text(output)

    if contains_unsafe_content(scan_text):
        issues.append(
            SafetyIssue(
                type="harmful_content",
                severity="critical",
                message="Output contains potentially harmful content",
            )
        )

    if find_terms(scan_text, EXPLOITATIVE_LABOR_PATTERNS):
        issues.append(
            SafetyIssue(
                type="exploitative_labor",
                severity="critical",
                message="Output suggests exploitative labor practices",
            )
        )

    issues.extend(detect_bias(output))

    decision = output.get("decisionSupport")
    revenue = decision.get("revenueSimulation") if isinstance(decision, dict) else None
    for message in _financial_issues(scan_text, revenue):
        warnings.append(SafetyIssue(type="financial_misinformation", severity="warning", message=message))

    for topic in find_terms(scan_text, list(flagged_topics)):
        warnings.append(
            SafetyIssue(
                type="sensitive_business_type",
                severity="warning",
                category=topic,
                message=f"Output touches a sensitive business area: {topic}",
            )
        )

    critical = [issue for issue in issues if issue.severity == "critical"]
    if critical:
        action = "block"
    elif warnings:
        action = "proceed_with_warnings"
    else:
        action = "proceed"

    return SafetyVerdict(safe=not critical, issues=issues, warnings=warnings, action=action)


# ── Applying a verdict ───────────────────────────────────────────────────

def apply_safety_filters(output: Dict[str, Any], verdict: SafetyVerdict) -> Optional[Dict[str, Any]]:
    """None on block (caller substitutes fallback), else output with warnings attached."""
    if not verdict.safe:
        return None
    if not verdict.warnings:
        return output

    filtered = copy.deepcopy(output)
    decision = filtered.get("decisionSupport")
    if not isinstance(decision, dict):
        decision = {}
        filtered["decisionSupport"] = decision
    decision["additionalWarnings"] = [warning.message for warning in verdict.warnings]
    return filtered


def generate_ethical_safeguards(context: Context, verdict: Optional[SafetyVerdict] = None) -> Dict[str, Any]:
    """Build the client-facing ethicalSafeguards section."""
    econ = context.economic_context
    safety_score = SAFETY_SCORE_BASE
    if verdict is not None:
        safety_score -= len(verdict.warnings) * WARNING_PENALTY
        safety_score -= len(verdict.issues) * ISSUE_PENALTY

    inclusivity = [
        f"Ideas adapted for the {econ.budget.tier} budget tier",
        f"Considered {econ.location.type} location constraints",
        "Prioritized low-barrier entry options",
    ]
    if econ.location.digital_infra == "limited":
        inclusivity.append("Favored offline channels for limited digital infrastructure")
    else:
        inclusivity.append("Included options that work with limited digital access")

    return {
        "biasChecks": [
            "Checked for gender-based assumptions",
            "Checked for age-based exclusions",
            "Checked for socioeconomic bias",
            "Verified accessibility considerations",
        ],
        "inclusivityNotes": inclusivity,
        "harmAvoidance": [
            "Excluded exploitative business models",
            "Avoided unrealistic revenue promises",
            "Flagged legal and licensing considerations",
            "Removed potentially harmful suggestions",
        ],
        "safetyScore": max(0, safety_score),
    }
