"""Safety verdicts produced by the ethical safeguard filter."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Severity = Literal["critical", "warning"]


class SafetyIssue(BaseModel):
    type: str = Field(..., description="harmful_content | exploitative_labor | bias | financial_misinformation | sensitive_business_type")
    severity: Severity
    message: str
    category: Optional[str] = None


class SafetyVerdict(BaseModel):
    """Post-generation verdict. `issues` holds critical findings, `warnings` the rest."""

    safe: bool
    issues: List[SafetyIssue] = Field(default_factory=list)
    warnings: List[SafetyIssue] = Field(default_factory=list)
    action: Literal["proceed", "proceed_with_warnings", "block"]


class InputSafetyResult(BaseModel):
    safe: bool
    reason: str
    action: Literal["proceed", "proceed_with_caution", "reject"]
    flagged: List[str] = Field(default_factory=list)
