"""Output contract for POST /generate.

`GenerationResponse` is the final gate: every payload is validated
against it before it leaves the server. The structural invariants
(score order, roadmap phases, idea count, ordered revenue bounds) are
enforced here as validators, not only by the code that produces them.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import ConfigDict, Field, model_validator

from ..constants import ROADMAP_PHASES, SCORE_ORDER
from .base import CamelModel

ScoreKey = Literal["market", "execution", "capital", "risk"]
ConfidenceLevel = Literal["low", "medium", "high"]
BudgetSuitability = Literal["excellent", "good", "moderate", "challenging"]
EaseOfExecution = Literal["easy", "moderate", "challenging", "difficult"]


class BusinessIdea(CamelModel):
    title: str = Field(..., min_length=3)
    description: str = Field(..., min_length=10)
    why_it_fits: str = Field(..., min_length=10)


class IdeaOption(CamelModel):
    """One alternative idea. Optional AI detail (riskLevel, budgetRange, ...) is kept as-is."""

    model_config = ConfigDict(extra="allow")

    title: str = Field(..., min_length=3)
    description: str = Field(..., min_length=10)
    why_it_fits: str = Field(..., min_length=10)
    local_adaptation: str = ""


class FeasibilityScore(CamelModel):
    label: str = Field(..., min_length=3)
    value: int = Field(..., ge=0, le=100)
    icon_key: ScoreKey
    description: str = Field(..., min_length=5)
    confidence: ConfidenceLevel = "medium"


class RoadmapStep(CamelModel):
    phase: str = Field(..., min_length=3)
    title: str = Field(..., min_length=3)
    description: str = Field(..., min_length=5)
    timeframe: str = Field(..., min_length=3)
    dependencies: List[str] = Field(default_factory=list)


class Results(CamelModel):
    business_idea: BusinessIdea
    feasibility_scores: List[FeasibilityScore] = Field(..., min_length=4, max_length=4)
    roadmap: List[RoadmapStep] = Field(..., min_length=4, max_length=4)
    pitch_summary: str = Field(..., min_length=10)

    @model_validator(mode="after")
    def _check_fixed_order(self) -> "Results":
        keys = [score.icon_key for score in self.feasibility_scores]
        if keys != SCORE_ORDER:
            raise ValueError(f"feasibilityScores must be ordered {SCORE_ORDER}, got {keys}")
        phases = [step.phase for step in self.roadmap]
        if phases != ROADMAP_PHASES:
            raise ValueError(f"roadmap must be labeled {ROADMAP_PHASES}, got {phases}")
        return self


class RevenueSimulation(CamelModel):
    year1_revenue_min: int = Field(..., ge=0, alias="year1RevenueMin")
    year1_revenue_max: int = Field(..., ge=0, alias="year1RevenueMax")
    year1_profit_min: int = Field(..., ge=0, alias="year1ProfitMin")
    year1_profit_max: int = Field(..., ge=0, alias="year1ProfitMax")
    currency: str = Field(default="USD", min_length=1)
    notes: str = Field(..., min_length=5)
    disclaimer: str = Field(..., min_length=10)

    @model_validator(mode="after")
    def _check_bounds(self) -> "RevenueSimulation":
        if self.year1_revenue_min > self.year1_revenue_max:
            raise ValueError("year1RevenueMin must not exceed year1RevenueMax")
        if self.year1_profit_min > self.year1_profit_max:
            raise ValueError("year1ProfitMin must not exceed year1ProfitMax")
        return self


class DecisionSupport(CamelModel):
    pros: List[str] = Field(..., min_length=2)
    cons: List[str] = Field(..., min_length=2)
    assumptions: List[str] = Field(..., min_length=2)
    risks: List[str] = Field(..., min_length=2)
    mitigations: List[str] = Field(..., min_length=2)
    revenue_simulation: RevenueSimulation
    explainability: str = Field(..., min_length=10)
    budget_suitability: BudgetSuitability
    ease_of_execution: EaseOfExecution
    additional_warnings: List[str] = Field(default_factory=list)


class EthicalSafeguards(CamelModel):
    bias_checks: List[str] = Field(..., min_length=1)
    inclusivity_notes: List[str] = Field(..., min_length=1)
    harm_avoidance: List[str] = Field(..., min_length=1)
    safety_score: Optional[int] = Field(default=None, ge=0, le=100)


class LocalAdaptation(CamelModel):
    region_focus: str = Field(..., min_length=2)
    local_economy_tie: str = Field(..., min_length=5)
    accessibility_notes: str = Field(..., min_length=5)
    market_conditions: str = ""
    cultural_considerations: str = ""


class ResponseMetadata(CamelModel):
    model_config = ConfigDict(protected_namespaces=())

    generated_at: str
    model_primary: str
    model_secondary: str
    processing_time_ms: int = Field(..., ge=0)
    confidence: ConfidenceLevel


class GenerationResponse(CamelModel):
    """FinalResponse — what the frontend receives."""

    result_id: str = Field(..., min_length=1)
    session_id: Optional[str] = None
    results: Results
    ideas: List[IdeaOption] = Field(..., min_length=3, max_length=5)
    decision_support: DecisionSupport
    ethical_safeguards: EthicalSafeguards
    local_adaptation: LocalAdaptation
    metadata: ResponseMetadata


class ErrorResponse(CamelModel):
    error: str
    session_id: Optional[str] = None
    timestamp: str
