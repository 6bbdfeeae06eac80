"""Shared builders for the test suite: requests, contexts, AI output, fake providers."""

import copy
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from ideagen.schemas.request_schema import GenerateRequest
from ideagen.services.ai_providers import AIProvider
from ideagen.services.context_builder import build_context
from ideagen.services.errors import ProviderError
from ideagen.services.normalizer import normalize

SCENARIO_A = {
    "skills": "teaching, cooking",
    "interests": "food, kids",
    "budget": "under-1k",
    "locationType": "rural",
    "targetAudience": "local families",
}


def make_request(**overrides) -> GenerateRequest:
    data = {**SCENARIO_A, **overrides}
    return GenerateRequest.model_validate(data)


def make_context(flagged_topics=(), **overrides):
    return build_context(normalize({**SCENARIO_A, **overrides}), flagged_topics)


_SAMPLE_AI_OUTPUT = {
    "results": {
        "businessIdea": {
            "title": "Weekend Cooking Classes for Kids",
            "description": "Small-group cooking lessons at home where children learn simple, healthy recipes.",
            "whyItFits": "Combines your teaching and cooking skills and needs only your own kitchen.",
        },
        "feasibilityScores": [
            {"label": "Market Demand", "value": 66, "iconKey": "market", "description": "Parents look for weekend activities"},
            {"label": "Ease of Execution", "value": 72, "iconKey": "execution", "description": "Uses skills you already have"},
            {"label": "Capital Efficiency", "value": 80, "iconKey": "capital", "description": "Ingredients are the main cost"},
            {"label": "Risk Level", "value": 62, "iconKey": "risk", "description": "Low cost to try a first class"},
        ],
        "roadmap": [
            {"phase": "Phase 1", "title": "Plan Recipes", "description": "Pick six simple recipes for children.", "timeframe": "Week 1"},
            {"phase": "Phase 2", "title": "Trial Class", "description": "Run one free trial class for neighbors.", "timeframe": "Week 2"},
            {"phase": "Phase 3", "title": "Weekly Schedule", "description": "Offer paid weekend sessions.", "timeframe": "Month 1-2"},
            {"phase": "Phase 4", "title": "Grow Groups", "description": "Add a second group and holiday workshops.", "timeframe": "Month 3-6"},
        ],
        "pitchSummary": "Fun, affordable cooking lessons that teach kids healthy habits close to home.",
    },
    "ideas": [
        {
            "title": "Weekend Cooking Classes for Kids",
            "description": "Small-group cooking lessons held at home on weekends.",
            "whyItFits": "Uses teaching and cooking skills with very low cost.",
            "localAdaptation": "Families nearby value trusted local activities.",
        },
        {
            "title": "Home Tiffin Service",
            "description": "Daily home-cooked lunch boxes for nearby families.",
            "whyItFits": "Cooking at small scale keeps costs low.",
            "localAdaptation": "Busy households appreciate homemade meals.",
        },
        {
            "title": "After-School Tutoring",
            "description": "Homework help sessions for primary school children.",
            "whyItFits": "Teaching skills transfer directly to tutoring.",
            "localAdaptation": "Few tutoring options exist nearby.",
        },
    ],
    "decisionSupport": {
        "pros": ["Low startup cost", "Uses existing skills"],
        "cons": ["Limited group size", "Weekend-only income"],
        "assumptions": ["Parents will pay for classes", "Kitchen space is available"],
        "risks": ["Food allergies", "Slow early sign-ups"],
        "mitigations": ["Ask about allergies at sign-up", "Offer a trial class"],
        "revenueSimulation": {
            "year1RevenueMin": 400,
            "year1RevenueMax": 1800,
            "year1ProfitMin": 40,
            "year1ProfitMax": 500,
            "currency": "USD",
            "notes": "Assumes two weekend classes per week.",
            "disclaimer": "Rough estimate only; actual results vary.",
        },
        "explainability": "Chosen because it fits a micro budget and your teaching and cooking skills.",
        "budgetSuitability": "good",
        "easeOfExecution": "easy",
    },
    "ethicalSafeguards": {
        "biasChecks": ["Open to all families"],
        "inclusivityNotes": ["Sliding-scale prices possible"],
        "harmAvoidance": ["Food hygiene considered"],
    },
    "localAdaptation": {
        "regionFocus": "Rural villages",
        "localEconomyTie": "Builds on home cooking traditions",
        "accessibilityNotes": "Works without internet access",
    },
}


def sample_ai_output() -> dict:
    """A complete, clean AI output. Returns a fresh copy on every call."""
    return copy.deepcopy(_SAMPLE_AI_OUTPUT)


class FakeProvider(AIProvider):
    """Scripted provider: each call pops the next reply (str) or raises it (Exception)."""

    def __init__(self, name="fake", replies=(), configured=True, model=None):
        super().__init__(api_key="test-key" if configured else "", model=model or f"{name}-model")
        self.name = name
        self.replies = list(replies)
        self.calls = []

    async def complete(self, system_prompt, user_prompt, temperature=0.7, max_tokens=2000):
        self.calls.append(
            {
                "system": system_prompt,
                "user": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if not self.is_configured:
            raise ProviderError(self.name, "API key not configured")
        if not self.replies:
            raise ProviderError(self.name, "no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def _build_request(self, system_prompt, user_prompt, temperature, max_tokens):
        raise NotImplementedError

    def _extract_text(self, data):
        raise NotImplementedError
