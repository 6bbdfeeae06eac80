"""Generation pipeline tests — happy path, every fallback route, persistence, caching."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import json
from unittest.mock import patch

import pytest

from ideagen.config import ModelRoute, Settings
from ideagen.services.auth_utils import AuthUser
from ideagen.services.errors import InputSafetyError
from ideagen.services.fallback_templates import FALLBACK_TEMPLATES
from ideagen.services.orchestrator import AIOrchestrator
from ideagen.services.pipeline import HISTORY_LIMIT, GenerationPipeline
from ideagen.services.storage import build_memory_stores

from factories import FakeProvider, make_request, sample_ai_output

ROUTE = ModelRoute("gemini", "gemini-model", 0.7, 2000, "IDEA_GENERATION")
MICRO_RURAL_TITLE = FALLBACK_TEMPLATES["micro"]["rural"]["results"]["businessIdea"]["title"]
SMALL_URBAN_TITLE = FALLBACK_TEMPLATES["small"]["urban"]["results"]["businessIdea"]["title"]


def _pipeline(*replies, configured=True):
    primary = FakeProvider("gemini", list(replies), configured=configured)
    orchestrator = AIOrchestrator(primary=primary, primary_route=ROUTE)
    return GenerationPipeline(orchestrator, build_memory_stores(), Settings()), primary


def _run(pipeline, request=None, user=None):
    return asyncio.run(pipeline.run(request or make_request(), user))


def _reply(output=None):
    return json.dumps(output if output is not None else sample_ai_output())


# ===================================================================== #
#  Happy path                                                             #
# ===================================================================== #

class TestCompleted:
    def test_ai_result_is_returned_and_persisted(self):
        pipeline, primary = _pipeline(_reply())
        response = _run(pipeline, make_request(sessionId="session-1"))

        assert response["sessionId"] == "session-1"
        assert response["results"]["businessIdea"]["title"] == "Weekend Cooking Classes for Kids"
        assert response["metadata"]["modelPrimary"] == "gemini-model"
        assert len(primary.calls) == 1

        session = pipeline.stores.sessions.get("session-1")
        assert session["stage"] == "completed"
        assert session["resultId"] == response["resultId"]
        assert session["completedAt"]
        assert session["input"]["locationType"] == "rural"
        assert pipeline.stores.results.get(response["resultId"]) == response

    def test_session_id_generated_when_absent(self):
        pipeline, _ = _pipeline(_reply())
        response = _run(pipeline)
        assert response["sessionId"]
        assert pipeline.stores.sessions.get(response["sessionId"]) is not None

    def test_safeguards_section_generated(self):
        pipeline, _ = _pipeline(_reply())
        safeguards = _run(pipeline)["ethicalSafeguards"]
        assert safeguards["biasChecks"]
        assert any("micro" in note for note in safeguards["inclusivityNotes"])

    def test_requirements_beyond_budget_downgrade_suitability(self):
        output = sample_ai_output()
        output["decisionSupport"]["requirements"] = ["rental space", "basic cooking tools"]
        pipeline, _ = _pipeline(_reply(output), _reply())

        assert _run(pipeline)["decisionSupport"]["budgetSuitability"] == "challenging"
        assert _run(pipeline)["decisionSupport"]["budgetSuitability"] == "moderate"

    def test_internal_keys_never_reach_the_client(self):
        pipeline, _ = _pipeline(_reply())
        response = _run(pipeline)
        assert "_simulation" not in response
        assert "_meta" not in response


# ===================================================================== #
#  Scenarios                                                              #
# ===================================================================== #

class TestScenarios:
    def test_no_provider_uses_budget_location_template(self):
        pipeline, primary = _pipeline(configured=False)
        response = _run(pipeline, make_request(sessionId="s-a"))

        assert primary.calls == []
        assert response["results"]["businessIdea"]["title"] == MICRO_RURAL_TITLE
        assert response["metadata"]["modelPrimary"] == "none"
        assert response["metadata"]["confidence"] == "low"
        session = pipeline.stores.sessions.get("s-a")
        assert session["stage"] == "fallback"
        assert session["fallbackReason"] == "No AI provider configured"

    def test_misleading_financial_language_is_a_warning(self):
        output = sample_ai_output()
        output["decisionSupport"]["explainability"] = "This idea offers guaranteed returns within months."
        pipeline, _ = _pipeline(_reply(output))
        response = _run(pipeline)

        assert response["results"]["businessIdea"]["title"] == "Weekend Cooking Classes for Kids"
        warnings = response["decisionSupport"]["additionalWarnings"]
        assert any("guaranteed returns" in w for w in warnings)

    def test_biased_output_is_replaced_by_fallback(self):
        output = sample_ai_output()
        output["ideas"][1]["whyItFits"] = "Women cannot run a delivery route, so hire only men."
        pipeline, _ = _pipeline(_reply(output))
        response = _run(pipeline, make_request(sessionId="s-c"))

        assert "women cannot" not in json.dumps(response).lower()
        assert response["results"]["businessIdea"]["title"] == MICRO_RURAL_TITLE
        assert pipeline.stores.sessions.get("s-c")["fallbackReason"].startswith("Output blocked by safety filter")

    def test_identical_requests_get_independent_results(self):
        pipeline, _ = _pipeline(_reply(), _reply())
        first = _run(pipeline)
        second = _run(pipeline)

        assert first["resultId"] != second["resultId"]
        assert first["sessionId"] != second["sessionId"]
        assert pipeline.stores.contexts.count() == 1
        assert pipeline.stores.results.count() == 2


# ===================================================================== #
#  Failure routes                                                         #
# ===================================================================== #

class TestFallbackRoutes:
    def test_unparseable_ai_output(self):
        pipeline, _ = _pipeline("Sorry, no JSON today.")
        response = _run(pipeline, make_request(sessionId="s1"))
        assert response["results"]["businessIdea"]["title"] == MICRO_RURAL_TITLE
        assert pipeline.stores.sessions.get("s1")["fallbackReason"].startswith("AI generation failed")

    def test_output_missing_required_sections(self):
        pipeline, _ = _pipeline(json.dumps({"ideas": []}))
        response = _run(pipeline, make_request(sessionId="s1"))
        assert response["metadata"]["modelPrimary"] == "none"
        assert pipeline.stores.sessions.get("s1")["fallbackReason"].startswith("Unusable AI output")

    def test_unexpected_error_uses_default_template(self):
        pipeline, _ = _pipeline(_reply())
        with patch("ideagen.services.pipeline.process", side_effect=RuntimeError("boom")):
            response = _run(pipeline, make_request(sessionId="s1"))
        assert response["results"]["businessIdea"]["title"] == SMALL_URBAN_TITLE
        assert pipeline.stores.sessions.get("s1")["stage"] == "fallback"

    def test_urban_small_budget_template(self):
        pipeline, _ = _pipeline(configured=False)
        response = _run(pipeline, make_request(budget="5k-20k", locationType="urban"))
        assert response["results"]["businessIdea"]["title"] == SMALL_URBAN_TITLE


class TestInputSafety:
    def test_blocked_input_raises(self):
        pipeline, primary = _pipeline(_reply())
        with pytest.raises(InputSafetyError):
            _run(pipeline, make_request(interests="weapons and explosives"))
        assert primary.calls == []
        assert pipeline.stores.sessions.count() == 0

    def test_flagged_topic_is_carried_into_context(self):
        pipeline, _ = _pipeline(_reply())
        response = _run(pipeline, make_request(interests="craft beer and alcohol pairing", sessionId="s1"))
        assert response["resultId"]
        context = pipeline.stores.sessions.get("s1")["context"]
        assert context["metadata"]["flaggedTopics"] == ["alcohol"]


# ===================================================================== #
#  User history                                                           #
# ===================================================================== #

class TestHistory:
    def test_signed_in_user_gets_history_entry(self):
        pipeline, _ = _pipeline(_reply())
        user = AuthUser(uid="user-1")
        response = _run(pipeline, make_request(sessionId="s1"), user)

        history = pipeline.stores.history.get("user-1")
        assert history == [
            {
                "resultId": response["resultId"],
                "sessionId": "s1",
                "title": "Weekend Cooking Classes for Kids",
                "createdAt": response["metadata"]["generatedAt"],
            }
        ]
        assert pipeline.stores.sessions.get("s1")["userId"] == "user-1"

    def test_anonymous_run_has_no_history(self):
        pipeline, _ = _pipeline(_reply())
        _run(pipeline)
        assert pipeline.stores.history.count() == 0

    def test_history_is_capped(self):
        pipeline, _ = _pipeline(configured=False)
        user = AuthUser(uid="user-1")
        pipeline.stores.history.set("user-1", [{"resultId": f"old-{i}"} for i in range(HISTORY_LIMIT)])
        _run(pipeline, user=user)
        history = pipeline.stores.history.get("user-1")
        assert len(history) == HISTORY_LIMIT
        assert history[0]["resultId"] == "old-1"
