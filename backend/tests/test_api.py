"""API tests — /generate, /feedback, session/result retrieval, rate limiting, errors."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from ideagen.config import ModelRoute, Settings
from ideagen.dependencies import get_app_settings, get_orchestrator, get_rate_limiter, get_stores
from ideagen.main import app, sweep_expired
from ideagen.services.auth_utils import create_access_token
from ideagen.services.fallback_templates import FALLBACK_TEMPLATES
from ideagen.services.orchestrator import AIOrchestrator
from ideagen.services.rate_limiter import FixedWindowRateLimiter
from ideagen.services.response_formatter import ERROR_MESSAGES, GENERIC_ERROR_MESSAGE
from ideagen.services.storage import build_memory_stores

from factories import SCENARIO_A, FakeProvider, sample_ai_output

TEST_SETTINGS = Settings(jwt_secret="test-secret", store_sweep_interval_seconds=0)
ROUTE = ModelRoute("gemini", "gemini-model", 0.7, 2000, "IDEA_GENERATION")
MICRO_RURAL_TITLE = FALLBACK_TEMPLATES["micro"]["rural"]["results"]["businessIdea"]["title"]

client = TestClient(app)


class Harness:
    """Holds the injected collaborators so a test can script them."""

    def __init__(self):
        self.stores = build_memory_stores()
        self.primary = FakeProvider("gemini", [])
        self.limiter = FixedWindowRateLimiter(max_requests=100, window_seconds=60)

    def orchestrator(self):
        return AIOrchestrator(primary=self.primary, primary_route=ROUTE)

    def reply_with(self, *outputs):
        self.primary.replies.extend(json.dumps(o) if isinstance(o, dict) else o for o in outputs)


@pytest.fixture(autouse=True)
def harness():
    h = Harness()
    app.dependency_overrides[get_stores] = lambda: h.stores
    app.dependency_overrides[get_orchestrator] = h.orchestrator
    app.dependency_overrides[get_rate_limiter] = lambda: h.limiter
    app.dependency_overrides[get_app_settings] = lambda: TEST_SETTINGS
    yield h
    app.dependency_overrides.clear()


# ===================================================================== #
#  General                                                                #
# ===================================================================== #

class TestGeneral:
    def test_root(self):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "generate" in resp.json()["endpoints"]

    def test_health(self, harness):
        harness.stores.feedback.append({"sessionId": "s1", "rating": "up"})
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["ai"] == {"primaryAvailable": True, "secondaryAvailable": False}
        assert data["storage"] == {"sessions": 0, "contexts": 0, "results": 0, "feedback": 1, "mode": "memory"}


# ===================================================================== #
#  /generate                                                              #
# ===================================================================== #

class TestGenerate:
    def test_success(self, harness):
        harness.reply_with(sample_ai_output())
        resp = client.post("/generate", json={**SCENARIO_A, "sessionId": "session-1"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["sessionId"] == "session-1"
        assert data["results"]["businessIdea"]["title"] == "Weekend Cooking Classes for Kids"
        assert [s["iconKey"] for s in data["results"]["feasibilityScores"]] == ["market", "execution", "capital", "risk"]
        assert 3 <= len(data["ideas"]) <= 5

    def test_ai_unavailable_returns_fallback(self, harness):
        harness.primary = FakeProvider("gemini", [], configured=False)
        resp = client.post("/generate", json=SCENARIO_A)
        assert resp.status_code == 200
        assert resp.json()["results"]["businessIdea"]["title"] == MICRO_RURAL_TITLE
        assert resp.json()["metadata"]["confidence"] == "low"

    def test_financial_warning_attached(self, harness):
        output = sample_ai_output()
        output["decisionSupport"]["explainability"] = "Expect guaranteed returns from the first month."
        harness.reply_with(output)
        resp = client.post("/generate", json=SCENARIO_A)
        assert resp.status_code == 200
        assert any("guaranteed returns" in w for w in resp.json()["decisionSupport"]["additionalWarnings"])

    def test_biased_output_never_returned(self, harness):
        output = sample_ai_output()
        output["results"]["pitchSummary"] = "Women cannot handle the evening shift."
        harness.reply_with(output)
        resp = client.post("/generate", json=SCENARIO_A)
        assert resp.status_code == 200
        assert "women cannot" not in resp.text.lower()
        assert resp.json()["results"]["businessIdea"]["title"] == MICRO_RURAL_TITLE

    def test_identical_requests_are_not_cached(self, harness):
        harness.reply_with(sample_ai_output(), sample_ai_output())
        first = client.post("/generate", json=SCENARIO_A).json()
        second = client.post("/generate", json=SCENARIO_A).json()
        assert first["resultId"] != second["resultId"]
        assert harness.stores.contexts.count() == 1

    def test_missing_field_is_400(self):
        body = {k: v for k, v in SCENARIO_A.items() if k != "skills"}
        resp = client.post("/generate", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == ERROR_MESSAGES["invalid_input"]

    def test_oversized_field_is_400(self):
        resp = client.post("/generate", json={**SCENARIO_A, "skills": "x" * 2001})
        assert resp.status_code == 400

    def test_unsafe_input_is_400(self, harness):
        resp = client.post("/generate", json={**SCENARIO_A, "interests": "selling weapons"})
        assert resp.status_code == 400
        assert resp.json()["error"] == ERROR_MESSAGES["unsafe_input"]
        assert "weapons" not in resp.text
        assert harness.primary.calls == []

    def test_signed_in_generation_is_recorded_in_history(self, harness):
        harness.reply_with(sample_ai_output())
        token = create_access_token("user-7", settings=TEST_SETTINGS)
        headers = {"Authorization": f"Bearer {token}"}

        result_id = client.post("/generate", json=SCENARIO_A, headers=headers).json()["resultId"]
        history = client.get("/user/history", headers=headers).json()
        assert history["count"] == 1
        assert history["results"][0]["resultId"] == result_id

    def test_invalid_token_is_treated_as_anonymous(self, harness):
        harness.reply_with(sample_ai_output())
        resp = client.post("/generate", json=SCENARIO_A, headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 200
        assert harness.stores.history.count() == 0


class TestRateLimit:
    def test_budget_exhausted_is_429(self, harness):
        harness.limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60)
        harness.reply_with(sample_ai_output())

        assert client.post("/generate", json=SCENARIO_A).status_code == 200
        resp = client.post("/generate", json=SCENARIO_A)
        assert resp.status_code == 429
        assert resp.json()["error"] == ERROR_MESSAGES["rate_limited"]
        assert int(resp.headers["retry-after"]) >= 1
        assert len(harness.primary.calls) == 1


class TestServerError:
    def test_unhandled_failure_is_generic_500(self, harness):
        failing = TestClient(app, raise_server_exceptions=False)
        with patch("ideagen.services.pipeline.format_response", side_effect=RuntimeError("db password=hunter2")):
            resp = failing.post("/generate", json=SCENARIO_A)
        assert resp.status_code == 500
        assert resp.json()["error"] == GENERIC_ERROR_MESSAGE
        assert "hunter2" not in resp.text


# ===================================================================== #
#  Retrieval and feedback                                                 #
# ===================================================================== #

class TestRetrieval:
    def test_session_and_result(self, harness):
        harness.reply_with(sample_ai_output())
        data = client.post("/generate", json={**SCENARIO_A, "sessionId": "session-9"}).json()

        session = client.get("/session/session-9")
        assert session.status_code == 200
        assert session.json()["stage"] == "completed"
        assert session.json()["resultId"] == data["resultId"]

        result = client.get(f"/result/{data['resultId']}")
        assert result.status_code == 200
        assert result.json() == data

    def test_unknown_session_is_404(self):
        resp = client.get("/session/does-not-exist")
        assert resp.status_code == 404
        assert resp.json() == {"error": ERROR_MESSAGES["not_found"]}

    def test_unknown_result_is_404(self):
        assert client.get("/result/does-not-exist").status_code == 404


class TestFeedback:
    def test_feedback_recorded_and_summarized(self):
        assert client.post("/feedback", json={"sessionId": "session-1", "rating": "up"}).json() == {
            "status": "ok",
            "message": "Thank you for your feedback!",
        }
        client.post("/feedback", json={"sessionId": "session-2", "rating": "down", "notes": "too generic"})

        summary = client.get("/admin/feedback-summary").json()
        assert summary == {"total": 2, "positive": 1, "negative": 1, "positiveRate": 50.0}

    @pytest.mark.parametrize(
        "body",
        [
            {"sessionId": "session-1", "rating": "meh"},
            {"sessionId": "s", "rating": "up"},
            {"rating": "up"},
            {"sessionId": "session-1", "rating": "up", "ideaIndex": 9},
        ],
    )
    def test_invalid_feedback_is_400(self, body):
        resp = client.post("/feedback", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == ERROR_MESSAGES["invalid_input"]


class TestSweep:
    def test_sweep_purges_stores_and_idle_limiter_windows(self, harness):
        clock = {"now": 0.0}
        harness.stores = build_memory_stores(ttl_seconds=10, clock=lambda: clock["now"])
        harness.limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=10, clock=lambda: clock["now"])
        harness.stores.sessions.set("s1", {"stage": "completed"}, 10)
        harness.limiter.hit("1.2.3.4")

        clock["now"] = 10.0
        sweep_expired(app)
        assert harness.stores.sessions.count() == 0
        assert harness.limiter.purge() == 0
        assert harness.limiter.hit("1.2.3.4") is True
