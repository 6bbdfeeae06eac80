"""Generation pipeline — one request in, one FinalResponse out.

Stages
------
1. normalize          raw request → NormalizedProfile
2. input safety       blocked term → InputSafetyError (HTTP 400)
3. context            cached by input hash, built otherwise
4. availability       no usable provider → fallback
5. orchestrate        primary (+ secondary) model → parsed JSON
6. simulate           realign, adjust scores, revenue, classifications
7. output safety      critical issue → fallback; warnings attached
8. safeguards section
9. format             sanitize, backfill, validate
10. persist           result, session stage, user history

Any recoverable failure after the context exists ends in the fallback
provider, so a client always gets a schema-valid response.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..config import Settings, get_settings
from ..schemas.context_schema import Context
from ..schemas.request_schema import GenerateRequest
from .auth_utils import AuthUser
from .context_builder import build_context, context_cache_key
from .errors import InputSafetyError, SimulationInputError
from .fallback_provider import get_fallback
from .feasibility_engine import calculate_confidence, process
from .normalizer import normalize
from .orchestrator import AIOrchestrator
from .prompts import build_primary_system_prompt, build_secondary_system_prompt, build_user_prompt
from .response_formatter import format_response
from .safeguards import apply_safety_filters, check_input_safety, check_output_safety, generate_ethical_safeguards
from .storage import Stores
from .timing import StepTimer

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class GenerationPipeline:
    def __init__(self, orchestrator: AIOrchestrator, stores: Stores, settings: Optional[Settings] = None):
        self.orchestrator = orchestrator
        self.stores = stores
        self.settings = settings or get_settings()

    # ── Context ──────────────────────────────────────────────────────────

    def _get_context(self, request: GenerateRequest, flagged_topics) -> Context:
        cache_key = context_cache_key(request)
        cached = self.stores.contexts.get(cache_key)
        if cached is not None:
            logger.info("[PIPELINE] Context cache hit %s", cache_key[:12])
            return Context.model_validate(cached)

        context = build_context(normalize(request), flagged_topics)
        self.stores.contexts.set(cache_key, context.to_wire(), self.stores.ttl_seconds)
        return context

    # ── Persistence ──────────────────────────────────────────────────────

    def _save_session(self, session_id: str, request: GenerateRequest, stage: str, **extra: Any) -> None:
        session = self.stores.sessions.get(session_id) or {}
        session.update(
            {
                "sessionId": session_id,
                "input": request.to_wire(),
                "stage": stage,
                "updatedAt": _now_iso(),
                **extra,
            }
        )
        self.stores.sessions.set(session_id, session, self.stores.ttl_seconds)

    def _append_history(self, user: AuthUser, response: Dict[str, Any]) -> None:
        history = self.stores.history.get(user.uid) or []
        history.append(
            {
                "resultId": response["resultId"],
                "sessionId": response.get("sessionId"),
                "title": response["results"]["businessIdea"]["title"],
                "createdAt": response["metadata"]["generatedAt"],
            }
        )
        self.stores.history.set(user.uid, history[-HISTORY_LIMIT:])

    def _persist(
        self,
        response: Dict[str, Any],
        request: GenerateRequest,
        session_id: str,
        stage: str,
        user: Optional[AuthUser],
        **session_extra: Any,
    ) -> None:
        self.stores.results.set(response["resultId"], response, self.stores.ttl_seconds)
        extra = {"resultId": response["resultId"], **session_extra}
        if stage == "completed":
            extra["completedAt"] = _now_iso()
        if user is not None:
            extra["userId"] = user.uid
            self._append_history(user, response)
        self._save_session(session_id, request, stage, **extra)

    # ── Fallback ─────────────────────────────────────────────────────────

    def _fallback_response(
        self,
        context: Optional[Context],
        reason: str,
        request: GenerateRequest,
        session_id: str,
        timer: StepTimer,
        user: Optional[AuthUser],
    ) -> Dict[str, Any]:
        logger.warning("[PIPELINE] Using fallback response: %s", reason)
        response = format_response(
            get_fallback(context, reason),
            session_id,
            {
                "primaryModel": "none",
                "secondaryModel": "none",
                "totalProcessingTimeMs": timer.elapsed_ms(),
                "confidence": "low",
            },
        )
        self._persist(response, request, session_id, "fallback", user, fallbackReason=reason)
        timer.summary()
        return response

    # ── Entry point ──────────────────────────────────────────────────────

    async def run(self, request: GenerateRequest, user: Optional[AuthUser] = None) -> Dict[str, Any]:
        session_id = request.session_id or str(uuid.uuid4())
        timer = StepTimer("pipeline")
        logger.info(
            "[PIPELINE] Start session=%s user=%s", session_id, user.uid if user else "anonymous"
        )

        with timer.step("normalize"):
            profile = normalize(request)

        with timer.step("input_safety"):
            input_safety = check_input_safety(profile)
        if not input_safety.safe:
            logger.warning("[PIPELINE] Input rejected: %s", input_safety.reason)
            raise InputSafetyError(input_safety.reason, input_safety.flagged)
        if input_safety.flagged:
            logger.info("[PIPELINE] Proceeding with caution, flagged topics: %s", input_safety.flagged)

        context: Optional[Context] = None
        try:
            with timer.step("context"):
                context = self._get_context(request, input_safety.flagged)
            self._save_session(session_id, request, "generating", context=context.to_wire())

            availability = self.orchestrator.check_availability()
            if not availability["anyAvailable"]:
                return self._fallback_response(
                    context, "No AI provider configured", request, session_id, timer, user
                )

            async with timer.async_step("orchestrate"):
                ai_result = await self.orchestrator.orchestrate(
                    primary_system_prompt=build_primary_system_prompt(context),
                    user_prompt=build_user_prompt(context),
                    secondary_system_prompt=build_secondary_system_prompt(),
                    skip_secondary=not availability["secondaryAvailable"],
                )
            if not ai_result.success:
                return self._fallback_response(
                    context, f"AI generation failed: {ai_result.error}", request, session_id, timer, user
                )

            with timer.step("simulate"):
                try:
                    processed = process(ai_result.output, context)
                except SimulationInputError as exc:
                    return self._fallback_response(
                        context, f"Unusable AI output: {exc}", request, session_id, timer, user
                    )

            with timer.step("output_safety"):
                verdict = check_output_safety(processed, context.metadata.flagged_topics)
                filtered = apply_safety_filters(processed, verdict)
            if filtered is None:
                blocked = ", ".join(issue.type for issue in verdict.issues)
                return self._fallback_response(
                    context, f"Output blocked by safety filter ({blocked})", request, session_id, timer, user
                )

            existing = filtered.get("ethicalSafeguards")
            filtered["ethicalSafeguards"] = {
                **(existing if isinstance(existing, dict) else {}),
                **generate_ethical_safeguards(context, verdict),
            }

            with timer.step("format"):
                response = format_response(
                    filtered,
                    session_id,
                    {
                        "primaryModel": ai_result.metadata.get("primaryModel"),
                        "secondaryModel": ai_result.metadata.get("secondaryModel"),
                        "totalProcessingTimeMs": timer.elapsed_ms(),
                        "confidence": calculate_confidence(context),
                    },
                )

            self._persist(response, request, session_id, "completed", user)
            total_ms = timer.summary()
            logger.info("[PIPELINE] Completed session=%s result=%s in %dms", session_id, response["resultId"], total_ms)
            return response

        except Exception:
            logger.exception("[PIPELINE] Unexpected failure in session=%s; attempting last-chance fallback", session_id)
            # Re-raises on a second failure; the app's 500 handler takes over
            return self._fallback_response(None, "Unexpected pipeline error", request, session_id, timer, user)
