"""AI orchestrator — primary generation, optional secondary structuring.

Flow
----
1. Primary provider, creativity-biased temperature.
2. Any ProviderError → one retry against the fallback provider (if it is
   a different, configured vendor).
3. Outermost `{...}` span extracted and parsed. Malformed JSON fails the
   whole call; no partial recovery.
4. Optional secondary pass: the parsed primary JSON is handed to the
   structuring model, whose output goes through the same extract/parse.
5. `success: False` results are never retried here; the pipeline falls
   back to canned content instead.

Every stage is recorded in a monotonic trace returned in `metadata`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import httpx

from ..config import ModelRoute, Settings
from .ai_providers import AIProvider, build_provider, parse_json_object
from .errors import AIOutputParseError, ProviderError
from .prompts import build_secondary_user_prompt
from .timing import OrchestrationTrace

logger = logging.getLogger(__name__)

_RAW_LOG_LIMIT = 500


@dataclass
class OrchestrationResult:
    success: bool
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class AIOrchestrator:
    """Runs the two-model generation stage over injected providers."""

    def __init__(
        self,
        primary: AIProvider,
        primary_route: ModelRoute,
        secondary: Optional[AIProvider] = None,
        secondary_route: Optional[ModelRoute] = None,
        fallback: Optional[AIProvider] = None,
        secondary_enabled: bool = True,
    ):
        self.primary = primary
        self.primary_route = primary_route
        self.secondary = secondary
        self.secondary_route = secondary_route
        self.fallback = fallback
        self.secondary_enabled = secondary_enabled and secondary is not None and secondary_route is not None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AIOrchestrator":
        primary = build_provider(settings.primary.provider, settings.primary.model, settings, transport)
        secondary = build_provider(settings.secondary.provider, settings.secondary.model, settings, transport)
        fallback = build_provider(settings.fallback_provider, settings.fallback_model, settings, transport)
        return cls(
            primary=primary,
            primary_route=settings.primary,
            secondary=secondary,
            secondary_route=settings.secondary,
            fallback=fallback,
            secondary_enabled=settings.secondary_enabled,
        )

    # ── Availability ─────────────────────────────────────────────────────

    def check_availability(self) -> Dict[str, Any]:
        fallback_available = self._fallback_usable_for(self.primary)
        return {
            "primaryProvider": self.primary.name,
            "primaryAvailable": self.primary.is_configured,
            "secondaryEnabled": self.secondary_enabled,
            "secondaryAvailable": bool(self.secondary_enabled and self.secondary.is_configured),
            "fallbackProvider": self.fallback.name if self.fallback else None,
            "fallbackAvailable": fallback_available,
            "anyAvailable": self.primary.is_configured or fallback_available,
        }

    # ── Provider call with fallback ─────────────────────────────────────

    def _fallback_usable_for(self, provider: AIProvider) -> bool:
        return (
            self.fallback is not None
            and self.fallback.is_configured
            and self.fallback.name != provider.name
        )

    async def _call_with_fallback(
        self,
        stage: str,
        provider: AIProvider,
        route: ModelRoute,
        system_prompt: str,
        user_prompt: str,
        trace: OrchestrationTrace,
    ) -> Tuple[str, AIProvider, bool]:
        """Return (text, provider_used, used_fallback)."""
        started = trace.now_ms()
        try:
            text = await provider.complete(system_prompt, user_prompt, route.temperature, route.max_tokens)
            trace.record(stage, provider=provider.name, model=provider.model, started_ms=started)
            return text, provider, False
        except ProviderError as exc:
            trace.record(stage, provider=provider.name, model=provider.model, started_ms=started, error=str(exc))
            if not self._fallback_usable_for(provider):
                raise
            logger.warning("[AI] %s provider %s failed (%s); falling back to %s", stage, provider.name, exc, self.fallback.name)

        started = trace.now_ms()
        try:
            text = await self.fallback.complete(system_prompt, user_prompt, route.temperature, route.max_tokens)
        except ProviderError as exc:
            trace.record(
                f"{stage}_fallback",
                provider=self.fallback.name,
                model=self.fallback.model,
                started_ms=started,
                error=str(exc),
            )
            logger.error("[AI] %s fallback provider %s also failed: %s", stage, self.fallback.name, exc)
            raise
        trace.record(f"{stage}_fallback", provider=self.fallback.name, model=self.fallback.model, started_ms=started)
        return text, self.fallback, True

    @staticmethod
    def _parse(stage: str, text: str) -> Dict[str, Any]:
        try:
            return parse_json_object(text)
        except AIOutputParseError:
            # Raw model text stays server-side
            logger.warning("[AI] %s JSON parse failed; raw (first %d chars): %s", stage, _RAW_LOG_LIMIT, text[:_RAW_LOG_LIMIT])
            raise

    # ── Orchestration ───────────────────────────────────────────────────

    async def orchestrate(
        self,
        primary_system_prompt: str,
        user_prompt: str,
        secondary_system_prompt: Optional[str] = None,
        skip_secondary: bool = False,
    ) -> OrchestrationResult:
        trace = OrchestrationTrace()
        metadata: Dict[str, Any] = {
            "primaryModel": self.primary.model,
            "secondaryModel": None,
            "primaryProvider": self.primary.name,
            "usedProviderFallback": False,
            "trace": trace.entries,
        }
        run_secondary = self.secondary_enabled and bool(secondary_system_prompt) and not skip_secondary

        try:
            logger.info("[AI] Calling primary model (%s/%s)", self.primary.name, self.primary.model)
            text, used, fell_back = await self._call_with_fallback(
                "primary", self.primary, self.primary_route, primary_system_prompt, user_prompt, trace
            )
            metadata["primaryModel"] = used.model
            metadata["primaryProvider"] = used.name
            metadata["usedProviderFallback"] = fell_back

            started = trace.now_ms()
            output = self._parse("primary", text)
            trace.record("primary_parse", started_ms=started)

            if run_secondary:
                logger.info("[AI] Calling secondary model (%s/%s)", self.secondary.name, self.secondary.model)
                text, used, fell_back = await self._call_with_fallback(
                    "secondary",
                    self.secondary,
                    self.secondary_route,
                    secondary_system_prompt,
                    build_secondary_user_prompt(output),
                    trace,
                )
                metadata["secondaryModel"] = used.model
                metadata["usedProviderFallback"] = metadata["usedProviderFallback"] or fell_back

                started = trace.now_ms()
                output = self._parse("secondary", text)
                trace.record("secondary_parse", started_ms=started)

        except (ProviderError, AIOutputParseError) as exc:
            trace.record("error", error=str(exc))
            metadata["totalProcessingTimeMs"] = trace.now_ms()
            logger.warning("[AI] Orchestration failed after %dms: %s", metadata["totalProcessingTimeMs"], exc)
            return OrchestrationResult(success=False, error=str(exc), metadata=metadata)

        metadata["totalProcessingTimeMs"] = trace.now_ms()
        logger.info(
            "[AI] Orchestration complete in %dms (fallback=%s)",
            metadata["totalProcessingTimeMs"],
            metadata["usedProviderFallback"],
        )
        return OrchestrationResult(success=True, output=output, metadata=metadata)
