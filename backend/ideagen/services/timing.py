"""
Timing Utilities for Latency Instrumentation

Stage timers for the generation pipeline and the monotonic trace the AI
orchestrator returns in its metadata.
"""

import logging
import time
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def log_timing(stage: str, action: str, duration_ms: Optional[float] = None):
    """Log a timing event in standard format."""
    if duration_ms is not None:
        logger.info("[TIMING] %s: %s duration=%.0fms", stage, action, duration_ms)
    else:
        logger.info("[TIMING] %s: %s", stage, action)


class StepTimer:
    """
    Times the stages of one pipeline run.

    Usage:
        timer = StepTimer("pipeline")
        with timer.step("normalize"):
            profile = normalize(raw)
        async with timer.async_step("orchestrate"):
            result = await orchestrator.orchestrate(...)
        total_ms = timer.summary()
    """

    def __init__(self, name: str):
        self.name = name
        self.steps: Dict[str, float] = {}
        self.start_time = time.perf_counter()

    @contextmanager
    def step(self, step_name: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.steps[step_name] = duration_ms
            log_timing(self.name, step_name, duration_ms)

    @asynccontextmanager
    async def async_step(self, step_name: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.steps[step_name] = duration_ms
            log_timing(self.name, step_name, duration_ms)

    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self.start_time) * 1000)

    def summary(self) -> int:
        """Log the total and return it in whole milliseconds."""
        total_ms = self.elapsed_ms()
        log_timing(self.name, "TOTAL", total_ms)
        return total_ms


class OrchestrationTrace:
    """Append-only list of stage events on a monotonic clock.

    Each entry: {stage, provider, model, atMs, elapsedMs, error?}. `atMs`
    is the offset from trace start, `elapsedMs` the stage's own duration.
    """

    def __init__(self):
        self._origin = time.monotonic()
        self.entries: List[Dict[str, Any]] = []

    def now_ms(self) -> int:
        return int((time.monotonic() - self._origin) * 1000)

    def record(
        self,
        stage: str,
        *,
        provider: str = "",
        model: str = "",
        started_ms: Optional[int] = None,
        error: Optional[str] = None,
    ) -> Dict[str, Any]:
        at_ms = self.now_ms()
        entry: Dict[str, Any] = {
            "stage": stage,
            "provider": provider,
            "model": model,
            "atMs": at_ms,
            "elapsedMs": at_ms - started_ms if started_ms is not None else 0,
        }
        if error:
            entry["error"] = error
        self.entries.append(entry)
        return entry
