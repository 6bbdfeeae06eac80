"""Exception types raised by the generation pipeline.

Rules
-----
- Provider and parse errors are recoverable: the pipeline routes them to
  the fallback provider and never surfaces them to the client.
- InputSafetyError is user-facing (HTTP 400) and is never retried.
- ResponseContractError is a programming error: logged CRITICAL, never
  served.
"""

from __future__ import annotations

from typing import List, Optional


class PipelineError(Exception):
    """Base class for every error the generation pipeline raises on purpose."""


class ProviderError(PipelineError):
    """An AI provider call failed (HTTP error, timeout, transport, empty body, missing key)."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"[{provider}] {message}")


class AIOutputParseError(PipelineError):
    """Model text did not contain a parseable JSON object."""


class SimulationInputError(PipelineError):
    """AI output is missing sections the feasibility engine needs, or cannot be realigned."""


class ResponseContractError(PipelineError):
    """The assembled response failed the output schema even after defaulting."""

    def __init__(self, message: str, errors: Optional[List[dict]] = None):
        self.errors = errors or []
        super().__init__(message)


class InputSafetyError(PipelineError):
    """The request text matched a blocked term."""

    def __init__(self, reason: str, flagged: Optional[List[str]] = None):
        self.reason = reason
        self.flagged = flagged or []
        super().__init__(reason)
