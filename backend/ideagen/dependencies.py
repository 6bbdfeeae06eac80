"""Shared FastAPI dependencies.

Each one is a seam tests replace through `app.dependency_overrides`.
Process-wide singletons are built lazily on first use.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status

from .config import Settings, get_settings
from .services.orchestrator import AIOrchestrator
from .services.pipeline import GenerationPipeline
from .services.rate_limiter import FixedWindowRateLimiter
from .services.response_formatter import ERROR_MESSAGES
from .services.storage import Stores, build_stores


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def _default_stores() -> Stores:
    return build_stores(get_settings())


@lru_cache(maxsize=1)
def _default_orchestrator() -> AIOrchestrator:
    return AIOrchestrator.from_settings(get_settings())


@lru_cache(maxsize=1)
def _default_rate_limiter() -> FixedWindowRateLimiter:
    settings = get_settings()
    return FixedWindowRateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)


def get_stores() -> Stores:
    return _default_stores()


def get_orchestrator() -> AIOrchestrator:
    return _default_orchestrator()


def get_rate_limiter() -> FixedWindowRateLimiter:
    return _default_rate_limiter()


def get_pipeline(
    orchestrator: AIOrchestrator = Depends(get_orchestrator),
    stores: Stores = Depends(get_stores),
    settings: Settings = Depends(get_app_settings),
) -> GenerationPipeline:
    return GenerationPipeline(orchestrator, stores, settings)


def enforce_rate_limit(
    request: Request,
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> None:
    """Raise 429 once the caller has spent its request budget for the window."""
    client_key = request.client.host if request.client else "unknown"
    if not limiter.hit(client_key):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=ERROR_MESSAGES["rate_limited"],
            headers={"Retry-After": str(limiter.retry_after(client_key))},
        )
