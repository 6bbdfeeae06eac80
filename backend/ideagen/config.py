"""Runtime configuration — everything is read from the environment.

Call `get_settings()` everywhere; the result is built once per process.
Tests build their own `Settings(...)` directly and inject it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_str(key: str, default: str) -> str:
    return os.getenv(key, default).strip()


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(key: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(key, default).split(",") if item.strip()]


@dataclass(frozen=True)
class ModelRoute:
    """One model role: which provider serves it and how it is called."""

    provider: str
    model: str
    temperature: float
    max_tokens: int
    role: str


@dataclass(frozen=True)
class Settings:
    # ── AI routing ──────────────────────────────────────────────────────
    primary: ModelRoute = field(
        default_factory=lambda: ModelRoute("gemini", "gemini-2.0-flash", 0.7, 2000, "IDEA_GENERATION")
    )
    secondary: ModelRoute = field(
        default_factory=lambda: ModelRoute("openai", "gpt-4o", 0.3, 1500, "STRUCTURING_SAFETY")
    )
    fallback_provider: str = "openai"
    fallback_model: str = "gpt-4o-mini"
    secondary_enabled: bool = True
    ai_request_timeout: float = 55.0

    # ── Provider credentials ────────────────────────────────────────────
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""

    # ── Storage ─────────────────────────────────────────────────────────
    storage_backend: str = "memory"
    database_url: str = "sqlite:///./ideagen.db"
    cache_ttl_seconds: int = 3600
    store_sweep_interval_seconds: int = 300

    # ── Rate limiting ───────────────────────────────────────────────────
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: int = 60

    # ── Auth ────────────────────────────────────────────────────────────
    jwt_secret: str = "ideagen-dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"

    # ── Server ──────────────────────────────────────────────────────────
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:8080"])
    debug: bool = False

    def api_key_for(self, provider: str) -> str:
        return {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "gemini": self.gemini_api_key,
        }.get(provider, "")


def load_settings() -> Settings:
    """Build a Settings object from the current environment."""
    return Settings(
        primary=ModelRoute(
            provider=_env_str("PRIMARY_AI_PROVIDER", "gemini").lower(),
            model=_env_str("PRIMARY_AI_MODEL", "gemini-2.0-flash"),
            temperature=_env_float("PRIMARY_AI_TEMPERATURE", 0.7),
            max_tokens=_env_int("PRIMARY_AI_MAX_TOKENS", 2000),
            role="IDEA_GENERATION",
        ),
        secondary=ModelRoute(
            provider=_env_str("SECONDARY_AI_PROVIDER", "openai").lower(),
            model=_env_str("SECONDARY_AI_MODEL", "gpt-4o"),
            temperature=_env_float("SECONDARY_AI_TEMPERATURE", 0.3),
            max_tokens=_env_int("SECONDARY_AI_MAX_TOKENS", 1500),
            role="STRUCTURING_SAFETY",
        ),
        fallback_provider=_env_str("FALLBACK_AI_PROVIDER", "openai").lower(),
        fallback_model=_env_str("FALLBACK_AI_MODEL", "gpt-4o-mini"),
        secondary_enabled=_env_bool("SECONDARY_AI_ENABLED", True),
        ai_request_timeout=_env_float("AI_REQUEST_TIMEOUT", 55.0),
        openai_api_key=_env_str("OPENAI_API_KEY", ""),
        anthropic_api_key=_env_str("ANTHROPIC_API_KEY", ""),
        gemini_api_key=_env_str("GEMINI_API_KEY", ""),
        storage_backend=_env_str("STORAGE_BACKEND", "memory").lower(),
        database_url=_env_str("DATABASE_URL", "sqlite:///./ideagen.db"),
        cache_ttl_seconds=_env_int("CACHE_TTL_SECONDS", 3600),
        store_sweep_interval_seconds=_env_int("STORE_SWEEP_INTERVAL_SECONDS", 300),
        rate_limit_max_requests=_env_int("RATE_LIMIT_MAX_REQUESTS", 10),
        rate_limit_window_seconds=_env_int("RATE_LIMIT_WINDOW_SECONDS", 60),
        jwt_secret=_env_str("JWT_SECRET", "ideagen-dev-secret-change-in-production"),
        jwt_algorithm=_env_str("JWT_ALGORITHM", "HS256"),
        cors_origins=_env_list("CORS_ORIGINS", "http://localhost:8080"),
        debug=_env_bool("DEBUG", False),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
