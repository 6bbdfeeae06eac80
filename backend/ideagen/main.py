import asyncio
import logging
import os
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import get_settings
from .dependencies import get_orchestrator, get_rate_limiter, get_stores
from .routes.generate import router as generate_router
from .routes.user import router as user_router
from .services.errors import InputSafetyError
from .services.orchestrator import AIOrchestrator
from .services.response_formatter import format_error_response
from .services.storage import Stores

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def sweep_expired(app: FastAPI) -> None:
    """Reclaim expired store entries and rate-limit windows once."""
    stores = app.dependency_overrides.get(get_stores, get_stores)()
    limiter = app.dependency_overrides.get(get_rate_limiter, get_rate_limiter)()
    try:
        stores.purge_expired()
    except Exception:
        logger.exception("[STORAGE] Expiry sweep failed")
    dropped = limiter.purge()
    if dropped:
        logger.debug("Dropped %d idle rate-limit windows", dropped)


async def _sweep_loop(app: FastAPI, interval_seconds: int):
    while True:
        await asyncio.sleep(interval_seconds)
        sweep_expired(app)


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    logger.info("Starting Business Idea Generation API v%s", __version__)
    for provider in ("gemini", "openai", "anthropic"):
        logger.info("   %s key: %s", provider, "configured" if settings.api_key_for(provider) else "not set")
    logger.info("   Primary:   %s/%s", settings.primary.provider, settings.primary.model)
    logger.info(
        "   Secondary: %s/%s (%s)",
        settings.secondary.provider,
        settings.secondary.model,
        "enabled" if settings.secondary_enabled else "disabled",
    )
    logger.info("   Fallback:  %s/%s", settings.fallback_provider, settings.fallback_model)
    logger.info("   Storage:   %s", settings.storage_backend)

    sweeper = None
    if settings.store_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(_sweep_loop(app, settings.store_sweep_interval_seconds))

    yield

    if sweeper is not None:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
    logger.info("Shutting down Business Idea Generation API")


app = FastAPI(
    title="Business Idea Generation API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=bool(settings.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generate_router)
app.include_router(user_router)


@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Business Idea Generation API",
        "version": __version__,
        "description": "AI-assisted, budget-aware business idea generation",
        "docs": "/docs",
        "endpoints": {
            "generate": "POST /generate - Generate business ideas",
            "feedback": "POST /feedback - Rate a result",
            "health": "GET /health - Service health check",
            "session": "GET /session/{id} - Session retrieval",
            "result": "GET /result/{id} - Result retrieval",
            "user": "GET /user/profile, GET /user/history - Bearer token required",
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="AI provider availability and storage counts",
    tags=["General"]
)
async def health(
    stores: Stores = Depends(get_stores),
    orchestrator: AIOrchestrator = Depends(get_orchestrator),
):
    availability = orchestrator.check_availability()
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "ai": {
            "primaryAvailable": availability["primaryAvailable"],
            "secondaryAvailable": availability["secondaryAvailable"],
        },
        "storage": stores.stats(),
    }


# ── Error mapping ────────────────────────────────────────────────────────

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected request to %s: %d validation error(s)", request.url.path, len(exc.errors()))
    return JSONResponse(status_code=400, content=format_error_response("invalid_input"))


@app.exception_handler(InputSafetyError)
async def input_safety_exception_handler(request: Request, exc: InputSafetyError):
    return JSONResponse(status_code=400, content=format_error_response("unsafe_input"))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logger.exception("Unhandled error on %s", request.url.path)
    content = format_error_response("internal_error")
    if settings.debug:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ideagen.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.debug,
    )
