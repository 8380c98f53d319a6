"""
backend/app/main.py

Purpose:
    FastAPI application bootstrap: logging, CORS, football data service
    lifecycle and the /api/football router.

Dependencies:
    - app.providers.api_football
    - app.services.football_data_service
    - app.services.ttl_cache
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.middleware.logging import StructuredLoggingMiddleware, setup_logging
from app.providers.api_football import ApiFootballProvider
from app.providers.errors import ProviderConfigError, ProviderError, UnknownLeagueError
from app.services.football_data_service import FootballDataService
from app.services.ttl_cache import TTLCache

logger = logging.getLogger("footdata")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    provider = ApiFootballProvider()
    cache = TTLCache(settings.FOOTBALL_CACHE_TTL_SECONDS, coalesce=settings.FOOTBALL_CACHE_COALESCE)
    app.state.football_service = FootballDataService(
        provider,
        cache,
        comparison_leagues=settings.comparison_league_ids,
    )
    app.state.football_provider = provider
    if not settings.API_FOOTBALL_KEY:
        logger.warning("API_FOOTBALL_KEY is not set; upstream calls will fail")
    logger.info("Football data service started (cache TTL %ss)", settings.FOOTBALL_CACHE_TTL_SECONDS)

    yield

    await provider.aclose()


app = FastAPI(
    title="Football Data",
    description="Normalized, cached API-Football data",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Structured logging
app.add_middleware(StructuredLoggingMiddleware)

# Routers
from app.routers.football import router as football_router

app.include_router(football_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean validation errors without leaking internal field paths."""
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        field = ".".join(str(part) for part in loc[1:]) if len(loc) > 1 else str(loc[-1]) if loc else "unknown"
        errors.append({"field": field, "message": err.get("msg", "Invalid value.")})
    return JSONResponse(status_code=422, content={"detail": "Validation error.", "errors": errors})


@app.exception_handler(UnknownLeagueError)
async def unknown_league_handler(request: Request, exc: UnknownLeagueError):
    return JSONResponse(status_code=404, content={"detail": f"Unknown league: {exc.league}"})


@app.exception_handler(ProviderConfigError)
async def provider_config_handler(request: Request, exc: ProviderConfigError):
    logger.error("Provider misconfigured on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Football data provider is not configured."})


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    logger.error(
        "Upstream failure on %s %s (%s, status %s): %s",
        request.method, request.url.path, exc.endpoint, exc.status_code, exc,
    )
    return JSONResponse(status_code=502, content={"detail": "Upstream football data provider failed."})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the real error, return a safe generic message."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})


@app.get("/health")
async def health(request: Request):
    """Health check -- reports provider circuit and quota state."""
    provider: ApiFootballProvider = request.app.state.football_provider
    circuit_open = provider.circuit_open
    return {
        "status": "degraded" if circuit_open else "healthy",
        "api_football": {
            "circuit_open": circuit_open,
            "remaining_requests": provider.remaining_requests,
            "configured": bool(settings.API_FOOTBALL_KEY),
        },
    }
