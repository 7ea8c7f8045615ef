# app/main.py
"""
FastAPI application entry point.
Includes security middleware, engine error handlers, global error handler, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import alerts, actors, stats, health
from app.database import create_tables
from app.config import settings
from app.services.errors import (
    NotFoundError, ForbiddenError, DuplicateVoteError, VotingClosedError, ValidationError, StorageError,
)
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Vigilance Community Alerts API",
    description="Community incident reports validated by neighbour votes.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the web client to call the API) ─────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the client origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Health check and docs stay open. Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Engine Error Handlers ────────────────────────────────────────────────────
# Not-found and forbidden share one response so callers cannot probe for alerts.
@app.exception_handler(NotFoundError)
@app.exception_handler(ForbiddenError)
async def not_found_or_forbidden_handler(request: Request, exc: Exception):
    logger.info(f"{request.method} {request.url.path} denied: {exc}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Alert not found or unauthorized"},
    )


@app.exception_handler(DuplicateVoteError)
async def duplicate_vote_handler(request: Request, exc: DuplicateVoteError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "User has already voted on this alert"},
    )


@app.exception_handler(VotingClosedError)
async def voting_closed_handler(request: Request, exc: VotingClosedError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": f"Voting is closed on this alert ({exc.status})"},
    )


@app.exception_handler(ValidationError)
async def engine_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage unavailable, nothing was saved. Retry later."},
    )


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(alerts.router, prefix="/api/v1", tags=["🚨 Alerts"])
app.include_router(actors.router, prefix="/api/v1", tags=["👤 Actors"])
app.include_router(stats.router,  prefix="/api/v1", tags=["📊 Stats"])
app.include_router(health.router, prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Vigilance backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"🗳  Voting policy: {settings.VOTING_POLICY} "
                f"(confirm ≥ {settings.CONFIRM_THRESHOLD}, fake ≥ {settings.FAKE_THRESHOLD})")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Vigilance backend shutting down...")
