import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inkwell.adapters.sqlite.migrator import SQLiteMigrator
from inkwell.api.deps import get_settings
from inkwell.app_shell.config import validate_ops_rules
from inkwell.domain.errors import AccessDenied, ConflictError, ProviderUnavailable, StorageError
from inkwell.rules.loader import load_rules
from inkwell.rules.models import Rules

logging.basicConfig(
    level=os.environ.get("INKWELL_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _startup_rules() -> Rules:
    settings = get_settings()
    if not settings.rules_path.exists():
        logger.warning("Rules file %s not found, using defaults", settings.rules_path)
        return Rules()
    return load_rules(settings.rules_path)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = _startup_rules()
    except ValueError:
        logger.critical("Rules load failed", exc_info=True)
        raise SystemExit(1) from None
    validate_ops_rules(rules)
    logger.info("Rules loaded from %s", settings.rules_path)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    if applied:
        logger.info("Applied migrations: %s", ", ".join(applied))

    yield


app = FastAPI(
    title="Inkwell API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# --- Error mapping ---


@app.exception_handler(AccessDenied)
async def access_denied_handler(request: Request, exc: AccessDenied) -> JSONResponse:
    # Reason stays in the server log (PolicyEngine); clients get a generic message.
    if exc.status_code == 401:
        return JSONResponse(
            status_code=401,
            content={"detail": "Not authenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return JSONResponse(status_code=403, content={"detail": "Forbidden"})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Storage unavailable"})


@app.exception_handler(ProviderUnavailable)
async def provider_unavailable_handler(
    request: Request, exc: ProviderUnavailable
) -> JSONResponse:
    logger.error("Identity provider unavailable: %s", exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Authentication service unavailable"},
        headers={"Retry-After": "30"},
    )


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.info("Conflict on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": "Conflicts with existing data"})


# --- Routers ---
from inkwell.api.routes import (  # noqa: E402
    admin_messages,
    admin_stats,
    analytics_ingest,
    articles,
    auth,
    categories,
    public_intake,
)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(articles.router, prefix="/api/articles", tags=["Articles"])
app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
app.include_router(public_intake.router, prefix="/api", tags=["Public"])
app.include_router(analytics_ingest.router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(admin_stats.router, prefix="/api/admin/stats", tags=["Admin Stats"])
app.include_router(admin_messages.router, prefix="/api/admin", tags=["Admin Inbox"])


# CORS (Allow Frontend)
def _cors_origins() -> list[str]:
    try:
        return _startup_rules().http.cors_origins
    except ValueError:
        return []


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
