"""Compliance Engine — validation orchestration service.

Owns the engine lifecycle (one engine per process, scheduled runs started on
entry) and maps engine failures onto HTTP status codes.
"""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from compliance_engine.config import get_settings
from compliance_engine.api.router import api_router
from compliance_engine.validators.engine import ValidationEngine
from compliance_engine.validators.errors import PluginContractError, ValidationOrchestrationError

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if get_settings().DEBUG else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(get_settings().LOG_LEVEL.upper())
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings = get_settings()

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG)

    async with ValidationEngine.from_settings(settings) as engine:
        app.state.engine = engine
        logger.info(
            "app_started",
            validators=[v.value for v in engine.config.validators],
            mode=engine.config.mode.value,
            scheduled=engine.is_scheduled,
        )

        yield

        # ── Shutdown ──
        logger.info("app_shutting_down")

    logger.info("app_stopped")


# ── Create Application ──

app = FastAPI(
    title="Compliance Engine",
    description=(
        "Compliance validation orchestration. Runs GDPR, NSM security, WCAG "
        "accessibility and Norwegian locale validators plus custom plugins "
        "over source text and returns one scored, ranked report."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ── Middleware ──

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Global Exception Handlers ──

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything the engine does not classify becomes a 500."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "The compliance engine hit an unexpected error.",
        },
    )


@app.exception_handler(ValidationOrchestrationError)
async def orchestration_error_handler(request: Request, exc: ValidationOrchestrationError):
    """Validation kept failing after every retry."""
    logger.error(
        "validation_unavailable",
        path=request.url.path,
        file_path=exc.file_path,
        retry_count=exc.retry_count,
        error=str(exc),
    )
    return JSONResponse(
        status_code=503,
        content={
            "error": "validation_unavailable",
            "message": str(exc),
            "retry_count": exc.retry_count,
        },
    )


@app.exception_handler(PluginContractError)
async def plugin_contract_error_handler(request: Request, exc: PluginContractError):
    return JSONResponse(
        status_code=422,
        content={"error": "plugin_contract_error", "message": str(exc), "problems": exc.problems},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Malformed config overrides (pydantic errors are ValueErrors too)."""
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "message": str(exc)},
    )


# ── Routes ──

app.include_router(api_router, prefix="/api/v1")


# ── Root endpoint ──

@app.get("/")
async def root():
    """Service info."""
    return {
        "name": "Compliance Engine",
        "version": "1.0.0",
        "description": "Compliance validation orchestration service",
        "validate": "/api/v1/validate",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
