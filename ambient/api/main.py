"""
FastAPI Application

Main FastAPI application for Ambient Analytics with:
- Lifespan management for component initialization
- CORS middleware for frontend integration
- Global exception handlers mapping failures to {"error": message}
- Catalog, SQL, insight, evaluation and health endpoints under /api

Usage:
    uvicorn ambient.api.main:app --reload --port 8000
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ambient import __version__
from ambient.api.errors import ApiError, error_response
from ambient.api.routes import catalog, evaluations, health, insights, sql
from ambient.config import MissingConfigurationError, get_settings
from ambient.connectors.base import ConnectorError
from ambient.database.executor import SQLExecutor
from ambient.database.introspector import SchemaIntrospector
from ambient.evaluation import SQLGenerationEvaluation
from ambient.llm.gateway import LLMGateway
from ambient.models.agent import AgentError
from ambient.pipeline import AnalyticsPipeline

logger = logging.getLogger(__name__)

# Global state for shared components
app_state: dict[str, Any] = {
    "gateway": None,
    "introspector": None,
    "executor": None,
    "pipeline": None,
    "evaluation": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for startup and shutdown.

    Components are cheap to build and open no connections up front: each
    request opens its own database connection, and LLM providers are created
    on first use, so missing credentials only fail the routes that need them.
    """
    config = get_settings()
    logger.info(f"Starting {config.app_name} API server...")

    gateway = LLMGateway(config)
    introspector = SchemaIntrospector(
        config.database, sample_limit=config.pipeline.sample_rows_limit
    )
    executor = SQLExecutor(introspector)
    app_state["gateway"] = gateway
    app_state["introspector"] = introspector
    app_state["executor"] = executor
    app_state["pipeline"] = AnalyticsPipeline(
        introspector=introspector, executor=executor, gateway=gateway, settings=config
    )
    app_state["evaluation"] = SQLGenerationEvaluation(settings=config, gateway=gateway)

    if config.database.url is None and not config.database.environments:
        logger.warning("DATABASE_URL not set; catalog and execution routes will fail.")
    logger.info(f"{config.app_name} API server started successfully")

    try:
        yield  # Application runs here
    finally:
        for key in app_state:
            app_state[key] = None
        logger.info(f"{config.app_name} API server shut down complete")


# Create FastAPI app
app = FastAPI(
    title="Ambient Analytics API",
    description="Natural language analytics over a Postgres schema",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for frontend
config = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Route-specific failures carry their own status and message."""
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.info(f"Rejected request to {request.url.path}: {message}")
    return error_response(status.HTTP_400_BAD_REQUEST, f"Invalid request: {message}")


@app.exception_handler(MissingConfigurationError)
async def missing_configuration_handler(
    request: Request, exc: MissingConfigurationError
) -> JSONResponse:
    """Absent database URL or API key."""
    logger.error(f"Missing configuration: {exc}", extra={"setting": exc.setting})
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


@app.exception_handler(AgentError)
async def agent_error_handler(request: Request, exc: AgentError) -> JSONResponse:
    """Handle agent errors that escaped a route."""
    logger.error(
        f"Agent error: {exc}",
        extra={"agent": exc.agent, "recoverable": exc.recoverable},
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


@app.exception_handler(ConnectorError)
async def connector_error_handler(request: Request, exc: ConnectorError) -> JSONResponse:
    """Handle database errors that escaped a route."""
    logger.error(f"Database error: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database request failed")


# Include routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(catalog.router, prefix="/api", tags=["catalog"])
app.include_router(sql.router, prefix="/api", tags=["sql"])
app.include_router(insights.router, prefix="/api", tags=["insights"])
app.include_router(evaluations.router, prefix="/api", tags=["evaluations"])


# Root endpoint
@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "Ambient Analytics API",
        "version": __version__,
        "description": "Natural language analytics over a Postgres schema",
        "docs": "/docs",
    }


def get_component(name: str) -> Any:
    """Get an initialized component from app state."""
    component = app_state.get(name)
    if component is None:
        raise ApiError(status.HTTP_503_SERVICE_UNAVAILABLE, f"{name} is not initialized")
    return component
