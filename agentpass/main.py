"""AgentPass FastAPI application."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agentpass import __version__
from agentpass.api.deps import AppState, build_app_state
from agentpass.api.middleware import RequestLoggingMiddleware
from agentpass.api.routes import agent, health
from agentpass.config.settings import Settings, settings, validate_settings

logger = logging.getLogger(__name__)


def create_app(s: Settings | None = None, state: AppState | None = None) -> FastAPI:
    """Build the FastAPI app.  *state* overrides the settings-driven wiring."""
    s = s or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        for problem in validate_settings(s):
            logger.warning("Configuration problem: %s", problem)
        if getattr(app.state, "agentpass", None) is None:
            app.state.agentpass = build_app_state(s)
        yield

    app = FastAPI(
        title="AgentPass",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.agentpass = state

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(agent.router)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    return app


app = create_app()
