"""mgstream FastAPI application — streamed metagenome annotations."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mgstream import __version__
from mgstream.config import config
from mgstream.exceptions import MGStreamError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage shared resources: Shock httpx client + DB auto-create in dev mode."""
    app.state.shock_http = httpx.Client(timeout=config.shock.timeout, follow_redirects=True)

    # Auto-create SQLite tables in dev mode (no alembic needed for quick start)
    if config.database.url.startswith("sqlite"):
        from mgstream.db import Base, get_engine
        Base.metadata.create_all(get_engine())

    yield
    app.state.shock_http.close()


def create_app() -> FastAPI:
    """Application factory — returns configured FastAPI instance."""
    app = FastAPI(
        title="mgstream",
        version=__version__,
        description="Streamed per-read annotations for metagenomes",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    from mgstream.api.v1.router import router as v1_router
    app.include_router(v1_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Render domain errors as {"ERROR": message} with their status code."""

    @app.exception_handler(MGStreamError)
    async def mgstream_error_handler(request: Request, exc: MGStreamError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"ERROR": str(exc)})
