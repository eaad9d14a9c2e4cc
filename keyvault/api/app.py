"""
keyvault API — FastAPI app serving project-scoped secrets and search.

Start:
    keyvault serve
    # or
    uvicorn keyvault.api.app:app --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import psycopg2
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from keyvault import __version__
from keyvault.api.middleware import CorrelationMiddleware
from keyvault.api.routers import health, secrets
from keyvault.config import get_config
from keyvault.db.connection import close_pools
from keyvault.query import QuerySyntaxError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not get_config().auth.configured:
        logger.warning("API_MASTER_KEY_READ/API_MASTER_KEY_WRITE not set; authenticated requests will be rejected")
    yield
    close_pools()


app = FastAPI(
    title="keyvault",
    description="Project-scoped JSON secrets with a boolean search query language.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(CorrelationMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(secrets.router)


# ─── Error Formatting ─────────────────────────────────────────────────


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "-")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(QuerySyntaxError)
async def query_error_handler(request: Request, exc: QuerySyntaxError):
    logger.info(
        "Rejected search query at position %d: %s [%s]", exc.position, exc.reason, _correlation_id(request)
    )
    return JSONResponse(
        {"error": "Invalid search query", "position": exc.position, "detail": exc.reason},
        status_code=400,
    )


@app.exception_handler(psycopg2.Error)
@app.exception_handler(ConnectionError)
async def db_error_handler(request: Request, exc: Exception):
    logger.error(
        "Database failure on %s %s [%s]",
        request.method,
        request.url.path,
        _correlation_id(request),
        exc_info=exc,
    )
    return JSONResponse({"error": "DB error"}, status_code=500)
