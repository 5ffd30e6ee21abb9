"""
FastAPI app exposing the project request layer over HTTP.
Run with `uvicorn projects.api:app`.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .logs import ensure_log_schema
from .routes import base as base_routes
from .routes import logs as logs_routes
from .routes import projects as projects_routes


@asynccontextmanager
async def lifespan(_app: FastAPI):
    ensure_log_schema()
    yield


app = FastAPI(title="projects-api", version="0.1.0", lifespan=lifespan)

app.include_router(base_routes.router)
app.include_router(projects_routes.router)
app.include_router(logs_routes.router)
