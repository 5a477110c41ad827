"""Application factory for the exercise tracker HTTP service."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import register_api_routes
from .config import Settings, load_settings
from .database import Database
from .store import UserStore
from .web import register_ui_routes

logger = logging.getLogger("exercise_tracker.service")


def _initialise_database(database: Database) -> Database:
    database.initialize()
    return database


def create_app(
    *,
    database: Database | None = None,
    settings: Settings | None = None,
    today: Callable[[], date] = date.today,
    include_web: bool = True,
) -> FastAPI:
    """Instantiate the FastAPI application.

    ``database`` defaults to the SQLite file named by ``settings``; ``today``
    supplies the date used for exercises submitted without one.
    """

    app_settings = settings or load_settings()
    db = database or Database(app_settings.database_path)
    _initialise_database(db)
    store = UserStore(db, today=today)

    app = FastAPI(
        title="Exercise Tracker",
        version="1.0.0",
        description="Create users, log exercises and query exercise history.",
    )

    origins = list(app_settings.cors_origins)
    allow_any = "*" in origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_any else origins,
        allow_credentials=not allow_any,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if app_settings.legacy_error_status:
        logger.info("Legacy error mode enabled; all API errors are returned with HTTP 200")

    app.state.database = db
    app.state.store = store
    app.state.settings = app_settings

    @app.get("/healthz", include_in_schema=False)
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    register_api_routes(app, store, legacy_error_status=app_settings.legacy_error_status)
    if include_web:
        register_ui_routes(app)

    return app


def create_api_app(
    *,
    database: Database | None = None,
    settings: Settings | None = None,
    today: Callable[[], date] = date.today,
) -> FastAPI:
    """Return an application exposing only the JSON API."""

    return create_app(database=database, settings=settings, today=today, include_web=False)


__all__ = ["create_app", "create_api_app"]
