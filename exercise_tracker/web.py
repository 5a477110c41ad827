"""Landing page and static assets for the exercise tracker."""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

logger = logging.getLogger("exercise_tracker.web")

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent / "static"


def _template_environment() -> Jinja2Templates:
    return Jinja2Templates(directory=str(TEMPLATE_DIR))


def register_ui_routes(app: FastAPI) -> None:
    """Serve the landing page at ``/`` and static files under ``/public``."""

    templates = _template_environment()
    if STATIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=str(STATIC_DIR)), name="public")
    else:
        logger.warning("Static directory %s is missing; /public will not be served", STATIC_DIR)

    router = APIRouter(include_in_schema=False)

    @router.get("/", response_class=HTMLResponse, name="ui_home")
    async def home(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(request, "index.html", {"title": app.title})

    app.include_router(router)


__all__ = ["register_ui_routes"]
