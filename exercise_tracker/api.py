"""JSON routes for users and their exercise logs."""
from __future__ import annotations

import logging
from typing import List, Optional, Union

from fastapi import FastAPI, Form, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .errors import ExerciseTrackerError, NotFoundError, StorageError
from .models import UserSummary
from .query import LogFilter, LogView, query_log
from .store import ExerciseAdded, UserStore

logger = logging.getLogger("exercise_tracker.api")


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    id: str = Field(..., alias="_id")


class ExerciseResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    username: str
    description: str
    duration: Optional[int]
    date: str


class LogEntryResponse(BaseModel):
    description: str
    duration: Optional[int]
    date: str


class LogResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    username: str
    count: int
    log: List[LogEntryResponse]


class ErrorResponse(BaseModel):
    error: str


def user_to_response(user: UserSummary) -> UserResponse:
    return UserResponse(id=user.id, username=user.username)


def exercise_to_response(added: ExerciseAdded) -> ExerciseResponse:
    return ExerciseResponse(
        id=added.id,
        username=added.username,
        description=added.description,
        duration=added.duration,
        date=added.date,
    )


def log_to_response(view: LogView) -> LogResponse:
    return LogResponse(
        id=view.id,
        username=view.username,
        count=view.count,
        log=[
            LogEntryResponse(description=entry.description, duration=entry.duration, date=entry.date)
            for entry in view.log
        ],
    )


def register_api_routes(app: FastAPI, store: UserStore, *, legacy_error_status: bool = False) -> None:
    """Expose the ``/api/users`` routes on ``app``."""

    def _error_response(exc: ExerciseTrackerError, generic_message: str) -> JSONResponse:
        # Details stay in the log; clients get the generic message.
        if isinstance(exc, StorageError):
            logger.error("%s: %s", generic_message, exc.message, exc_info=exc)
            message = generic_message
        elif isinstance(exc, NotFoundError):
            message = exc.message
        else:
            logger.warning("%s: %s", generic_message, exc.message)
            message = generic_message
        status_code = status.HTTP_200_OK if legacy_error_status else exc.status_code
        return JSONResponse({"error": message}, status_code=status_code)

    error_responses = {
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    }

    @app.post("/api/users", response_model=UserResponse, responses=error_responses)
    async def create_user(username: Optional[str] = Form(default=None)) -> Union[UserResponse, JSONResponse]:
        try:
            user = store.create_user(username)
        except ExerciseTrackerError as exc:
            return _error_response(exc, "Error saving user")
        return user_to_response(user)

    @app.get("/api/users", response_model=List[UserResponse], responses=error_responses)
    async def list_users() -> Union[List[UserResponse], JSONResponse]:
        try:
            users = store.list_users()
        except ExerciseTrackerError as exc:
            return _error_response(exc, "Error fetching users")
        return [user_to_response(user) for user in users]

    @app.post(
        "/api/users/{user_id}/exercises",
        response_model=ExerciseResponse,
        responses=error_responses,
    )
    async def add_exercise(
        user_id: str,
        description: Optional[str] = Form(default=None),
        duration: Optional[str] = Form(default=None),
        date: Optional[str] = Form(default=None),
    ) -> Union[ExerciseResponse, JSONResponse]:
        try:
            added = store.append_exercise(
                user_id,
                description=description,
                duration=duration,
                date=date,
            )
        except ExerciseTrackerError as exc:
            return _error_response(exc, "Error saving exercise")
        return exercise_to_response(added)

    @app.get("/api/users/{user_id}/logs", response_model=LogResponse, responses=error_responses)
    async def read_log(
        user_id: str,
        date_from: Optional[str] = Query(default=None, alias="from"),
        date_to: Optional[str] = Query(default=None, alias="to"),
        limit: Optional[str] = Query(default=None),
    ) -> Union[LogResponse, JSONResponse]:
        try:
            user = store.find_user(user_id)
            if user is None:
                raise NotFoundError("User not found")
            view = query_log(user, LogFilter.from_query(date_from, date_to, limit))
        except ExerciseTrackerError as exc:
            return _error_response(exc, "Error fetching logs")

        return log_to_response(view)


__all__ = [
    "ExerciseResponse",
    "LogResponse",
    "UserResponse",
    "register_api_routes",
]
