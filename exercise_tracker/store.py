"""User store operations on top of :class:`~exercise_tracker.database.Database`.

The store validates and coerces raw form values before they reach the
database and shapes the results returned to the HTTP layer.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

from .database import Database
from .errors import NotFoundError, ValidationError
from .models import Exercise, User, UserSummary
from .parsing import format_date, parse_date, parse_int

logger = logging.getLogger("exercise_tracker.store")


@dataclass(frozen=True)
class ExerciseAdded:
    """The user merged with the exercise that was just appended."""

    id: str
    username: str
    description: str
    duration: Optional[int]
    date: str


def _required_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"Path `{field}` is required.")
    return str(value)


class UserStore:
    """Create, list, find and append operations for users."""

    def __init__(self, database: Database, *, today: Callable[[], date] = date.today) -> None:
        self._database = database
        self._today = today

    @property
    def database(self) -> Database:
        return self._database

    def create_user(self, username: Optional[str]) -> UserSummary:
        name = _required_text(username, "username")
        user = self._database.create_user(name)
        logger.info("Created user %s (%s)", user.id, user.username)
        return UserSummary(id=user.id, username=user.username)

    def list_users(self) -> List[UserSummary]:
        return self._database.list_users()

    def find_user(self, user_id: str) -> Optional[User]:
        return self._database.get_user(user_id)

    def append_exercise(
        self,
        user_id: str,
        *,
        description: Optional[str],
        duration: Optional[str],
        date: Optional[str] = None,
    ) -> ExerciseAdded:
        """Append an exercise to the user's log.

        ``duration`` is parsed leniently; text without a leading integer is
        stored as ``None`` rather than rejected.  A missing ``date`` defaults
        to today while an unparsable one is rejected.  The user is looked up
        before any field is checked.
        """

        if self._database.get_user(user_id) is None:
            raise NotFoundError("User not found")

        text = _required_text(description, "description")
        raw_duration = _required_text(duration, "duration")
        parsed_duration = parse_int(raw_duration)
        if parsed_duration is None:
            logger.warning("Duration %r for user %s is not a number", raw_duration, user_id)

        if date is None or not str(date).strip():
            exercise_date = self._today()
        else:
            parsed_date = parse_date(date)
            if parsed_date is None:
                raise ValidationError(f"Invalid date: {date!r}")
            exercise_date = parsed_date

        exercise = Exercise(description=text, duration=parsed_duration, date=exercise_date)
        user = self._database.add_exercise(user_id, exercise)
        if user is None:
            raise NotFoundError("User not found")

        logger.info("Logged exercise for user %s on %s", user.id, exercise.date.isoformat())
        return ExerciseAdded(
            id=user.id,
            username=user.username,
            description=exercise.description,
            duration=exercise.duration,
            date=format_date(exercise.date),
        )


__all__ = ["ExerciseAdded", "UserStore"]
