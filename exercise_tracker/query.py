"""Filtering and formatting of a user's exercise log.

Everything here is pure: a :class:`LogFilter` is built from the raw query
string values and applied to a log that has already been loaded.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

from .models import Exercise, User
from .parsing import format_date, parse_date, parse_int


@dataclass(frozen=True)
class LogEntry:
    description: str
    duration: Optional[int]
    date: str


@dataclass(frozen=True)
class LogView:
    id: str
    username: str
    count: int
    log: Tuple[LogEntry, ...]


def _given(value: Optional[str]) -> bool:
    return value is not None and value != ""


@dataclass(frozen=True)
class LogFilter:
    """Inclusive date bounds and a prefix limit.

    ``unsatisfiable`` is set when a bound was supplied but could not be
    parsed.  No date compares against such a bound, so nothing matches.
    """

    start: Optional[date] = None
    end: Optional[date] = None
    limit: Optional[int] = None
    unsatisfiable: bool = False

    @classmethod
    def from_query(
        cls,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> "LogFilter":
        unsatisfiable = False
        start = end = None
        if _given(date_from):
            start = parse_date(date_from)
            unsatisfiable = unsatisfiable or start is None
        if _given(date_to):
            end = parse_date(date_to)
            unsatisfiable = unsatisfiable or end is None

        parsed_limit: Optional[int] = None
        if _given(limit):
            # An unparsable limit keeps nothing.
            parsed_limit = parse_int(limit, saturate=True)
            if parsed_limit is None:
                parsed_limit = 0

        return cls(start=start, end=end, limit=parsed_limit, unsatisfiable=unsatisfiable)

    def apply(self, entries: Iterable[Exercise]) -> List[Exercise]:
        if self.unsatisfiable:
            return []
        selected = list(entries)
        if self.start is not None:
            selected = [entry for entry in selected if entry.date >= self.start]
        if self.end is not None:
            selected = [entry for entry in selected if entry.date <= self.end]
        if self.limit is not None:
            selected = selected[: self.limit]
        return selected


def format_entry(exercise: Exercise) -> LogEntry:
    return LogEntry(
        description=exercise.description,
        duration=exercise.duration,
        date=format_date(exercise.date),
    )


def query_log(user: User, log_filter: Optional[LogFilter] = None) -> LogView:
    """Apply ``log_filter`` to the user's log and format what remains."""

    active = log_filter or LogFilter()
    entries = tuple(format_entry(exercise) for exercise in active.apply(user.log))
    return LogView(id=user.id, username=user.username, count=len(entries), log=entries)


__all__ = ["LogEntry", "LogFilter", "LogView", "format_entry", "query_log"]
