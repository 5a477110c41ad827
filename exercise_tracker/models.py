"""Domain models for users and their exercise logs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Exercise:
    """A single logged activity. Only ever exists inside a user's log."""

    description: str
    duration: Optional[int]
    date: date


@dataclass(frozen=True)
class User:
    """A user account together with its exercise log in insertion order."""

    id: str
    username: str
    created_at: datetime
    log: Tuple[Exercise, ...] = ()


@dataclass(frozen=True)
class UserSummary:
    id: str
    username: str


__all__ = ["Exercise", "User", "UserSummary"]
