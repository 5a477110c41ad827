"""Error taxonomy shared by the store and the HTTP layer."""
from __future__ import annotations


class ExerciseTrackerError(Exception):
    """Base class for failures that are reported to API clients."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ExerciseTrackerError):
    """A required field is missing or cannot be stored."""

    status_code = 400


class NotFoundError(ExerciseTrackerError):
    """No user exists with the requested identifier."""

    status_code = 404


class StorageError(ExerciseTrackerError):
    """The database could not be read or written."""

    status_code = 500


class InvalidIdentifierError(StorageError):
    """The supplied user identifier is not a well-formed id."""

    status_code = 400


__all__ = [
    "ExerciseTrackerError",
    "InvalidIdentifierError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
