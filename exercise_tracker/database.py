"""SQLite-backed persistence for users and their exercise logs."""
from __future__ import annotations

import re
import secrets
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from .errors import InvalidIdentifierError, StorageError, ValidationError
from .models import Exercise, User, UserSummary

_USER_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")
_MAX_ID_ATTEMPTS = 5


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "exercise_tracker.sqlite3").resolve(strict=False)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _generate_user_id() -> str:
    return secrets.token_hex(12)


def normalize_user_id(user_id: str) -> str:
    """Return the canonical form of ``user_id`` or raise if it is malformed."""

    normalized = str(user_id).strip().lower()
    if not _USER_ID_PATTERN.match(normalized):
        raise InvalidIdentifierError(f"Malformed user id: {user_id!r}")
    return normalized


class Database:
    """Simple wrapper around SQLite for persisting users and exercises."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, committing on success and always closing it.

        Any ``sqlite3`` failure, or an integer too large to bind, surfaces as
        :class:`StorageError`.
        """

        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to open database at {self._path}") from exc
        try:
            with conn:
                yield conn
        except (sqlite3.Error, OverflowError) as exc:
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._transaction() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    username TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    description TEXT NOT NULL,
                    duration INTEGER,
                    date TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_exercises_user_id ON exercises(user_id);
                """
            )

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def create_user(self, username: str) -> User:
        """Insert a new user with an empty log and return it."""

        if not username or not username.strip():
            raise ValidationError("Path `username` is required.")

        created_at = _current_timestamp()
        with self._transaction() as conn:
            for _ in range(_MAX_ID_ATTEMPTS):
                user_id = _generate_user_id()
                try:
                    conn.execute(
                        "INSERT INTO users (id, username, created_at) VALUES (?, ?, ?)",
                        (user_id, username, _serialize_datetime(created_at)),
                    )
                except sqlite3.IntegrityError:
                    # Random id collided with an existing one; draw again.
                    continue
                break
            else:
                raise StorageError("Unable to allocate a unique user id")

        return User(id=user_id, username=username, created_at=created_at)

    def list_users(self) -> List[UserSummary]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT id, username FROM users ORDER BY rowid").fetchall()
        return [UserSummary(id=row["id"], username=row["username"]) for row in rows]

    def list_users_with_counts(self) -> List[tuple[User, int]]:
        """Return every user (without log) along with the size of their log."""

        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT users.*, COUNT(exercises.id) AS exercise_count
                  FROM users
                  LEFT JOIN exercises ON exercises.user_id = users.id
                 GROUP BY users.id
                 ORDER BY users.rowid
                """
            ).fetchall()
        return [(self._row_to_user(row), int(row["exercise_count"])) for row in rows]

    def get_user(self, user_id: str) -> Optional[User]:
        """Load a user and its full log, or ``None`` when no such user exists."""

        normalized = normalize_user_id(user_id)
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (normalized,)).fetchone()
            if row is None:
                return None
            exercise_rows = conn.execute(
                "SELECT description, duration, date FROM exercises WHERE user_id = ? ORDER BY id",
                (normalized,),
            ).fetchall()
        return self._row_to_user(row, tuple(self._row_to_exercise(item) for item in exercise_rows))

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------
    def add_exercise(self, user_id: str, exercise: Exercise) -> Optional[User]:
        """Append ``exercise`` to the user's log.

        Returns the refreshed user, or ``None`` when the user does not exist.
        """

        normalized = normalize_user_id(user_id)
        with self._transaction() as conn:
            row = conn.execute("SELECT id FROM users WHERE id = ?", (normalized,)).fetchone()
            if row is None:
                return None
            conn.execute(
                "INSERT INTO exercises (user_id, description, duration, date) VALUES (?, ?, ?, ?)",
                (normalized, exercise.description, exercise.duration, exercise.date.isoformat()),
            )
        return self.get_user(normalized)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _row_to_user(row: sqlite3.Row, log: tuple[Exercise, ...] = ()) -> User:
        return User(
            id=row["id"],
            username=row["username"],
            created_at=_parse_datetime(row["created_at"]),
            log=log,
        )

    @staticmethod
    def _row_to_exercise(row: sqlite3.Row) -> Exercise:
        duration = row["duration"]
        return Exercise(
            description=row["description"],
            duration=int(duration) if duration is not None else None,
            date=date.fromisoformat(row["date"]),
        )


__all__ = ["Database", "normalize_user_id", "resolve_database_path"]
