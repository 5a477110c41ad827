import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from exercise_tracker.database import Database, resolve_database_path
from exercise_tracker.errors import ExerciseTrackerError
from exercise_tracker.store import UserStore


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an exercise tracker user")
    parser.add_argument("username", help="Name for the new user")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to EXERCISE_TRACKER_DB_PATH or data/exercise_tracker.sqlite3)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    db_env = args.db_path or os.getenv("EXERCISE_TRACKER_DB_PATH")
    db_path = resolve_database_path(db_env)

    database = Database(db_path)
    database.initialize()

    try:
        user = UserStore(database).create_user(args.username)
    except ExerciseTrackerError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    print(f"Created user {user.id}: {user.username}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
