"""Delete notifications that repeat an earlier one within a short window.

Rows are duplicates when recipient, type, actor and the task/project/space ids
in data match and they were created within --window seconds of the first one.
The oldest row of each burst is kept.

Usage:
    uv run python -m scripts.clean_duplicate_notifications [--dry-run] [--window 10]
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv


def _load_env() -> None:
    load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=True)


async def main(window_seconds: float, dry_run: bool) -> None:
    import workhub.infrastructure.persistence.database as database
    from workhub.infrastructure.persistence.repositories import NotificationRepository

    async with database.get_session_factory()() as session:
        async with session.begin():
            repo = NotificationRepository(session)
            duplicates = await repo.find_duplicates(window_seconds)
            if not duplicates:
                print("No duplicate notifications found")
            elif dry_run:
                print(f"Dry run: {len(duplicates)} duplicate notification(s) would be deleted")
                for notification_id in duplicates:
                    print(f"  {notification_id}")
            else:
                deleted = await repo.delete_many(duplicates)
                print(f"Deleted {deleted} duplicate notification(s)")
    await database.dispose_engine()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="Only report duplicates")
    parser.add_argument(
        "--window", type=float, default=10.0, help="Duplicate window in seconds (default 10)"
    )
    args = parser.parse_args()
    if args.window <= 0:
        print("--window must be positive", file=sys.stderr)
        sys.exit(1)
    _load_env()
    asyncio.run(main(args.window, args.dry_run))
