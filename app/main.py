import argparse
import asyncio
import sys
from typing import List, Optional

from dotenv import load_dotenv

from app.core.builder import build_aggregator
from app.core.cache import ResultCache
from app.core.config import get_settings
from app.core.errors import InvalidQueryError
from app.core.models.domain import Activity
from app.services.query import build_query

load_dotenv()


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the merged GitHub + StackOverflow timeline.")
    parser.add_argument("--source", help="only this source (github, stackoverflow)")
    parser.add_argument("--limit", type=int, help="page size (default 20)")
    parser.add_argument("--offset", type=int, help="items to skip (default 0)")
    parser.add_argument("--from", dest="from_date", help="ISO-8601 lower bound, inclusive")
    parser.add_argument("--to", dest="to_date", help="ISO-8601 upper bound, inclusive")
    return parser.parse_args(argv)


def format_activity(activity: Activity) -> str:
    line = f"{activity.timestamp.isoformat()}  [{activity.source}/{activity.type}] {activity.title}"
    if activity.url:
        line += f"  <{activity.url}>"
    return line


async def run_timeline(argv: Optional[List[str]] = None) -> int:
    """
    Runs one aggregation pass: sources -> normalizers -> query -> stdout.
    """
    args = _parse_args(argv)
    try:
        query = build_query(
            source=args.source,
            limit=args.limit,
            offset=args.offset,
            from_date=args.from_date,
            to_date=args.to_date,
        )
    except InvalidQueryError as e:
        print(f"❌ Invalid query: {e}", file=sys.stderr)
        return 2

    settings = get_settings()
    aggregator = build_aggregator(settings, ResultCache(ttl_seconds=settings.cache_ttl_seconds))
    activities = await aggregator.activities(query)

    if not activities:
        print("⚠️ No activities found.")
        return 0

    for activity in activities:
        print(format_activity(activity))
    return 0


def cli() -> None:
    sys.exit(asyncio.run(run_timeline()))


if __name__ == "__main__":
    cli()
