from __future__ import annotations

from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from app.core.errors import InvalidQueryError
from app.core.logger import get_logger
from app.core.models.domain import Activity, ActivityQuery

logger = get_logger(__name__)


def build_query(
    *,
    source: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    from_date: Any = None,
    to_date: Any = None,
) -> ActivityQuery:
    """
    Validates raw caller arguments. `None` means "use the default".

    Raises:
        InvalidQueryError: negative page values or unparseable dates.
    """
    values: dict = {"source": source, "from_date": from_date, "to_date": to_date}
    if limit is not None:
        values["limit"] = limit
    if offset is not None:
        values["offset"] = offset
    try:
        return ActivityQuery(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidQueryError(problems) from e


def query_activities(activities: Iterable[Activity], query: ActivityQuery) -> List[Activity]:
    """
    Source filter -> date range -> newest first -> page.

    The stages run in this order on every call. Activities with identical
    timestamps have no guaranteed relative order.
    """
    result = list(activities)
    logger.debug(f"Total activities before filtering: {len(result)}")

    if query.source:
        result = [a for a in result if a.source == query.source]
        logger.debug(f"Activities after source filter: {len(result)}")

    if query.from_date is not None:
        result = [a for a in result if a.timestamp >= query.from_date]
    if query.to_date is not None:
        result = [a for a in result if a.timestamp <= query.to_date]

    result.sort(key=lambda a: a.timestamp, reverse=True)

    page = result[query.offset:query.offset + query.limit]
    logger.debug(f"Final result count: {len(page)}")
    return page
