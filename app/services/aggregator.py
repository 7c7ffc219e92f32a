from __future__ import annotations

import asyncio
from typing import List, Sequence

from app.core.logger import get_logger
from app.core.models.domain import Activity, ActivityQuery, FailureReason, SourceResult
from app.ports.activity_source import ActivitySourceAdapter
from app.services.query import query_activities

logger = get_logger(__name__)


class ActivityAggregator:
    """
    Fans out to every source adapter and joins once all of them settled.

    A failed source contributes nothing; callers of `aggregate` cannot tell it
    apart from a source with no activity. `collect` keeps the per-source
    outcome for anyone who needs it.
    """

    def __init__(self, adapters: Sequence[ActivitySourceAdapter]):
        self.adapters = list(adapters)

    async def collect(self) -> List[SourceResult]:
        outcomes = await asyncio.gather(
            *(adapter.fetch_result() for adapter in self.adapters),
            return_exceptions=True,
        )

        results: List[SourceResult] = []
        for adapter, outcome in zip(self.adapters, outcomes):
            if isinstance(outcome, SourceResult):
                results.append(outcome)
                continue
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            # Adapters are not supposed to raise; keep the join intact if one does.
            logger.error(f"Adapter {adapter.source} raised instead of reporting: {outcome!r}")
            results.append(SourceResult.failed(adapter.source, FailureReason.UNEXPECTED, repr(outcome)))
        return results

    async def aggregate(self) -> List[Activity]:
        activities: List[Activity] = []
        for result in await self.collect():
            if result.ok:
                activities.extend(result.activities)
                logger.info(
                    f"{result.source}: {len(result.activities)} activities"
                    f"{' (cached)' if result.from_cache else ''}"
                )
            else:
                logger.warning(f"{result.source} contributed nothing ({result.failure.value}: {result.detail})")
        logger.info(f"Total activities before filtering: {len(activities)}")
        return activities

    async def activities(self, query: ActivityQuery) -> List[Activity]:
        logger.info(f"Fetching activities with params: {query.model_dump(exclude_none=True)}")
        return query_activities(await self.aggregate(), query)
