"""Shared fixtures: activity factory, controllable clock and stub sources."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pytest

from app.core.cache import ResultCache
from app.core.errors import UpstreamError
from app.core.models.domain import Activity
from app.ports.activity_source import ActivitySourceAdapter


def make_activity(
    activity_id: str,
    day: int,
    source: str = "github",
    activity_type: str = "commit",
    hour: int = 0,
) -> Activity:
    return Activity(
        id=activity_id,
        source=source,
        type=activity_type,
        title=f"{source} {activity_id}",
        timestamp=datetime(2024, 1, day, hour, tzinfo=timezone.utc),
    )


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubAdapter(ActivitySourceAdapter):
    """
    Source whose upstream is a list of prepared records (or an error).
    `calls` counts upstream hits, so cache behaviour is observable.
    """

    def __init__(
        self,
        cache: ResultCache,
        source: str,
        records: Sequence[Activity] = (),
        *,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        timeout: float = 5.0,
    ):
        super().__init__(cache, timeout=timeout)
        self.source = source
        self.records = list(records)
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch_raw(self) -> List[Dict[str, Any]]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [a.model_dump() for a in self.records]

    def normalize(self, raw: Mapping[str, Any]) -> Activity:
        return Activity(**raw)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResultCache:
    return ResultCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def github_records() -> List[Activity]:
    return [make_activity(f"gh-{day}", day, "github") for day in (1, 2, 3)]


@pytest.fixture
def stackoverflow_records() -> List[Activity]:
    return [make_activity(f"so-{day}", day, "stackoverflow", "answer") for day in (2, 4)]


@pytest.fixture
def upstream_down() -> UpstreamError:
    return UpstreamError("stub", "service unavailable", status_code=503, body="down")
