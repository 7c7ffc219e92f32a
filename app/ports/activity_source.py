import asyncio
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Sequence

from app.core.cache import ResultCache
from app.core.config import DEFAULT_UPSTREAM_TIMEOUT_SECONDS
from app.core.errors import MalformedEventError, UpstreamError
from app.core.logger import get_logger
from app.core.models.domain import Activity, FailureReason, SourceResult

logger = get_logger(__name__)


class ActivitySourceAdapter(ABC):
    """
    Port (Interface) for any activity upstream.

    The orchestrator depends on this abstraction only. Subclasses provide the
    raw fetch and the normalizer; this class owns the read-through cache, the
    timeout and the rule that failures become a `SourceResult`, never an
    exception.
    """

    source: str = ""

    def __init__(self, cache: ResultCache, timeout: float = DEFAULT_UPSTREAM_TIMEOUT_SECONDS):
        self.cache = cache
        self.timeout = timeout

    @property
    def cache_key(self) -> str:
        return f"{self.source}_activity"

    def missing_configuration(self) -> List[str]:
        """Names of required settings that are absent. Empty means ready."""
        return []

    @abstractmethod
    async def fetch_raw(self) -> Sequence[Mapping[str, Any]]:
        """
        Issues the upstream request(s) and returns the raw records.

        Raises:
            UpstreamError: transport failure or non-2xx answer.
        """

    @abstractmethod
    def normalize(self, raw: Mapping[str, Any]) -> Activity:
        """Maps one raw record onto an Activity."""

    async def fetch(self) -> List[Activity]:
        return list((await self.fetch_result()).activities)

    async def fetch_result(self) -> SourceResult:
        cached = self.cache.get(self.cache_key)
        if cached is not None:
            logger.info(f"Returning cached {self.source} data ({len(cached)} activities)")
            return SourceResult.success(self.source, cached, from_cache=True)

        missing = self.missing_configuration()
        if missing:
            detail = f"missing configuration: {', '.join(missing)}"
            logger.error(f"❌ {self.source} source disabled, {detail}")
            return SourceResult.failed(self.source, FailureReason.CONFIGURATION, detail)

        try:
            raw_items = await asyncio.wait_for(self.fetch_raw(), timeout=self.timeout)
        except asyncio.TimeoutError:
            detail = f"no answer within {self.timeout:g}s"
            logger.error(f"❌ {self.source} API timeout: {detail}")
            return SourceResult.failed(self.source, FailureReason.TIMEOUT, detail)
        except UpstreamError as e:
            logger.error(f"❌ {self.source} API error: {e}")
            if e.body:
                logger.error(f"{self.source} API response data: {e.body}")
            return SourceResult.failed(self.source, FailureReason.UPSTREAM, str(e))
        except MalformedEventError as e:
            logger.error(f"❌ Malformed {self.source} payload: {e}")
            return SourceResult.failed(self.source, FailureReason.MALFORMED_PAYLOAD, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error while fetching {self.source}: {e}")
            return SourceResult.failed(self.source, FailureReason.UNEXPECTED, str(e))

        try:
            activities = [self.normalize(item) for item in raw_items]
        except (MalformedEventError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"❌ Malformed {self.source} payload: {e}")
            return SourceResult.failed(self.source, FailureReason.MALFORMED_PAYLOAD, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error while normalizing {self.source}: {e}")
            return SourceResult.failed(self.source, FailureReason.UNEXPECTED, str(e))

        self.cache.set(self.cache_key, activities)
        logger.info(f"✅ Fetched {len(activities)} {self.source} activities")
        return SourceResult.success(self.source, activities)
