import asyncio
from typing import Any, Dict, List, Mapping, Optional

import requests

from app.adapters.stackoverflow.normalizer import normalize_stackoverflow_item
from app.core.cache import ResultCache
from app.core.config import DEFAULT_UPSTREAM_TIMEOUT_SECONDS
from app.core.errors import MalformedEventError, UpstreamError
from app.core.logger import get_logger, truncate_body
from app.core.models.domain import Activity, ActivitySource
from app.ports.activity_source import ActivitySourceAdapter

logger = get_logger(__name__)


class StackOverflowAdapter(ActivitySourceAdapter):
    """
    Adapter for the Stack Exchange API (v2.3).

    The default reads `/users/{id}/activity`. With `split_endpoints=True` the
    `questions` and `answers` lists are requested concurrently instead and
    concatenated; either call failing fails the whole fetch.
    """
    BASE_URL = "https://api.stackexchange.com/2.3"
    PAGE_SIZE = 100

    source = ActivitySource.STACKOVERFLOW.value

    def __init__(
        self,
        cache: ResultCache,
        user_id: Optional[str] = None,
        *,
        site: str = "stackoverflow",
        api_key: Optional[str] = None,
        split_endpoints: bool = False,
        timeout: float = DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
    ):
        super().__init__(cache, timeout=timeout)
        self.user_id = user_id
        self.site = site
        self.api_key = api_key
        self.split_endpoints = split_endpoints

    def missing_configuration(self) -> List[str]:
        return [] if self.user_id else ["STACKOVERFLOW_USER_ID"]

    def _get_items(self, endpoint: str) -> List[Dict[str, Any]]:
        """
        Blocking GET of one user list endpoint; runs in a worker thread.
        """
        url = f"{self.BASE_URL}/users/{self.user_id}/{endpoint}"
        params: Dict[str, Any] = {"site": self.site, "pagesize": self.PAGE_SIZE}
        if self.api_key:
            params["key"] = self.api_key

        logger.info(f"📡 Fetching StackOverflow {endpoint} for user ID: {self.user_id}")
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(self.source, f"network error on {endpoint}: {e}") from e

        logger.info(f"StackOverflow API response status: {response.status_code}")
        if not response.ok:
            raise UpstreamError(
                self.source,
                f"{endpoint} request failed",
                status_code=response.status_code,
                body=truncate_body(response.text),
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedEventError(self.source, f"{endpoint} answer is not JSON") from e

        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise MalformedEventError(self.source, f"{endpoint} answer has no 'items' list")

        if payload.get("backoff"):
            logger.warning(f"⚠️ Stack Exchange asked to back off for {payload['backoff']}s")
        if payload.get("quota_remaining") is not None and payload["quota_remaining"] < 10:
            logger.warning(f"⚠️ Stack Exchange quota nearly exhausted: {payload['quota_remaining']} left")

        return payload["items"]

    async def _fetch_split(self) -> List[Dict[str, Any]]:
        questions, answers = await asyncio.gather(
            asyncio.to_thread(self._get_items, "questions"),
            asyncio.to_thread(self._get_items, "answers"),
        )
        tagged = [{"post_type": "question", **item} for item in questions]
        for item in answers:
            answer = {"post_type": "answer", **item}
            if not answer.get("link") and answer.get("answer_id") is not None:
                answer["link"] = f"https://{self.site}.com/a/{answer['answer_id']}"
            tagged.append(answer)
        return tagged

    async def fetch_raw(self) -> List[Dict[str, Any]]:
        if self.split_endpoints:
            return await self._fetch_split()
        return await asyncio.to_thread(self._get_items, "activity")

    def normalize(self, raw: Mapping[str, Any]) -> Activity:
        return normalize_stackoverflow_item(raw)
