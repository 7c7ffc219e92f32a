import asyncio
import math
from typing import Any, Dict, List, Mapping, Optional

import requests
from github import Auth, Github, GithubException

from app.adapters.github.normalizer import normalize_github_event
from app.core.cache import ResultCache
from app.core.config import DEFAULT_GITHUB_MAX_EVENTS, DEFAULT_UPSTREAM_TIMEOUT_SECONDS
from app.core.errors import UpstreamError
from app.core.logger import get_logger, truncate_body
from app.core.models.domain import Activity, ActivitySource
from app.ports.activity_source import ActivitySourceAdapter

logger = get_logger(__name__)

USER_AGENT = "Developer-Activity-Dashboard"


class GitHubAdapter(ActivitySourceAdapter):
    """
    Reads the public event feed of one GitHub user (`GET /users/{username}/events`).
    Both the username and a token are required; there is no default identity.
    """

    source = ActivitySource.GITHUB.value

    def __init__(
        self,
        cache: ResultCache,
        username: Optional[str] = None,
        token: Optional[str] = None,
        *,
        max_events: int = DEFAULT_GITHUB_MAX_EVENTS,
        timeout: float = DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
        client: Optional[Github] = None,
    ):
        super().__init__(cache, timeout=timeout)
        self.username = username
        self.token = token
        self.max_events = max_events
        self._client = client

    def missing_configuration(self) -> List[str]:
        missing = []
        if not self.username:
            missing.append("GITHUB_USERNAME")
        if not self.token:
            missing.append("GITHUB_TOKEN")
        return missing

    def _get_client(self) -> Github:
        if self._client is None:
            self._client = Github(
                auth=Auth.Token(self.token),
                timeout=math.ceil(self.timeout),
                per_page=min(self.max_events, 100),
                user_agent=USER_AGENT,
            )
        return self._client

    def _fetch_events(self) -> List[Dict[str, Any]]:
        """
        Blocking PyGithub call; runs in a worker thread.
        """
        logger.info(f"📡 Fetching GitHub activity for user: {self.username}")
        try:
            events = self._get_client().get_user(self.username).get_events()
            raw_events: List[Dict[str, Any]] = []
            for event in events:
                if len(raw_events) >= self.max_events:
                    logger.warning(f"⚠️ Hit safety limit of {self.max_events} events. Stopping fetch.")
                    break
                raw_events.append(event.raw_data)
            return raw_events
        except GithubException as e:
            message = e.data.get("message", e) if isinstance(e.data, dict) else e
            raise UpstreamError(
                self.source,
                str(message),
                status_code=e.status,
                body=truncate_body(str(e.data)) if e.data else None,
            ) from e
        except requests.RequestException as e:
            raise UpstreamError(self.source, f"network error: {e}") from e

    async def fetch_raw(self) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._fetch_events)

    def normalize(self, raw: Mapping[str, Any]) -> Activity:
        return normalize_github_event(raw)
