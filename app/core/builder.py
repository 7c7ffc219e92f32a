from app.adapters.github.adapter import GitHubAdapter
from app.adapters.stackoverflow.adapter import StackOverflowAdapter
from app.core.cache import ResultCache
from app.core.config import Settings
from app.services.aggregator import ActivityAggregator


def build_aggregator(settings: Settings, cache: ResultCache) -> ActivityAggregator:
    """
    Wires one adapter per upstream around the shared cache.
    Missing identities are reported by each adapter at fetch time.
    """
    return ActivityAggregator([
        GitHubAdapter(
            cache,
            username=settings.github_username,
            token=settings.github_token,
            max_events=settings.github_max_events,
            timeout=settings.upstream_timeout_seconds,
        ),
        StackOverflowAdapter(
            cache,
            user_id=settings.stackoverflow_user_id,
            site=settings.stackoverflow_site,
            api_key=settings.stackexchange_key,
            split_endpoints=settings.stackoverflow_split_endpoints,
            timeout=settings.upstream_timeout_seconds,
        ),
    ])
