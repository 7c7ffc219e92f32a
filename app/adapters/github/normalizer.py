"""
GitHub event -> Activity mapping.

Each event kind is one row of `EVENT_RULES`; adding a kind means adding a row.
Kinds without a row keep their raw tag as the activity type.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from app.core.models.domain import Activity, ActivitySource, ActivityType, parse_instant
from app.adapters._fields import optional_str, require

SOURCE = ActivitySource.GITHUB.value
GITHUB_WEB_URL = "https://github.com"

Payload = Mapping[str, Any]


@dataclass(frozen=True)
class EventRule:
    type: str
    title: Callable[[Payload, str], str]
    description: Callable[[Payload], Optional[str]] = lambda payload: None
    url: Callable[[Payload], Optional[str]] = lambda payload: None


def _push_size(payload: Payload) -> int:
    size = payload.get("size")
    if size is None:
        size = payload.get("distinct_size")
    if size is None:
        size = len(payload.get("commits") or [])
    return size


def _first_commit_message(payload: Payload) -> Optional[str]:
    commits = payload.get("commits") or []
    if not commits:
        return None
    return optional_str((commits[0] or {}).get("message"))


def _nested(payload: Payload, key: str, field: str) -> Optional[str]:
    return optional_str((payload.get(key) or {}).get(field))


EVENT_RULES: Dict[str, EventRule] = {
    "PushEvent": EventRule(
        type=ActivityType.COMMIT.value,
        title=lambda p, repo: f"Pushed {_push_size(p)} commit(s) to {repo}",
        description=_first_commit_message,
    ),
    "CreateEvent": EventRule(
        type=ActivityType.CREATE.value,
        title=lambda p, repo: f"Created {p.get('ref_type') or 'ref'} in {repo}",
        description=lambda p: optional_str(p.get("ref")),
    ),
    "IssuesEvent": EventRule(
        type=ActivityType.ISSUE.value,
        title=lambda p, repo: f"{p.get('action') or 'updated'} issue in {repo}",
        description=lambda p: _nested(p, "issue", "title"),
        url=lambda p: _nested(p, "issue", "html_url"),
    ),
    "PullRequestEvent": EventRule(
        type=ActivityType.PULL_REQUEST.value,
        title=lambda p, repo: f"{p.get('action') or 'updated'} pull request in {repo}",
        description=lambda p: _nested(p, "pull_request", "title"),
        url=lambda p: _nested(p, "pull_request", "html_url"),
    ),
}


def _fallback_rule(event_type: str) -> EventRule:
    return EventRule(
        type=event_type,
        title=lambda p, repo: f"GitHub activity: {event_type} in {repo}",
    )


def normalize_github_event(event: Mapping[str, Any]) -> Activity:
    event_type = str(require(event, "type", SOURCE))
    repo_name = str(require(require(event, "repo", SOURCE), "name", SOURCE))
    payload = event.get("payload") or {}

    rule = EVENT_RULES.get(event_type) or _fallback_rule(event_type)

    return Activity(
        id=str(require(event, "id", SOURCE)),
        source=SOURCE,
        type=rule.type,
        title=rule.title(payload, repo_name),
        description=rule.description(payload),
        url=rule.url(payload) or f"{GITHUB_WEB_URL}/{repo_name}",
        timestamp=parse_instant(require(event, "created_at", SOURCE)),
        repo_name=repo_name,
    )
