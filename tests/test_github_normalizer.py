from datetime import datetime, timezone

import pytest

from app.adapters.github.normalizer import EVENT_RULES, normalize_github_event
from app.core.errors import MalformedEventError


def _event(event_type, payload=None, **overrides):
    event = {
        "id": "40000000001",
        "type": event_type,
        "repo": {"id": 1, "name": "octo/widgets"},
        "payload": payload or {},
        "created_at": "2024-01-03T10:15:00Z",
    }
    event.update(overrides)
    return event


def test_push_event_becomes_commit():
    raw = _event("PushEvent", {"size": 3, "commits": [{"message": "Fix flaky test"}, {}, {}]})

    activity = normalize_github_event(raw)

    assert activity.id == "40000000001"
    assert activity.source == "github"
    assert activity.type == "commit"
    assert activity.title == "Pushed 3 commit(s) to octo/widgets"
    assert activity.description == "Fix flaky test"
    assert activity.repo_name == "octo/widgets"
    assert activity.url == "https://github.com/octo/widgets"
    assert activity.timestamp == datetime(2024, 1, 3, 10, 15, tzinfo=timezone.utc)


def test_push_without_size_counts_commits():
    raw = _event("PushEvent", {"commits": [{"message": "a"}, {"message": "b"}]})

    assert normalize_github_event(raw).title == "Pushed 2 commit(s) to octo/widgets"


def test_create_event():
    activity = normalize_github_event(_event("CreateEvent", {"ref_type": "branch", "ref": "feature/x"}))

    assert activity.type == "create"
    assert activity.title == "Created branch in octo/widgets"
    assert activity.description == "feature/x"


def test_issues_event_links_to_the_issue():
    payload = {"action": "opened", "issue": {"title": "Crash on start", "html_url": "https://github.com/octo/widgets/issues/7"}}

    activity = normalize_github_event(_event("IssuesEvent", payload))

    assert activity.type == "issue"
    assert activity.title == "opened issue in octo/widgets"
    assert activity.description == "Crash on start"
    assert activity.url == "https://github.com/octo/widgets/issues/7"


def test_pull_request_event():
    payload = {"action": "closed", "pull_request": {"title": "Add cache", "html_url": "https://github.com/octo/widgets/pull/9"}}

    activity = normalize_github_event(_event("PullRequestEvent", payload))

    assert activity.type == "pull_request"
    assert activity.title == "closed pull request in octo/widgets"
    assert activity.url == "https://github.com/octo/widgets/pull/9"


def test_unmapped_event_keeps_raw_type():
    activity = normalize_github_event(_event("WatchEvent", {"action": "started"}))

    assert activity.type == "WatchEvent"
    assert activity.title == "GitHub activity: WatchEvent in octo/widgets"
    assert activity.repo_name == "octo/widgets"
    assert activity.url == "https://github.com/octo/widgets"


def test_mapped_kinds_are_the_documented_ones():
    assert set(EVENT_RULES) == {"PushEvent", "CreateEvent", "IssuesEvent", "PullRequestEvent"}


def test_missing_payload_still_produces_activity():
    raw = _event("IssuesEvent")
    del raw["payload"]

    activity = normalize_github_event(raw)

    assert activity.title == "updated issue in octo/widgets"


def test_repo_scoped_fields_never_leak_tags():
    assert normalize_github_event(_event("PushEvent", {"size": 1})).tags is None


@pytest.mark.parametrize("missing", ["id", "type", "repo", "created_at"])
def test_records_without_required_fields_are_malformed(missing):
    raw = _event("PushEvent", {"size": 1})
    del raw[missing]

    with pytest.raises(MalformedEventError):
        normalize_github_event(raw)
