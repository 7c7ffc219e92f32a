from datetime import datetime, timezone

import pytest

from app.adapters.stackoverflow.normalizer import normalize_stackoverflow_item, synthesize_id
from app.core.errors import MalformedEventError

JAN_2 = 1704153600  # 2024-01-02T00:00:00Z


def test_answer_item():
    item = {
        "post_type": "answer",
        "post_id": 777,
        "question_id": 555,
        "title": "How do I use &quot;asyncio.gather&quot;?",
        "link": "https://stackoverflow.com/a/777",
        "creation_date": JAN_2,
        "tags": ["python", "asyncio"],
    }

    activity = normalize_stackoverflow_item(item)

    assert activity.id == "777"
    assert activity.source == "stackoverflow"
    assert activity.type == "answer"
    assert activity.title == 'Answered: How do I use "asyncio.gather"?'
    assert activity.url == "https://stackoverflow.com/a/777"
    assert activity.timestamp == datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert activity.tags == ("python", "asyncio")
    assert activity.repo_name is None


def test_question_item_falls_back_to_question_id():
    item = {"post_type": "question", "question_id": 555, "title": "Why?", "link": "https://stackoverflow.com/q/555", "creation_date": JAN_2}

    activity = normalize_stackoverflow_item(item)

    assert activity.id == "555"
    assert activity.type == "question"
    assert activity.title == "Asked: Why?"


def test_answer_id_preferred_over_question_id():
    item = {"post_type": "answer", "answer_id": 42, "question_id": 555, "creation_date": JAN_2}

    activity = normalize_stackoverflow_item(item)

    assert activity.id == "42"
    assert activity.title == "Answered: question 555"


def test_other_items_become_generic_activity():
    item = {"activity_type": "badge", "creation_date": JAN_2}

    activity = normalize_stackoverflow_item(item, id_factory=lambda epoch: f"so-{epoch}-fixed")

    assert activity.type == "activity"
    assert activity.title == "StackOverflow activity: badge"
    assert activity.id == f"so-{JAN_2}-fixed"
    assert activity.url is None
    assert activity.tags is None


def test_last_activity_date_used_when_creation_date_absent():
    item = {"post_type": "question", "question_id": 1, "title": "t", "last_activity_date": JAN_2}

    assert normalize_stackoverflow_item(item).timestamp == datetime(2024, 1, 2, tzinfo=timezone.utc)


def test_empty_tags_are_omitted():
    item = {"post_type": "question", "question_id": 1, "title": "t", "creation_date": JAN_2, "tags": []}

    assert normalize_stackoverflow_item(item).tags is None


def test_string_tags_are_not_split_into_characters():
    item = {"post_type": "question", "question_id": 1, "title": "t", "creation_date": JAN_2, "tags": "python"}

    assert normalize_stackoverflow_item(item).tags is None


def test_tags_cannot_be_mutated_after_normalization():
    item = {"post_type": "question", "question_id": 1, "title": "t", "creation_date": JAN_2, "tags": ["python"]}
    activity = normalize_stackoverflow_item(item)

    item["tags"].append("injected")
    with pytest.raises(AttributeError):
        activity.tags.append("injected")

    assert activity.tags == ("python",)


def test_synthesized_ids_do_not_repeat():
    ids = {synthesize_id(JAN_2) for _ in range(50)}

    assert len(ids) == 50
    assert all(i.startswith(f"so-{JAN_2}-") for i in ids)


@pytest.mark.parametrize("item", [{"post_type": "answer", "post_id": 1}, {"post_type": "answer", "post_id": 1, "creation_date": "soon"}])
def test_items_without_a_usable_timestamp_are_malformed(item):
    with pytest.raises(MalformedEventError):
        normalize_stackoverflow_item(item)
