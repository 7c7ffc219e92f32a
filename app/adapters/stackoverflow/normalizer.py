"""
Stack Exchange item -> Activity mapping, keyed on `post_type`.
"""
import html
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from app.core.errors import MalformedEventError
from app.core.models.domain import Activity, ActivitySource, ActivityType
from app.adapters._fields import optional_str, optional_tags

SOURCE = ActivitySource.STACKOVERFLOW.value

Item = Mapping[str, Any]


@dataclass(frozen=True)
class PostRule:
    type: str
    title: Callable[[Item], str]


def _post_title(item: Item) -> str:
    title = optional_str(item.get("title"))
    if title:
        return html.unescape(title)
    if item.get("question_id") is not None:
        return f"question {item['question_id']}"
    return "untitled post"


POST_RULES: Dict[str, PostRule] = {
    "answer": PostRule(type=ActivityType.ANSWER.value, title=lambda item: f"Answered: {_post_title(item)}"),
    "question": PostRule(type=ActivityType.QUESTION.value, title=lambda item: f"Asked: {_post_title(item)}"),
}

GENERIC_RULE = PostRule(
    type=ActivityType.ACTIVITY.value,
    title=lambda item: f"StackOverflow activity: {item.get('activity_type') or item.get('post_type') or 'update'}",
)


def epoch_to_utc(value: Any) -> datetime:
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise MalformedEventError(SOURCE, f"invalid epoch timestamp {value!r}") from e


def synthesize_id(epoch: Any) -> str:
    return f"so-{epoch}-{uuid.uuid4().hex[:12]}"


def normalize_stackoverflow_item(
    item: Item,
    id_factory: Callable[[Any], str] = synthesize_id,
) -> Activity:
    epoch = item.get("creation_date")
    if epoch is None:
        epoch = item.get("last_activity_date")
    if epoch is None:
        raise MalformedEventError(SOURCE, "record has neither 'creation_date' nor 'last_activity_date'")
    timestamp = epoch_to_utc(epoch)

    item_id: Optional[str] = None
    for key in ("post_id", "answer_id", "question_id"):
        if item.get(key) is not None:
            item_id = str(item[key])
            break

    rule = POST_RULES.get(item.get("post_type") or "", GENERIC_RULE)

    return Activity(
        id=item_id or id_factory(epoch),
        source=SOURCE,
        type=rule.type,
        title=rule.title(item),
        description=optional_str(item.get("description") or item.get("detail")),
        url=optional_str(item.get("link")),
        timestamp=timestamp,
        tags=optional_tags(item.get("tags")),
    )
