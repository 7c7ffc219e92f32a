from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class ActivitySource(str, Enum):
    """
    Upstreams the aggregator knows how to read.
    """
    GITHUB = "github"
    STACKOVERFLOW = "stackoverflow"


class ActivityType(str, Enum):
    COMMIT = "commit"
    CREATE = "create"
    ISSUE = "issue"
    PULL_REQUEST = "pull_request"
    QUESTION = "question"
    ANSWER = "answer"
    ACTIVITY = "activity"


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Activity(BaseModel):
    """
    Normalized representation of one upstream event.

    `source` and `type` are plain strings: unmapped upstream kinds keep their
    raw tag, and new sources do not need a schema change.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Unique within its source")
    source: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    url: Optional[str] = None
    timestamp: datetime
    repo_name: Optional[str] = Field(default=None, alias="repoName")
    tags: Optional[Tuple[str, ...]] = None

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

    @property
    def key(self) -> Tuple[str, str]:
        return (self.source, self.id)


class FailureReason(str, Enum):
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"
    UPSTREAM = "upstream"
    MALFORMED_PAYLOAD = "malformed_payload"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class SourceResult:
    """
    Outcome of one adapter invocation. A failed result never carries activities.
    """
    source: str
    activities: Tuple[Activity, ...] = field(default_factory=tuple)
    failure: Optional[FailureReason] = None
    detail: Optional[str] = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, source: str, activities, *, from_cache: bool = False) -> "SourceResult":
        return cls(source=source, activities=tuple(activities), from_cache=from_cache)

    @classmethod
    def failed(cls, source: str, reason: FailureReason, detail: str) -> "SourceResult":
        return cls(source=source, failure=reason, detail=detail)


def parse_instant(value) -> datetime:
    """
    Accepts datetimes or ISO-8601 strings (`Z`/`z` suffix and date-only forms
    included) and returns an aware UTC datetime.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not an ISO-8601 instant: {value!r}")
    text = value.strip().upper()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return to_utc(parsed)


class ActivityQuery(BaseModel):
    """Filter, date range and page requested by a caller."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: Optional[str] = None
    from_date: Optional[datetime] = Field(default=None, alias="fromDate")
    to_date: Optional[datetime] = Field(default=None, alias="toDate")
    limit: int = Field(default=20, ge=0)
    offset: int = Field(default=0, ge=0)

    @field_validator("from_date", "to_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        if value is None or value == "":
            return None
        return parse_instant(value)

    @field_validator("source", mode="before")
    @classmethod
    def _blank_source(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
