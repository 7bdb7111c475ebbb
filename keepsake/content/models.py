"""Record types for the four stored entity kinds.

Every record is a pydantic model persisted as one JSON document. Field
aliases give the camelCase wire names (``eventDate``); Python code uses the
snake_case attribute names.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer


def to_utc(value: datetime) -> datetime:
    """Normalize an instant to aware UTC with millisecond precision.

    Naive values are taken to already be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    try:
        value = value.astimezone(UTC)
    except OverflowError as exc:
        msg = "instant out of range"
        raise ValueError(msg) from exc
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def format_instant(value: datetime) -> str:
    """Render as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (sortable as text)."""
    value = to_utc(value)
    ms = value.microsecond // 1000
    return f"{value.year:04d}-{value:%m-%dT%H:%M:%S}.{ms:03d}Z"


def utc_now() -> datetime:
    return to_utc(datetime.now(UTC))


Instant = Annotated[
    datetime,
    AfterValidator(to_utc),
    PlainSerializer(format_instant, return_type=str, when_used="json"),
]


def make_id() -> str:
    """Generate a new record ID."""
    return uuid.uuid4().hex


class Entity(BaseModel):
    """Common base: every stored record has a system-assigned ``id``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str


class Milestone(Entity):
    """A titled, dated relationship event."""

    title: str | None = None
    date: Instant | None = None
    description: str | None = None


class Notification(Entity):
    """A reminder message tied to a date. Not linked to any milestone."""

    message: str | None = None
    event_date: Instant | None = Field(default=None, alias="eventDate")


class Memory(Entity):
    """A free-text memory. ``date`` defaults to the creation instant."""

    content: str | None = None
    date: Instant = Field(default_factory=utc_now)


class Album(Entity):
    """A named photo album holding an append-only list of photo references."""

    name: str
    photos: list[str] = Field(default_factory=list)
