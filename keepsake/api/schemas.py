"""Request body models validated at the API boundary."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


def _blank_to_none(value: Any) -> Any:
    # Form posts send empty strings for untouched inputs.
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalInstant = Annotated[datetime | None, BeforeValidator(_blank_to_none)]


class RequestBody(BaseModel):
    """Base class for request bodies.

    Unknown keys are dropped rather than rejected; wrong types are errors.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_fields(self) -> dict[str, Any]:
        """Only the fields the caller actually sent, by attribute name."""
        return self.model_dump(exclude_unset=True)


class MilestoneIn(RequestBody):
    title: str | None = Field(default=None, description="Short milestone title")
    date: OptionalInstant = Field(default=None, description="When it happened")
    description: str | None = Field(default=None, description="Free-text details")


class NotificationIn(RequestBody):
    message: str | None = Field(default=None, description="Reminder text")
    event_date: OptionalInstant = Field(
        default=None, alias="eventDate", description="Date the reminder is about"
    )


class MemoryIn(RequestBody):
    content: str | None = Field(default=None, description="The memory itself")
    date: OptionalInstant = Field(
        default=None, description="When it happened. Defaults to now."
    )


class AlbumIn(RequestBody):
    name: str = Field(description="Album name")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "name must not be blank"
            raise ValueError(msg)
        return value
