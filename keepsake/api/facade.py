"""QueryFacade — the named operations the HTTP layer dispatches to.

Each method validates its input, calls exactly one store or day-counter
operation, and returns JSON-ready data.  Domain errors propagate unchanged
for the transport to map.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import ValidationError

from keepsake.api.schemas import AlbumIn, MemoryIn, MilestoneIn, NotificationIn, RequestBody
from keepsake.content.models import Entity, format_instant
from keepsake.errors import ValidationRejected

if TYPE_CHECKING:
    from keepsake.content.store import ContentStore
    from keepsake.dates import DayCounter
    from keepsake.uploads import PhotoStorage

logger = logging.getLogger(__name__)

B = TypeVar("B", bound=RequestBody)


def parse_body(model: type[B], body: Any) -> B:
    """Validate a decoded request body, raising ValidationRejected on failure."""
    if body is None:
        body = {}
    if not isinstance(body, dict):
        msg = "request body must be a JSON object"
        raise ValidationRejected(msg)
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        msg = "invalid request body"
        raise ValidationRejected(
            msg, details=exc.errors(include_url=False, include_context=False, include_input=False)
        ) from exc


def _dump(record: Entity) -> dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True)


class QueryFacade:
    """Stateless dispatch from API operations to the content store."""

    def __init__(self, store: ContentStore, counter: DayCounter, photos: PhotoStorage) -> None:
        self._store = store
        self._counter = counter
        self._photos = photos

    # -- Love day --------------------------------------------------------------

    def love_day(self) -> dict[str, Any]:
        return {"loveDay": format_instant(self._counter.reference)}

    def days_together(self) -> dict[str, Any]:
        return {"daysTogether": self._counter.days_together()}

    # -- Milestones ------------------------------------------------------------

    async def create_milestone(self, body: Any) -> dict[str, Any]:
        fields = parse_body(MilestoneIn, body).to_fields()
        return _dump(await self._store.create_milestone(fields))

    async def list_milestones(self) -> list[dict[str, Any]]:
        return [_dump(m) for m in await self._store.list_milestones()]

    # -- Notifications ---------------------------------------------------------

    async def create_notification(self, body: Any) -> dict[str, Any]:
        fields = parse_body(NotificationIn, body).to_fields()
        return _dump(await self._store.create_notification(fields))

    # -- Memories --------------------------------------------------------------

    async def create_memory(self, body: Any) -> dict[str, Any]:
        fields = parse_body(MemoryIn, body).to_fields()
        return _dump(await self._store.create_memory(fields))

    async def recent_memories(self) -> list[dict[str, Any]]:
        return [_dump(m) for m in await self._store.recent_memories()]

    # -- Albums ----------------------------------------------------------------

    async def create_album(self, body: Any) -> dict[str, Any]:
        album_in = parse_body(AlbumIn, body)
        return _dump(await self._store.create_album(album_in.name))

    async def attach_photo(
        self, album_id: str, data: bytes | None, filename: str | None
    ) -> dict[str, Any]:
        logger.debug("Attach photo to album %s: %r", album_id, filename)
        if data is None:
            msg = "multipart field 'photo' is required"
            raise ValidationRejected(msg)
        album = await self._store.attach_upload(
            album_id, data, filename or "", self._photos, field_name="photo"
        )
        return _dump(album)
