"""ContentStore — milestones, notifications, memories and photo albums."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from keepsake.config import settings
from keepsake.content.models import Album, Memory, Milestone, Notification, to_utc, utc_now
from keepsake.content.repository import EntityRepository
from keepsake.errors import NotFound

if TYPE_CHECKING:
    from pathlib import Path

    from keepsake.dates import Clock
    from keepsake.uploads import PhotoStorage

logger = logging.getLogger(__name__)


class ContentStore:
    """Domain operations layered on one repository per entity kind.

    Singleton accessed via ``ContentStore.get()``.  Pass an explicit
    *db_path* for test isolation (e.g. ``tmp_path / "test.db"``) and a
    *clock* to control the default memory date.
    """

    _instance: ContentStore | None = None

    def __init__(self, db_path: Path | None = None, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self.milestones = EntityRepository(Milestone, "milestones", db_path)
        self.notifications = EntityRepository(Notification, "notifications", db_path)
        self.memories = EntityRepository(Memory, "memories", db_path)
        self.albums = EntityRepository(Album, "albums", db_path)

    @classmethod
    def get(cls) -> ContentStore:
        """Return the shared ContentStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    async def check(self) -> dict[str, int]:
        """Touch every table (creating it if needed) and return record counts."""
        counts = {}
        for repo in (self.milestones, self.notifications, self.memories, self.albums):
            counts[repo.table] = await repo.count()
        logger.info("Database ready: %s", counts)
        return counts

    # -- Milestones ------------------------------------------------------------

    async def create_milestone(self, fields: dict[str, Any]) -> Milestone:
        return await self.milestones.create(fields)

    async def list_milestones(self) -> list[Milestone]:
        """All milestones, in no guaranteed order."""
        return await self.milestones.find_all()

    async def get_milestone(self, milestone_id: str) -> Milestone | None:
        return await self.milestones.find_by_id(milestone_id)

    # -- Notifications ---------------------------------------------------------

    async def create_notification(self, fields: dict[str, Any]) -> Notification:
        return await self.notifications.create(fields)

    # -- Memories --------------------------------------------------------------

    async def create_memory(self, fields: dict[str, Any]) -> Memory:
        """Store a memory; a missing or null ``date`` becomes the current instant."""
        data = dict(fields)
        if data.get("date") is None:
            data["date"] = to_utc(self._clock())
        return await self.memories.create(data)

    async def recent_memories(self, limit: int | None = None) -> list[Memory]:
        """The newest memories by date, newest first (default: two)."""
        return await self.memories.find_sorted_limited(
            "date", "desc", settings.recent_memories_limit if limit is None else limit
        )

    # -- Albums ----------------------------------------------------------------

    async def create_album(self, name: str) -> Album:
        """Create an album. Photos always start empty."""
        return await self.albums.create({"name": name, "photos": []})

    async def get_album(self, album_id: str) -> Album | None:
        return await self.albums.find_by_id(album_id)

    async def attach_photo(self, album_id: str, photo_reference: str) -> Album:
        """Append *photo_reference* to the album's photos.

        Raises NotFound if the album does not exist.
        """
        album = await self.albums.append(album_id, "photos", photo_reference)
        logger.info("Attached photo to album %s (%d photos)", album_id, len(album.photos))
        return album

    async def attach_upload(
        self,
        album_id: str,
        data: bytes,
        filename: str,
        photos: PhotoStorage,
        field_name: str = "photo",
    ) -> Album:
        """Store uploaded bytes and attach the resulting reference.

        The album must exist before anything is written.  A failed write
        leaves the album unchanged; a failed attach removes the written file.
        """
        if await self.albums.find_by_id(album_id) is None:
            msg = f"Album not found: {album_id}"
            raise NotFound(msg)

        reference = photos.store_photo(data, filename, field_name)
        try:
            return await self.attach_photo(album_id, reference)
        except Exception:
            try:
                photos.delete(reference)
            except (OSError, ValueError):
                logger.warning("Failed to remove orphaned photo %s", reference, exc_info=True)
            raise
