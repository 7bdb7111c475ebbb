"""Content store — entity records, persistence, and domain operations."""

from keepsake.content.models import Album, Memory, Milestone, Notification
from keepsake.content.repository import EntityRepository
from keepsake.content.store import ContentStore

__all__ = [
    "Album",
    "ContentStore",
    "EntityRepository",
    "Memory",
    "Milestone",
    "Notification",
]
