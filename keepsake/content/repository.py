"""EntityRepository — generic JSON-document CRUD over one libsql table."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import ValidationError

from keepsake.content.models import Entity, make_id
from keepsake.db import get_connection
from keepsake.errors import NotFound, ValidationRejected

if TYPE_CHECKING:
    from pathlib import Path

    from keepsake.db import AsyncConnection

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS {table} (
    id         TEXT PRIMARY KEY,
    data       TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

_DIRECTIONS = {"asc": "ASC", "desc": "DESC"}


class EntityRepository(Generic[T]):
    """Persists one entity kind as JSON documents keyed by ``id``.

    Documents are stored with their wire (alias) field names, so the JSON in
    the ``data`` column is exactly what the API returns.  Pass an explicit
    *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    def __init__(self, model: type[T], table: str, db_path: Path | None = None) -> None:
        self._model = model
        self._table = table
        self._db_path = db_path
        self._initialised = False

    @property
    def table(self) -> str:
        return self._table

    # -- Internal helpers ------------------------------------------------------

    async def _connect(self) -> AsyncConnection:
        db = await get_connection(local_path_override=self._db_path)
        if not self._initialised:
            try:
                await db.execute(_CREATE_TABLE.format(table=self._table))
                await db.commit()
            except Exception:
                await db.close()
                raise
            self._initialised = True
        return db

    def _build(self, data: dict[str, Any]) -> T:
        try:
            return self._model.model_validate(data)
        except ValidationError as exc:
            msg = f"invalid {self._model.__name__.lower()}"
            raise ValidationRejected(
                msg,
                details=exc.errors(include_url=False, include_context=False, include_input=False),
            ) from exc

    def _dump(self, record: T) -> str:
        return json.dumps(record.model_dump(mode="json", by_alias=True))

    def _load(self, raw: str) -> T:
        return self._model.model_validate_json(raw)

    def _json_path(self, field: str) -> str:
        """Map a model attribute name to its JSON path in the stored document."""
        info = self._model.model_fields.get(field)
        if info is None or field == "id":
            msg = f"{self._model.__name__} has no field {field!r}"
            raise ValueError(msg)
        return f"$.{info.alias or field}"

    # -- CRUD ------------------------------------------------------------------

    async def create(self, data: dict[str, Any]) -> T:
        """Insert a new record, merging *data* over the model defaults.

        Any ``id`` in *data* is replaced by a freshly generated one.
        """
        record = self._build({**data, "id": make_id()})
        db = await self._connect()
        try:
            await db.execute(
                f"INSERT INTO {self._table} (id, data, created_at) VALUES (?, ?, ?)",  # noqa: S608
                (record.id, self._dump(record), datetime.now(UTC).isoformat()),
            )
            await db.commit()
        finally:
            await db.close()
        logger.info("Created %s: %s", self._table, record.id)
        return record

    async def find_by_id(self, record_id: str) -> T | None:
        """Fetch a record by ID, or None if not found."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT data FROM {self._table} WHERE id = ?",  # noqa: S608
                (record_id,),
            )
            row = await cursor.fetchone()
        finally:
            await db.close()
        return self._load(row[0]) if row else None

    async def find_all(self) -> list[T]:
        """Return every record (insertion order, not a guarantee)."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT data FROM {self._table} ORDER BY rowid"  # noqa: S608
            )
            rows = await cursor.fetchall()
        finally:
            await db.close()
        return [self._load(row[0]) for row in rows]

    async def find_sorted_limited(
        self, sort_key: str, direction: str = "desc", limit: int = 10
    ) -> list[T]:
        """Return at most *limit* records ordered by the *sort_key* field.

        Instants are stored as fixed-width UTC text, so text order is
        chronological order.
        """
        order = _DIRECTIONS.get(direction.lower())
        if order is None:
            msg = f"direction must be 'asc' or 'desc', got {direction!r}"
            raise ValueError(msg)
        if limit <= 0:
            return []
        path = self._json_path(sort_key)
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT data FROM {self._table} "  # noqa: S608
                f"ORDER BY json_extract(data, ?) {order}, rowid {order} LIMIT ?",
                (path, limit),
            )
            rows = await cursor.fetchall()
        finally:
            await db.close()
        return [self._load(row[0]) for row in rows]

    async def save(self, record: T) -> T:
        """Overwrite an existing record. Raises NotFound if the ID is unknown."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"UPDATE {self._table} SET data = ? WHERE id = ?",  # noqa: S608
                (self._dump(record), record.id),
            )
            await db.commit()
            updated = cursor.rowcount > 0
        finally:
            await db.close()
        if not updated:
            msg = f"{self._model.__name__} not found: {record.id}"
            raise NotFound(msg)
        return record

    async def append(self, record_id: str, field: str, value: Any) -> T:
        """Append *value* to the list *field* in a single UPDATE statement.

        Concurrent appends to the same record never overwrite each other.
        The updated document is read and parsed before the commit, so a
        failure at any point leaves the record unchanged.  Raises NotFound
        if the ID is unknown.
        """
        path = self._json_path(field) + "[#]"
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"UPDATE {self._table} "  # noqa: S608
                "SET data = json_insert(data, ?, json(?)) WHERE id = ? RETURNING data",
                (path, json.dumps(value), record_id),
            )
            row = await cursor.fetchone()
            if row is None:
                msg = f"{self._model.__name__} not found: {record_id}"
                raise NotFound(msg)
            record = self._load(row[0])
            await db.commit()
        finally:
            await db.close()
        logger.info("Appended to %s.%s: %s", self._table, field, record_id)
        return record

    async def count(self) -> int:
        """Number of stored records."""
        db = await self._connect()
        try:
            cursor = await db.execute(f"SELECT COUNT(*) FROM {self._table}")  # noqa: S608
            row = await cursor.fetchone()
        finally:
            await db.close()
        return int(row[0]) if row else 0
