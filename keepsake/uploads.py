"""PhotoStorage — local disk storage for uploaded album photos."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path, PurePosixPath

from keepsake.config import settings
from keepsake.errors import UploadFailure, ValidationRejected

logger = logging.getLogger(__name__)

_SAFE_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")
_SAFE_FIELD_RE = re.compile(r"[^a-zA-Z0-9_\-]")


class PhotoStorage:
    """Writes uploaded photos under one directory and hands out references.

    A reference is the public URL path of the stored file, e.g.
    ``/uploads/photo-1739232000123.png``; the API server serves the
    directory read-only under the same prefix.

    Singleton accessed via ``PhotoStorage.get()``.  Pass an explicit *root*
    for test isolation (e.g. ``tmp_path / "uploads"``).
    """

    _instance: PhotoStorage | None = None

    def __init__(
        self,
        root: Path | None = None,
        url_prefix: str | None = None,
        max_bytes: int | None = None,
    ) -> None:
        self._root = (root or settings.uploads_dir).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._prefix = "/" + (url_prefix or settings.get_uploads_url_prefix()).strip("/")
        self._max_bytes = max_bytes or settings.max_upload_bytes

    @classmethod
    def get(cls) -> PhotoStorage:
        """Return the shared PhotoStorage instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Clear the singleton (for tests)."""
        cls._instance = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def url_prefix(self) -> str:
        return self._prefix

    # -- Naming ----------------------------------------------------------------

    @staticmethod
    def extension_of(filename: str) -> str:
        """Lower-cased extension of *filename*, or "" if missing or unsafe."""
        suffix = PurePosixPath(filename.replace("\\", "/")).suffix.lower()
        return suffix if _SAFE_EXTENSION_RE.match(suffix) else ""

    def _claim(self, field_name: str, extension: str) -> Path:
        """Exclusively create an empty file named ``<field>-<ms><ext>``.

        Bumps the timestamp while the name is taken, so two uploads in the
        same millisecond still get distinct references.
        """
        field = _SAFE_FIELD_RE.sub("_", field_name) or "photo"
        stamp = int(time.time() * 1000)
        while True:
            target = self._root / f"{field}-{stamp}{extension}"
            try:
                target.touch(exist_ok=False)
            except FileExistsError:
                stamp += 1
                continue
            return target

    # -- File operations -------------------------------------------------------

    def store_photo(self, data: bytes, original_filename: str, field_name: str = "photo") -> str:
        """Persist *data* and return its stable reference path.

        Raises ``ValidationRejected`` for empty or oversized payloads and
        ``UploadFailure`` if the file cannot be written.
        """
        if not data:
            msg = "uploaded photo is empty"
            raise ValidationRejected(msg)
        if len(data) > self._max_bytes:
            msg = f"photo too large: {len(data)} bytes (max {self._max_bytes})"
            raise ValidationRejected(msg)

        target: Path | None = None
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            target = self._claim(field_name, self.extension_of(original_filename))
            target.write_bytes(data)
        except OSError as exc:
            if target is not None:
                target.unlink(missing_ok=True)
            logger.exception("Failed to store photo %r", original_filename)
            msg = "failed to store uploaded photo"
            raise UploadFailure(msg) from exc

        reference = f"{self._prefix}/{target.name}"
        logger.info("Stored photo %r as %s (%d bytes)", original_filename, reference, len(data))
        return reference

    def resolve(self, reference: str) -> Path:
        """Map a reference back to the file it names inside the root.

        Raises ``ValueError`` for references outside this storage.
        """
        if not reference.startswith(self._prefix + "/"):
            msg = f"Not an upload reference: {reference!r}"
            raise ValueError(msg)
        name = reference[len(self._prefix) + 1 :]
        target = (self._root / name).resolve()
        if target.parent != self._root:
            msg = f"Path traversal detected: {reference!r}"
            raise ValueError(msg)
        return target

    def read_bytes(self, reference: str) -> bytes:
        """Read the bytes behind a reference."""
        target = self.resolve(reference)
        if not target.exists():
            msg = f"File not found: {reference}"
            raise FileNotFoundError(msg)
        return target.read_bytes()

    def delete(self, reference: str) -> bool:
        """Delete a stored file. Returns True if deleted, False if not found."""
        target = self.resolve(reference)
        if not target.exists():
            return False
        target.unlink()
        logger.info("Deleted photo %s", reference)
        return True
