"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

from keepsake.content.store import ContentStore
from keepsake.dates import DayCounter
from keepsake.uploads import PhotoStorage

LOVE_DAY = datetime(2025, 2, 11, tzinfo=UTC)


@pytest.fixture(autouse=False)
def _no_turso(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use local file, not remote Turso."""
    monkeypatch.setattr("keepsake.config.settings.turso_database_url", "")


@pytest.fixture
def photos(tmp_path):
    """Create a PhotoStorage rooted in a temporary directory."""
    PhotoStorage._reset()
    p = PhotoStorage(root=tmp_path / "uploads")
    PhotoStorage._instance = p
    yield p
    PhotoStorage._reset()


@pytest.fixture
def store(tmp_path, _no_turso):
    """Create a ContentStore backed by a temp database."""
    ContentStore._reset()
    s = ContentStore(db_path=tmp_path / "test.db")
    ContentStore._instance = s
    yield s
    ContentStore._reset()


@pytest.fixture
def counter() -> DayCounter:
    """DayCounter anchored at the default love day, frozen 100 days later."""
    return DayCounter(LOVE_DAY, clock=lambda: datetime(2025, 5, 22, 12, 0, tzinfo=UTC))
