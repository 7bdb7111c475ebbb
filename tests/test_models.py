"""Tests for the stored record types."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from keepsake.content.models import (
    Album,
    Memory,
    Milestone,
    Notification,
    format_instant,
    make_id,
    to_utc,
)

# -- Instants ------------------------------------------------------------------


def test_to_utc_treats_naive_as_utc() -> None:
    assert to_utc(datetime(2025, 2, 11)) == datetime(2025, 2, 11, tzinfo=UTC)


def test_to_utc_converts_offsets() -> None:
    minus_five = timezone(timedelta(hours=-5))
    value = datetime(2025, 2, 10, 19, 0, tzinfo=minus_five)
    assert to_utc(value) == datetime(2025, 2, 11, tzinfo=UTC)


def test_to_utc_truncates_to_milliseconds() -> None:
    value = datetime(2025, 2, 11, 0, 0, 0, 123456, tzinfo=UTC)
    assert to_utc(value).microsecond == 123000


def test_format_instant_is_fixed_width() -> None:
    assert format_instant(datetime(2025, 2, 11, tzinfo=UTC)) == "2025-02-11T00:00:00.000Z"
    assert (
        format_instant(datetime(2025, 2, 11, 8, 30, 5, 250000, tzinfo=UTC))
        == "2025-02-11T08:30:05.250Z"
    )


# -- Records -------------------------------------------------------------------


def test_make_id_is_unique_hex() -> None:
    ids = {make_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(len(i) == 32 for i in ids)


def test_milestone_fields_optional() -> None:
    m = Milestone(id="m1")
    assert m.title is None
    assert m.date is None
    assert m.description is None


def test_milestone_json_dump() -> None:
    m = Milestone(id="m1", title="First date", date="2025-02-11T19:00:00Z")
    assert m.model_dump(mode="json", by_alias=True) == {
        "id": "m1",
        "title": "First date",
        "date": "2025-02-11T19:00:00.000Z",
        "description": None,
    }


def test_notification_uses_camel_case_alias() -> None:
    n = Notification(id="n1", message="Anniversary", eventDate="2026-02-11T00:00:00Z")
    assert n.event_date == datetime(2026, 2, 11, tzinfo=UTC)
    dumped = n.model_dump(mode="json", by_alias=True)
    assert dumped["eventDate"] == "2026-02-11T00:00:00.000Z"
    assert "event_date" not in dumped


def test_notification_accepts_attribute_name() -> None:
    n = Notification(id="n1", event_date=datetime(2026, 2, 11, tzinfo=UTC))
    assert n.event_date == datetime(2026, 2, 11, tzinfo=UTC)


def test_memory_date_defaults_to_now() -> None:
    before = datetime.now(UTC) - timedelta(seconds=1)
    m = Memory(id="x", content="Picnic")
    assert m.date >= before
    assert m.date.tzinfo is not None


def test_album_photos_default_empty() -> None:
    a = Album(id="a1", name="Trip")
    assert a.photos == []


def test_album_requires_name() -> None:
    with pytest.raises(ValidationError):
        Album(id="a1")


def test_unknown_fields_ignored() -> None:
    m = Milestone(id="m1", title="x", colour="red")
    assert "colour" not in m.model_dump()


def test_json_round_trip_is_equal() -> None:
    m = Memory(id="x", content="Picnic", date=datetime(2025, 3, 1, 12, 0, 0, 987654, tzinfo=UTC))
    raw = m.model_dump_json(by_alias=True)
    assert Memory.model_validate_json(raw) == m


# -- Instant range ---------------------------------------------------------------


def test_format_instant_pads_early_years() -> None:
    assert format_instant(datetime(999, 1, 1, tzinfo=UTC)) == "0999-01-01T00:00:00.000Z"
    assert format_instant(datetime(5, 3, 4, 1, 2, 3, tzinfo=UTC)) == "0005-03-04T01:02:03.000Z"


def test_to_utc_out_of_range_is_value_error() -> None:
    plus_one = timezone(timedelta(hours=1))
    with pytest.raises(ValueError, match="out of range"):
        to_utc(datetime(1, 1, 1, tzinfo=plus_one))


def test_memory_out_of_range_date_rejected() -> None:
    with pytest.raises(ValidationError):
        Memory(id="m1", date="0001-01-01T00:00:00+01:00")
