"""Tests for days-together arithmetic."""

from datetime import UTC, datetime, timedelta, timezone

from keepsake.dates import DayCounter, days_since

R = datetime(2025, 2, 11, tzinfo=UTC)


# -- days_since ------------------------------------------------------------------


def test_same_instant_is_zero() -> None:
    assert days_since(R, R) == 0


def test_twenty_five_hours_is_one_day() -> None:
    assert days_since(R, R + timedelta(hours=25)) == 1


def test_just_under_a_day_is_zero() -> None:
    assert days_since(R, R + timedelta(hours=23, minutes=59, seconds=59)) == 0


def test_exactly_one_day() -> None:
    assert days_since(R, R + timedelta(days=1)) == 1


def test_before_reference_is_negative() -> None:
    assert days_since(R, R - timedelta(hours=1)) == -1
    assert days_since(R, R - timedelta(days=3)) == -3


def test_naive_values_taken_as_utc() -> None:
    assert days_since(datetime(2025, 2, 11), datetime(2025, 2, 13, 6, 0)) == 2


def test_offsets_compared_in_utc() -> None:
    # 01:00 on Feb 12 at +02:00 is 23:00 Feb 11 UTC.
    plus_two = timezone(timedelta(hours=2))
    assert days_since(R, datetime(2025, 2, 12, 1, 0, tzinfo=plus_two)) == 0


def test_monotonic_as_now_advances() -> None:
    counts = [days_since(R, R + timedelta(hours=h)) for h in range(0, 24 * 10, 7)]
    assert counts == sorted(counts)


def test_stable_within_a_day() -> None:
    now = R + timedelta(days=5, hours=3)
    assert days_since(R, now) == days_since(R, now) == 5


# -- DayCounter ------------------------------------------------------------------


def test_counter_uses_clock(counter: DayCounter) -> None:
    assert counter.days_together() == 100


def test_counter_explicit_now() -> None:
    counter = DayCounter(R)
    assert counter.days_together(R + timedelta(days=7)) == 7


def test_counter_reference_normalized() -> None:
    counter = DayCounter(datetime(2025, 2, 11))
    assert counter.reference == R
    assert counter.reference.tzinfo is not None


def test_counter_default_clock_is_now() -> None:
    counter = DayCounter(R)
    assert abs(counter.now() - datetime.now(UTC)) < timedelta(seconds=5)
