from datetime import datetime, timedelta, timezone

import pytest

from studx.utils.formatting import display_zone, relative_time, time_of_day


BASE = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "elapsed, expected",
    [
        (timedelta(seconds=0), "Just now"),
        (timedelta(seconds=59), "Just now"),
        (timedelta(minutes=1), "1m ago"),
        (timedelta(minutes=59, seconds=59), "59m ago"),
        (timedelta(hours=1), "1h ago"),
        (timedelta(hours=23, minutes=59), "23h ago"),
        (timedelta(days=1), "1d ago"),
        (timedelta(days=6, hours=23), "6d ago"),
        (timedelta(days=7), "3/1/2024"),
        (timedelta(days=400), "3/1/2024"),
    ],
)
def test_relative_time_buckets(elapsed, expected):
    assert relative_time(BASE, BASE + elapsed) == expected


def test_relative_time_treats_naive_datetimes_as_utc():
    naive = BASE.replace(tzinfo=None)
    assert relative_time(naive, BASE + timedelta(minutes=5)) == "5m ago"


def test_relative_time_defaults_to_now():
    assert relative_time(datetime.now(timezone.utc)) == "Just now"


@pytest.mark.parametrize(
    "hour, minute, expected",
    [
        (0, 5, "12:05 AM"),
        (9, 30, "9:30 AM"),
        (12, 0, "12:00 PM"),
        (15, 7, "3:07 PM"),
        (23, 59, "11:59 PM"),
    ],
)
def test_time_of_day(hour, minute, expected):
    assert time_of_day(BASE.replace(hour=hour, minute=minute)) == expected


def test_time_of_day_in_display_zone():
    ist = timezone(timedelta(hours=5, minutes=30))
    assert time_of_day(BASE.replace(hour=3, minute=30), ist) == "9:00 AM"


def test_display_zone_utc():
    assert display_zone("UTC") is timezone.utc
    assert display_zone("") is timezone.utc


def test_old_dates_render_in_display_zone():
    ist = timezone(timedelta(hours=5, minutes=30))
    evening = datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc)
    now = evening + timedelta(days=10)

    assert relative_time(evening, now) == "3/1/2024"
    assert relative_time(evening, now, ist) == "3/2/2024"
