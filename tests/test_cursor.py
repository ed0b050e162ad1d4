import pytest

from renoplan.cursor import ScheduleCursor, day_key, normalize_day, weekday_number
from tests.helpers import WEEKDAYS_ONLY, ts


def test_normalize_day_drops_time_of_day():
    assert normalize_day("2026-03-03 14:25") == ts("2026-03-03")


def test_day_key_is_iso_date():
    assert day_key("2026-03-03 23:59") == "2026-03-03"


def test_weekday_number_counts_from_sunday():
    assert weekday_number("2026-03-08") == 0  # Sunday
    assert weekday_number("2026-03-09") == 1  # Monday
    assert weekday_number("2026-03-07") == 6  # Saturday


def test_advance_returns_new_cursor():
    cur = ScheduleCursor.at("2026-03-03")
    nxt = cur.advance(2)
    assert cur.current == ts("2026-03-03")
    assert nxt.current == ts("2026-03-05")


def test_next_working_day_skips_weekend():
    cur = ScheduleCursor.at("2026-03-07").next_working_day(WEEKDAYS_ONLY)
    assert cur.current == ts("2026-03-09")


def test_next_working_day_stays_on_working_day():
    cur = ScheduleCursor.at("2026-03-04").next_working_day(WEEKDAYS_ONLY)
    assert cur.current == ts("2026-03-04")


def test_missing_weekday_counts_as_non_working():
    caps = {1: 8, 2: 8, 3: 8, 4: 8, 5: 8}
    assert ScheduleCursor.at("2026-03-07").next_working_day(caps).current == ts("2026-03-09")


def test_next_working_day_without_any_capacity_raises():
    with pytest.raises(ValueError):
        ScheduleCursor.at("2026-03-03").next_working_day({d: 0 for d in range(7)})


def test_normalize_day_keeps_local_date_of_aware_timestamp():
    aware = ts("2026-03-05 00:30").tz_localize("Europe/Oslo")
    day = normalize_day(aware)
    assert day == ts("2026-03-05")
    assert day.tzinfo is None
    assert day_key(aware) == "2026-03-05"
