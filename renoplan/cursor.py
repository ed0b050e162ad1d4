# renoplan/cursor.py
from dataclasses import dataclass
from typing import Mapping

import pandas as pd


def normalize_day(value) -> pd.Timestamp:
    """Midnight of the calendar day ``value`` falls on (date, datetime, str or Timestamp).

    tz-aware values keep their local wall-clock date and lose the zone.
    """
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def day_key(value) -> str:
    return normalize_day(value).strftime("%Y-%m-%d")


def weekday_number(value) -> int:
    """0 = Sunday .. 6 = Saturday (pandas counts from Monday)."""
    return (pd.Timestamp(value).weekday() + 1) % 7


def has_working_day(capacities: Mapping[int, float]) -> bool:
    return any(capacities.get(wd, 0) > 0 for wd in range(7))


@dataclass(frozen=True)
class ScheduleCursor:
    """Position of the scheduler on the calendar.

    Every step returns a new cursor, so the day-advancement rules can be
    exercised on their own.
    """
    current: pd.Timestamp

    @classmethod
    def at(cls, value) -> "ScheduleCursor":
        return cls(normalize_day(value))

    def advance(self, days: int = 1) -> "ScheduleCursor":
        return ScheduleCursor(self.current + pd.Timedelta(days=days))

    def jump_to(self, value) -> "ScheduleCursor":
        return ScheduleCursor.at(value)

    def next_working_day(self, capacities: Mapping[int, float]) -> "ScheduleCursor":
        """First day on or after the cursor whose weekday has capacity."""
        if not has_working_day(capacities):
            raise ValueError("day_capacities has no working weekday")
        cur = self
        while capacities.get(weekday_number(cur.current), 0) <= 0:
            cur = cur.advance(1)
        return cur

    @property
    def key(self) -> str:
        return day_key(self.current)
