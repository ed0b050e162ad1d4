# renoplan/frames.py
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from .models import ConflictInfo, DaySchedule

PART_COLUMNS = [
    "date", "weekday", "milestone_id", "milestone", "task_id", "task",
    "assignee", "hours", "part_index", "total_parts",
]
CONFLICT_COLUMNS = ["is_conflicted", "is_timed_conflict", "appointment_time"]
DAY_COLUMNS = [
    "date", "total_capacity", "remaining_capacity", "hours", "utilization", "boosted",
]


@dataclass
class WeekGroup:
    week_id: str  # e.g. "2026-W10"
    week_number: int
    days: List[DaySchedule] = field(default_factory=list)
    total_hours: float = 0.0


def schedule_to_frame(schedule: List[DaySchedule],
                      conflicts: Optional[Dict[str, ConflictInfo]] = None) -> pd.DataFrame:
    """One row per task part, in schedule order."""
    rows = []
    for day in schedule:
        for p in day.parts:
            row = {
                "date": day.date,
                "weekday": day.date.day_name(),
                "milestone_id": p.milestone_id,
                "milestone": p.milestone_name,
                "task_id": p.task_id,
                "task": p.task_name,
                "assignee": p.assignee,
                "hours": p.hours_spent,
                "part_index": p.part_index,
                "total_parts": p.total_parts,
            }
            if conflicts is not None:
                info = conflicts.get(p.task_id, ConflictInfo())
                row["is_conflicted"] = info.is_conflicted
                row["is_timed_conflict"] = info.is_timed_conflict
                row["appointment_time"] = info.conflicting_appointment_time
            rows.append(row)

    columns = PART_COLUMNS + (CONFLICT_COLUMNS if conflicts is not None else [])
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


def days_to_frame(schedule: List[DaySchedule],
                  base_capacity: Optional[Callable[[pd.Timestamp], float]] = None) -> pd.DataFrame:
    """One row per scheduled day with capacity usage.

    ``base_capacity`` is a callable giving the configured hours for a date;
    when supplied, days whose total capacity exceeds it are marked boosted.
    """
    if not schedule:
        return pd.DataFrame(columns=DAY_COLUMNS)

    df = pd.DataFrame({
        "date": [d.date for d in schedule],
        "total_capacity": [d.total_capacity for d in schedule],
        "remaining_capacity": [d.remaining_capacity for d in schedule],
        "hours": [d.hours_used for d in schedule],
    })
    total = df["total_capacity"].to_numpy(dtype=float)
    used = df["hours"].to_numpy(dtype=float)
    df["utilization"] = np.divide(used, total, out=np.zeros_like(used), where=total > 0)
    if base_capacity is not None:
        configured = np.array([base_capacity(d.date) for d in schedule], dtype=float)
        df["boosted"] = total > configured
    else:
        df["boosted"] = False
    return df


def group_by_week(schedule: List[DaySchedule]) -> List[WeekGroup]:
    """Group days by ISO week, keeping schedule order."""
    groups: Dict[str, WeekGroup] = {}
    for day in schedule:
        iso = day.date.isocalendar()
        week_id = f"{iso[0]}-W{iso[1]:02d}"
        group = groups.get(week_id)
        if group is None:
            group = groups[week_id] = WeekGroup(week_id=week_id, week_number=iso[1])
        group.days.append(day)
        group.total_hours += day.hours_used
    return list(groups.values())


def plan_summary(schedule: List[DaySchedule]) -> dict:
    if not schedule:
        return {"scheduled_days": 0, "first_date": None, "last_date": None, "total_hours": 0.0}
    return {
        "scheduled_days": len(schedule),
        "first_date": schedule[0].date,
        "last_date": schedule[-1].date,
        "total_hours": float(sum(d.hours_used for d in schedule)),
    }
