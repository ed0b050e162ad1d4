# renoplan/conflicts.py
from typing import Dict, List, Optional, Set

import pandas as pd

from .cursor import normalize_day
from .models import ConflictInfo, DaySchedule, Milestone, ProjectConfig, Task

# Work day assumed to start at 08:00 for timed appointments
WORK_START_HOUR = 8


def parse_time_hours(value: str) -> float:
    """'13:30' -> 13.5"""
    hours, _, minutes = value.partition(":")
    return int(hours) + (int(minutes) if minutes else 0) / 60.0


def _last_scheduled_dates(schedule: List[DaySchedule]) -> Dict[str, pd.Timestamp]:
    last: Dict[str, pd.Timestamp] = {}
    for day in schedule:
        for p in day.parts:
            if p.task_id not in last or day.date > last[p.task_id]:
                last[p.task_id] = day.date
    return last


def _pinned_start_times(milestones: List[Milestone]) -> Dict[str, Optional[str]]:
    return {
        t.id: t.start_time
        for m in milestones
        for t in m.tasks
        if t.is_pinned
    }


def _overruns_later_appointment(task: Task, milestone: Milestone,
                                last_dates: Dict[str, pd.Timestamp]) -> bool:
    """True when the task ends after a pinned task listed later in its milestone."""
    last = last_dates.get(task.id)
    if task.is_pinned or last is None:
        return False
    found = False
    for t in milestone.tasks:
        if t.id == task.id:
            found = True
            continue
        if found and t.is_pinned and last > normalize_day(t.hard_start_date):
            return True
    return False


def detect_conflicts(schedule: List[DaySchedule],
                     milestones: List[Milestone],
                     config: ProjectConfig) -> Dict[str, ConflictInfo]:
    """
    Flag flexible tasks that collide with pinned appointments.

    Hours-based, per day holding both pinned and flexible work:
      - appointment with a start time: flexible hours beyond the time
        between 08:00 and the earliest appointment -> timed (yellow)
      - otherwise: flexible hours beyond weekday capacity minus pinned
        hours -> amber
    Date overflow: a flexible task whose last day is after a later pinned
    task's date in the same milestone -> amber.

    Pinned tasks are never flagged, and amber wins over timed.
    """
    # 1) Index prerequisites
    last_dates = _last_scheduled_dates(schedule)
    pinned = _pinned_start_times(milestones)

    amber_ids: Set[str] = set()
    timed_ids: Set[str] = set()
    conflict_times: Dict[str, str] = {}

    # 2) Same-day hours check
    for day in schedule:
        base_capacity = config.capacity_for(day.date)
        # nothing flexible can compete on a non-working day
        if base_capacity == 0:
            continue

        pinned_hours = 0.0
        flexible_hours = 0.0
        earliest: Optional[str] = None
        flexible_ids: List[str] = []

        for p in day.parts:
            if p.task_id in pinned:
                pinned_hours += p.hours_spent
                start_time = pinned[p.task_id]
                if start_time and (earliest is None or start_time < earliest):
                    earliest = start_time
            else:
                flexible_hours += p.hours_spent
                flexible_ids.append(p.task_id)

        if pinned_hours == 0 or not flexible_ids:
            continue

        if earliest:
            available = max(0.0, parse_time_hours(earliest) - WORK_START_HOUR)
        else:
            available = base_capacity - pinned_hours

        if flexible_hours > available:
            for task_id in flexible_ids:
                if earliest:
                    timed_ids.add(task_id)
                    conflict_times.setdefault(task_id, earliest)
                else:
                    amber_ids.add(task_id)

    # 3) + 4) Date overflow and assembly
    result: Dict[str, ConflictInfo] = {}
    for m in milestones:
        for task in m.tasks:
            if task.is_pinned:
                result[task.id] = ConflictInfo(False, False)
                continue
            is_conflicted = (task.id in amber_ids
                             or _overruns_later_appointment(task, m, last_dates))
            result[task.id] = ConflictInfo(
                is_conflicted=is_conflicted,
                is_timed_conflict=not is_conflicted and task.id in timed_ids,
                conflicting_appointment_time=conflict_times.get(task.id),
            )
    return result
