# renoplan/allocator.py
import logging
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .cursor import ScheduleCursor, day_key, normalize_day
from .models import DaySchedule, Milestone, ProjectConfig, Task, TaskPart

logger = logging.getLogger(__name__)

# (day key, index into that day's parts)
PartHandle = Tuple[str, int]


class DayBook:
    """Days created so far, indexed by normalized date string.

    The book owns every TaskPart; callers keep handles to the parts they
    placed and fix up ``total_parts`` through them once a task is done.
    """

    def __init__(self, config: ProjectConfig):
        self.config = config
        self.days: Dict[str, DaySchedule] = {}

    def get(self, date) -> Optional[DaySchedule]:
        return self.days.get(day_key(date))

    def get_or_create(self, date, capacity: Optional[float] = None) -> DaySchedule:
        key = day_key(date)
        day = self.days.get(key)
        if day is None:
            cap = self.config.capacity_for(date) if capacity is None else capacity
            day = DaySchedule(
                date=normalize_day(date),
                parts=[],
                remaining_capacity=cap,
                total_capacity=cap,
            )
            self.days[key] = day
        return day

    def place(self, day: DaySchedule, part: TaskPart) -> PartHandle:
        day.parts.append(part)
        return day_key(day.date), len(day.parts) - 1

    def finalize(self, handles: List[PartHandle]) -> None:
        total = len(handles)
        for key, idx in handles:
            self.days[key].parts[idx].total_parts = total

    def sorted_days(self) -> List[DaySchedule]:
        return sorted(self.days.values(), key=lambda d: d.date)


def _make_part(task: Task, milestone: Milestone, hours: float,
               part_index: int, total_parts: int = 0) -> TaskPart:
    return TaskPart(
        task_id=task.id,
        task_name=task.name,
        assignee=task.assignee,
        hours_spent=hours,
        part_index=part_index,
        total_parts=total_parts,  # 0 until the task is fully placed
        milestone_id=milestone.id,
        milestone_name=milestone.name,
        equipment=list(task.equipment),
    )


def schedule_errand(book: DayBook, task: Task, milestone: Milestone,
                    cursor: ScheduleCursor) -> None:
    """Zero-hour task: a marker part, no capacity used, cursor untouched."""
    target = task.hard_start_date if task.is_pinned else cursor.current
    day = book.get_or_create(target)
    book.place(day, _make_part(task, milestone, 0, 1, total_parts=1))


def schedule_pinned(book: DayBook, task: Task, milestone: Milestone,
                    cursor: ScheduleCursor) -> Tuple[ScheduleCursor, Optional[pd.Timestamp]]:
    """Place a pinned appointment on its hard date, boosting capacity if needed.

    The appointment is honored even when upstream work has already run past
    its date. Only the days after the first one go through the working-day
    check, so an appointment may land on a non-working weekday.
    """
    capacities = book.config.day_capacities
    cursor = cursor.jump_to(task.hard_start_date)
    remaining = task.estimate_hours
    part_index = 1
    handles: List[PartHandle] = []
    last_date = None

    while remaining > 0:
        day = book.get(cursor.current)
        if day is None:
            cap = max(book.config.capacity_for(cursor.current), remaining)
            day = book.get_or_create(cursor.current, capacity=cap)
        elif day.remaining_capacity < remaining:
            extra = remaining - day.remaining_capacity
            day.remaining_capacity += extra
            day.total_capacity += extra
            logger.debug("Boosted %s by %.2fh for pinned task %s",
                         cursor.key, extra, task.id)

        hours = min(remaining, day.remaining_capacity)
        handles.append(book.place(day, _make_part(task, milestone, hours, part_index)))
        last_date = day.date
        day.remaining_capacity -= hours
        remaining -= hours
        part_index += 1

        if remaining > 0:
            cursor = cursor.advance(1).next_working_day(capacities)

    book.finalize(handles)
    return cursor, last_date


def schedule_flexible(book: DayBook, task: Task, milestone: Milestone,
                      cursor: ScheduleCursor) -> Tuple[ScheduleCursor, Optional[pd.Timestamp]]:
    """Fill working days from the cursor onward until the task's hours are placed.

    Downstream pinned dates are not walls here; overlaps are reported by
    the conflict detector.
    """
    capacities = book.config.day_capacities
    remaining = task.estimate_hours
    part_index = 1
    handles: List[PartHandle] = []
    last_date = None

    while remaining > 0:
        cursor = cursor.next_working_day(capacities)
        day = book.get_or_create(cursor.current)

        if day.remaining_capacity <= 0:
            cursor = cursor.advance(1)
            continue

        hours = min(remaining, day.remaining_capacity)
        handles.append(book.place(day, _make_part(task, milestone, hours, part_index)))
        last_date = day.date
        day.remaining_capacity -= hours
        remaining -= hours
        part_index += 1

        if remaining > 0 and day.remaining_capacity <= 0:
            cursor = cursor.advance(1)

    book.finalize(handles)
    return cursor, last_date


def milestone_start(milestone: Milestone, config: ProjectConfig,
                    previous_end: Optional[pd.Timestamp]) -> ScheduleCursor:
    """Earliest working day the milestone may begin on.

    A milestone's own start_date can delay it but never pull it in front of
    the day after the previous milestone's last scheduled work.
    """
    if previous_end is not None:
        min_start = ScheduleCursor.at(previous_end).advance(1)
    else:
        min_start = ScheduleCursor.at(config.start_date)

    if milestone.start_date is not None:
        requested = ScheduleCursor.at(milestone.start_date)
    else:
        requested = min_start

    start = requested if requested.current > min_start.current else min_start
    return start.next_working_day(config.day_capacities)


def calculate_schedule(milestones: List[Milestone],
                       config: ProjectConfig) -> List[DaySchedule]:
    """
    Allocate task hours to calendar days.

    Milestones and their tasks are processed strictly in list order with a
    shared cursor. Returns only days with at least one part, sorted by date.
    Inputs are left untouched.
    """
    # Sanity: estimates are clamped by callers
    for m in milestones:
        for t in m.tasks:
            if t.estimate_hours < 0:
                raise ValueError(f"task {t.id!r} has negative estimate_hours")

    book = DayBook(config)
    previous_end: Optional[pd.Timestamp] = None

    for milestone in milestones:
        # 1) Gate the milestone behind the previous one
        cursor = milestone_start(milestone, config, previous_end)
        logger.debug("Milestone %s starts %s", milestone.id, cursor.key)
        milestone_last: Optional[pd.Timestamp] = None

        # 2) Place tasks in order, carrying the cursor between them
        for task in milestone.tasks:
            if task.estimate_hours == 0:
                schedule_errand(book, task, milestone, cursor)
                continue

            if task.is_pinned:
                cursor, last = schedule_pinned(book, task, milestone, cursor)
            else:
                cursor, last = schedule_flexible(book, task, milestone, cursor)

            if last is not None:
                milestone_last = last

        # 3) Errand-only milestones leave the gate where it was
        if milestone_last is not None:
            previous_end = milestone_last

    return book.sorted_days()
