import pandas as pd

from renoplan.models import DaySchedule, Milestone, ProjectConfig, Task, TaskPart

WEEKDAYS_ONLY = {0: 0, 1: 8, 2: 8, 3: 8, 4: 8, 5: 8, 6: 0}


def ts(value: str) -> pd.Timestamp:
    return pd.Timestamp(value)


def make_config(start="2026-03-03", capacities=None) -> ProjectConfig:
    # 2026-03-03 is a Tuesday
    return ProjectConfig(start_date=ts(start), day_capacities=dict(capacities or WEEKDAYS_ONLY))


def task(id, hours, pinned=None, start_time=None, assignee="Meg selv") -> Task:
    return Task(
        id=id,
        name=f"Task {id}",
        estimate_hours=hours,
        assignee=assignee,
        hard_start_date=ts(pinned) if pinned else None,
        start_time=start_time,
    )


def milestone(id, tasks, start_date=None) -> Milestone:
    return Milestone(id=id, name=f"Milestone {id}", tasks=list(tasks),
                     start_date=ts(start_date) if start_date else None)


def part(task_id, hours, milestone_id="m1") -> TaskPart:
    return TaskPart(
        task_id=task_id,
        task_name=task_id,
        assignee="Meg selv",
        hours_spent=hours,
        part_index=1,
        total_parts=1,
        milestone_id=milestone_id,
        milestone_name=milestone_id,
    )


def day(date, parts, total=8) -> DaySchedule:
    used = sum(p.hours_spent for p in parts)
    return DaySchedule(date=ts(date), parts=list(parts),
                       remaining_capacity=total - used, total_capacity=total)


def parts_of(schedule, task_id):
    """(date, part) pairs for a task, in schedule order."""
    return [(d.date, p) for d in schedule for p in d.parts if p.task_id == task_id]
