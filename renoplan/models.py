# renoplan/models.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd

from .cursor import weekday_number


# Labor roles a task can be assigned to
ASSIGNEES = ("Meg selv", "Snekker", "Rørlegger", "Elektriker", "Maler")

EQUIPMENT_CATEGORIES = ("material", "equipment", "rental")

# 0 = Sunday .. 6 = Saturday
DEFAULT_CAPACITIES: Dict[int, float] = {
    1: 8,  # Mon
    2: 8,  # Tue
    3: 8,  # Wed
    4: 8,  # Thu
    5: 8,  # Fri
    6: 4,  # Sat
    0: 0,  # Sun
}


@dataclass
class EquipmentItem:
    id: str
    name: str
    unit: str
    unit_price: float
    quantity: float
    category: Optional[str] = None  # material | equipment | rental


@dataclass
class Task:
    id: str
    name: str
    estimate_hours: float                     # 0 = errand marker
    assignee: str = "Meg selv"
    equipment: List[EquipmentItem] = field(default_factory=list)
    hard_start_date: Optional[datetime] = None  # pinned appointment
    start_time: Optional[str] = None            # "HH:MM", only with hard_start_date

    @property
    def is_pinned(self) -> bool:
        return self.hard_start_date is not None


@dataclass
class Milestone:
    id: str
    name: str
    tasks: List[Task] = field(default_factory=list)
    start_date: Optional[datetime] = None


@dataclass
class ProjectConfig:
    start_date: datetime
    day_capacities: Dict[int, float] = field(
        default_factory=lambda: dict(DEFAULT_CAPACITIES)
    )

    def capacity_for(self, day) -> float:
        """Configured hours for the weekday of ``day`` (0 when not listed)."""
        return self.day_capacities.get(weekday_number(day), 0)


@dataclass
class TaskPart:
    task_id: str
    task_name: str
    assignee: str
    hours_spent: float
    part_index: int
    total_parts: int
    milestone_id: str
    milestone_name: str
    equipment: List[EquipmentItem] = field(default_factory=list)


@dataclass
class DaySchedule:
    date: pd.Timestamp  # normalized to midnight
    parts: List[TaskPart] = field(default_factory=list)
    remaining_capacity: float = 0.0
    total_capacity: float = 0.0

    @property
    def hours_used(self) -> float:
        return sum(p.hours_spent for p in self.parts)


@dataclass
class ConflictInfo:
    is_conflicted: bool = False       # amber
    is_timed_conflict: bool = False   # yellow
    conflicting_appointment_time: Optional[str] = None
