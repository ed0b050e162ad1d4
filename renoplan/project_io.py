# renoplan/project_io.py
"""Reading project definitions (milestones + config) from JSON.

Layout::

    {
      "start_date": "2026-03-03",
      "day_capacities": {"1": 8, "2": 8, ...},   # 0 = Sunday
      "milestones": [
        {"id": "m1", "name": "...", "start_date": null,
         "tasks": [{"id": "t1", "name": "...", "estimate_hours": 10,
                    "assignee": "Meg selv", "hard_start_date": null,
                    "start_time": null, "equipment": [...]}]}
      ]
    }

Estimates are clamped to >= 0 and capacities to 0..24 before they reach
the scheduler.
"""
import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd

from .cursor import normalize_day
from .models import (
    ASSIGNEES,
    DEFAULT_CAPACITIES,
    EQUIPMENT_CATEGORIES,
    EquipmentItem,
    Milestone,
    ProjectConfig,
    Task,
)

logger = logging.getLogger(__name__)

MAX_DAY_HOURS = 24
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ProjectFileError(ValueError):
    """Project definition that cannot be turned into milestones/config."""


def clamp_estimate(hours: float) -> float:
    return max(0.0, float(hours))


def clamp_capacity(hours: float) -> float:
    return max(0.0, min(float(MAX_DAY_HOURS), float(hours)))


def _date(value: Any, where: str):
    if value in (None, ""):
        return None
    try:
        return normalize_day(value)
    except (TypeError, ValueError) as e:
        raise ProjectFileError(f"{where}: invalid date {value!r}") from e


def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise ProjectFileError(f"{where}: missing {key!r}")
    return data[key]


def _equipment_from_dict(data: Dict[str, Any], where: str) -> EquipmentItem:
    category = data.get("category")
    if category is not None and category not in EQUIPMENT_CATEGORIES:
        raise ProjectFileError(f"{where}: unknown equipment category {category!r}")
    return EquipmentItem(
        id=str(_require(data, "id", where)),
        name=str(_require(data, "name", where)),
        unit=str(data.get("unit", "stk")),
        unit_price=float(data.get("unit_price", 0)),
        quantity=float(data.get("quantity", 0)),
        category=category,
    )


def _task_from_dict(data: Dict[str, Any], where: str) -> Task:
    task_id = str(_require(data, "id", where))
    where = f"{where} task {task_id}"

    assignee = data.get("assignee", "Meg selv")
    if assignee not in ASSIGNEES:
        raise ProjectFileError(f"{where}: unknown assignee {assignee!r}")

    try:
        raw_estimate = float(data.get("estimate_hours") or 0)
    except (TypeError, ValueError) as e:
        raise ProjectFileError(f"{where}: estimate_hours must be a number") from e
    if not math.isfinite(raw_estimate):
        raise ProjectFileError(f"{where}: estimate_hours must be finite")
    estimate = clamp_estimate(raw_estimate)

    hard_start = _date(data.get("hard_start_date"), where)
    start_time = data.get("start_time") or None
    if start_time is not None:
        if not _TIME_RE.match(start_time):
            raise ProjectFileError(f"{where}: start_time must be HH:MM, got {start_time!r}")
        if hard_start is None:
            logger.warning("%s: start_time ignored without hard_start_date", where)
            start_time = None

    return Task(
        id=task_id,
        name=str(data.get("name", task_id)),
        estimate_hours=estimate,
        assignee=assignee,
        equipment=[_equipment_from_dict(e, where) for e in data.get("equipment", [])],
        hard_start_date=hard_start,
        start_time=start_time,
    )


def _capacities_from_dict(raw: Dict[Any, Any]) -> Dict[int, float]:
    capacities = dict(DEFAULT_CAPACITIES)
    for key, hours in raw.items():
        try:
            weekday = int(key)
        except (TypeError, ValueError) as e:
            raise ProjectFileError(f"day_capacities: invalid weekday {key!r}") from e
        if weekday not in range(7):
            raise ProjectFileError(f"day_capacities: weekday {weekday} outside 0..6")
        try:
            value = float(hours)
        except (TypeError, ValueError) as e:
            raise ProjectFileError(f"day_capacities: invalid hours {hours!r}") from e
        if not math.isfinite(value):
            raise ProjectFileError(f"day_capacities: hours must be finite, got {hours!r}")
        capacities[weekday] = clamp_capacity(value)
    return capacities


def project_from_dict(data: Dict[str, Any]) -> Tuple[List[Milestone], ProjectConfig]:
    start = _date(data.get("start_date"), "project") or pd.Timestamp.now().normalize()
    config = ProjectConfig(
        start_date=start,
        day_capacities=_capacities_from_dict(data.get("day_capacities") or {}),
    )

    milestones: List[Milestone] = []
    seen_tasks = set()
    for raw in data.get("milestones", []):
        m_id = str(_require(raw, "id", "milestone"))
        where = f"milestone {m_id}"
        tasks = [_task_from_dict(t, where) for t in raw.get("tasks", [])]
        for t in tasks:
            if t.id in seen_tasks:
                raise ProjectFileError(f"{where}: duplicate task id {t.id!r}")
            seen_tasks.add(t.id)
        milestones.append(Milestone(
            id=m_id,
            name=str(raw.get("name", m_id)),
            tasks=tasks,
            start_date=_date(raw.get("start_date"), where),
        ))
    return milestones, config


def load_project(path) -> Tuple[List[Milestone], ProjectConfig]:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ProjectFileError(f"{path}: not valid JSON ({e})") from e
    if not isinstance(data, dict):
        raise ProjectFileError(f"{path}: top level must be an object")
    milestones, config = project_from_dict(data)
    logger.info("Loaded %d milestones from %s", len(milestones), path)
    return milestones, config


def sample_project(start_date=None) -> Tuple[List[Milestone], ProjectConfig]:
    """Three-milestone bathroom renovation."""
    def eq(id, name, unit, price, qty, category):
        return EquipmentItem(id, name, unit, price, qty, category)

    milestones = [
        Milestone("m1", "Forberedelse Bad", [
            Task("t1", "Rive flis", 10, "Meg selv", [
                eq("e1", "Avfallssekk", "stk", 29, 10, "material"),
                eq("e2", "Støvmaske", "stk", 19, 6, "equipment"),
            ]),
            Task("t2", "Pigge gulv", 6, "Meg selv", [
                eq("e3", "Meiselspiss", "stk", 149, 1, "equipment"),
                eq("e4", "Vernebriller", "stk", 89, 1, "equipment"),
            ]),
        ]),
        Milestone("m2", "Rørlegger og Membran", [
            Task("t3", "Legge rør", 8, "Rørlegger", [
                eq("e5", "PEX-rør", "m", 42, 18, "material"),
                eq("e6", "Rørdeler", "sett", 499, 1, "material"),
            ]),
            Task("t4", "Smøremembran", 4, "Meg selv", [
                eq("e7", "Membran", "l", 179, 6, "material"),
                eq("e8", "Primer", "l", 119, 2, "material"),
            ]),
        ]),
        Milestone("m3", "Elektriker og Lys", [
            Task("t5", "Legge varmekabler", 5, "Elektriker", [
                eq("e9", "Varmekabel", "m", 89, 35, "material"),
                eq("e10", "Termostat", "stk", 1299, 1, "material"),
            ]),
            Task("t6", "Montere spotter", 4, "Elektriker", [
                eq("e11", "Spotlight", "stk", 249, 6, "material"),
                eq("e12", "Kabel", "m", 18, 25, "material"),
                eq("e13", "Leie kabeltrekker", "dag", 550, 1, "rental"),
            ]),
        ]),
    ]
    start = normalize_day(start_date) if start_date is not None else pd.Timestamp.now().normalize()
    return milestones, ProjectConfig(start_date=start, day_capacities=dict(DEFAULT_CAPACITIES))
