# renoplan/scheduler.py
import logging
from typing import Dict, List, Tuple

from .allocator import calculate_schedule
from .conflicts import detect_conflicts
from .models import ConflictInfo, DaySchedule, Milestone, ProjectConfig

logger = logging.getLogger(__name__)


def generate_plan(milestones: List[Milestone],
                  config: ProjectConfig) -> Tuple[List[DaySchedule], Dict[str, ConflictInfo]]:
    """
    Build the day-by-day schedule and the per-task conflict map.

    Both steps are recomputed from scratch; callers that re-plan on every
    edit may memoize on their own inputs.
    """
    # Sanity: the capacity table uses 0 = Sunday .. 6 = Saturday
    bad_keys = [k for k in config.day_capacities if k not in range(7)]
    if bad_keys:
        raise ValueError(f"day_capacities has unknown weekday keys: {bad_keys}")

    # 1) Allocate hours to days
    schedule = calculate_schedule(milestones, config)

    # 2) Compare flexible work against pinned appointments
    conflicts = detect_conflicts(schedule, milestones, config)

    flagged = sum(1 for c in conflicts.values()
                  if c.is_conflicted or c.is_timed_conflict)
    if schedule:
        logger.info("Planned %d tasks over %d days (%s to %s), %d in conflict",
                    len(conflicts), len(schedule),
                    schedule[0].date.date(), schedule[-1].date.date(), flagged)
    else:
        logger.info("Nothing to schedule")
    return schedule, conflicts
