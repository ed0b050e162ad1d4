import logging

import pytest

from renoplan.project_io import sample_project
from renoplan.scheduler import generate_plan
from tests.helpers import make_config, milestone, task


def test_generate_plan_runs_both_steps():
    milestones = [milestone("m1", [task("t1", 7), task("t2", 2, pinned="2026-03-03")])]
    schedule, conflicts = generate_plan(milestones, make_config())

    assert len(schedule) == 1
    assert schedule[0].total_capacity == 9
    assert conflicts["t1"].is_conflicted  # 7 > 8 - 2
    assert not conflicts["t2"].is_conflicted


def test_generate_plan_timed_scenario():
    milestones = [milestone("m1", [
        task("t1", 6), task("t2", 2, pinned="2026-03-03", start_time="13:00"),
    ])]
    _, conflicts = generate_plan(milestones, make_config())

    assert conflicts["t1"].is_timed_conflict
    assert not conflicts["t1"].is_conflicted
    assert conflicts["t1"].conflicting_appointment_time == "13:00"


def test_generate_plan_rejects_unknown_weekday():
    config = make_config()
    config.day_capacities[7] = 8
    with pytest.raises(ValueError, match="weekday"):
        generate_plan([], config)


def test_generate_plan_logs_summary(caplog):
    milestones, config = sample_project("2026-03-02")
    with caplog.at_level(logging.INFO, logger="renoplan.scheduler"):
        schedule, conflicts = generate_plan(milestones, config)

    assert "Planned 6 tasks over 6 days" in caplog.text
    assert not any(c.is_conflicted or c.is_timed_conflict for c in conflicts.values())


def test_generate_plan_empty(caplog):
    with caplog.at_level(logging.INFO, logger="renoplan.scheduler"):
        assert generate_plan([], make_config()) == ([], {})
    assert "Nothing to schedule" in caplog.text
