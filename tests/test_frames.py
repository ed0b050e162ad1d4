import pytest

from renoplan.allocator import calculate_schedule
from renoplan.conflicts import detect_conflicts
from renoplan.frames import (
    CONFLICT_COLUMNS,
    DAY_COLUMNS,
    PART_COLUMNS,
    days_to_frame,
    group_by_week,
    plan_summary,
    schedule_to_frame,
)
from tests.helpers import make_config, milestone, task, ts

CONFIG = make_config()


@pytest.fixture
def planned():
    milestones = [milestone("m1", [task("t1", 20), task("t2", 2, pinned="2026-03-04")])]
    schedule = calculate_schedule(milestones, CONFIG)
    return schedule, detect_conflicts(schedule, milestones, CONFIG)


def test_schedule_to_frame_one_row_per_part(planned):
    schedule, _ = planned
    df = schedule_to_frame(schedule)

    assert list(df.columns) == PART_COLUMNS
    assert len(df) == 4
    assert df["hours"].sum() == 22
    assert list(df.loc[df["task_id"] == "t1", "part_index"]) == [1, 2, 3]
    assert df.iloc[0]["weekday"] == "Tuesday"


def test_schedule_to_frame_with_conflicts(planned):
    schedule, conflicts = planned
    df = schedule_to_frame(schedule, conflicts)

    assert list(df.columns) == PART_COLUMNS + CONFLICT_COLUMNS
    assert df.loc[df["task_id"] == "t1", "is_conflicted"].all()
    assert not df.loc[df["task_id"] == "t2", "is_conflicted"].any()


def test_empty_schedule_frames_keep_columns():
    assert list(schedule_to_frame([]).columns) == PART_COLUMNS
    assert schedule_to_frame([], {}).empty
    assert list(days_to_frame([]).columns) == DAY_COLUMNS


def test_days_to_frame_marks_boosted_days(planned):
    schedule, _ = planned
    df = days_to_frame(schedule, CONFIG.capacity_for)

    assert list(df.columns) == DAY_COLUMNS
    boosted = df.set_index("date")["boosted"]
    assert boosted[ts("2026-03-04")]
    assert not boosted[ts("2026-03-03")]
    assert df["utilization"].iloc[0] == pytest.approx(1.0)
    assert df["utilization"].iloc[2] == pytest.approx(0.5)


def test_days_to_frame_zero_capacity_day():
    schedule = calculate_schedule(
        [milestone("m1", [task("t1", 0, pinned="2026-03-08")])], CONFIG
    )
    df = days_to_frame(schedule)
    assert df["utilization"].iloc[0] == 0
    assert not df["boosted"].iloc[0]


def test_group_by_week_uses_iso_weeks():
    schedule = calculate_schedule([milestone("m1", [task("t1", 40)])], CONFIG)
    weeks = group_by_week(schedule)

    # Tue Mar 3 .. Mon Mar 9
    assert [w.week_id for w in weeks] == ["2026-W10", "2026-W11"]
    assert [w.week_number for w in weeks] == [10, 11]
    assert [len(w.days) for w in weeks] == [4, 1]
    assert [w.total_hours for w in weeks] == [32, 8]


def test_plan_summary(planned):
    schedule, _ = planned
    summary = plan_summary(schedule)
    assert summary == {
        "scheduled_days": 3,
        "first_date": ts("2026-03-03"),
        "last_date": ts("2026-03-05"),
        "total_hours": 22.0,
    }


def test_plan_summary_empty():
    assert plan_summary([])["last_date"] is None
