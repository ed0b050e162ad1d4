# main.py
import argparse
import logging

import matplotlib.pyplot as plt

from renoplan.frames import days_to_frame, group_by_week, plan_summary, schedule_to_frame
from renoplan.project_io import load_project, sample_project
from renoplan.scheduler import generate_plan


def main():
    parser = argparse.ArgumentParser(description="Plan a renovation project day by day.")
    parser.add_argument("--project", help="project JSON file (default: built-in sample)")
    parser.add_argument("--start", help="start date for the sample project, YYYY-MM-DD")
    parser.add_argument("--no-plot", action="store_true", help="skip the capacity chart")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.project:
        milestones, config = load_project(args.project)
    else:
        milestones, config = sample_project(args.start)

    schedule, conflicts = generate_plan(milestones, config)

    print("=== Schedule ===")
    print(schedule_to_frame(schedule, conflicts).to_string(index=False))

    print("\n=== Weeks ===")
    for week in group_by_week(schedule):
        print(f"{week.week_id}: {len(week.days)} days, {week.total_hours:g}h")

    summary = plan_summary(schedule)
    if summary["last_date"] is not None:
        print(f"\nDone by {summary['last_date'].date()} "
              f"({summary['scheduled_days']} days, {summary['total_hours']:g}h)")

    flagged = {k: v for k, v in conflicts.items() if v.is_conflicted or v.is_timed_conflict}
    for task_id, info in flagged.items():
        kind = "timed" if info.is_timed_conflict else "amber"
        at = f" (appointment {info.conflicting_appointment_time})" if info.conflicting_appointment_time else ""
        print(f"Conflict [{kind}] {task_id}{at}")

    if args.no_plot or not schedule:
        return

    # Plot used vs. available hours per day
    days = days_to_frame(schedule, config.capacity_for)
    plt.figure(figsize=(10, 3))
    plt.bar(days["date"], days["total_capacity"], color="#dddddd", label="Capacity")
    plt.bar(days["date"], days["hours"], color="#1f77b4", label="Scheduled")
    plt.title("Scheduled Hours per Day")
    plt.xlabel("Date")
    plt.ylabel("Hours")
    plt.legend()
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
