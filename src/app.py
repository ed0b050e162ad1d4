import json

import pandas as pd
import plotly.express as px
import streamlit as st
from streamlit_calendar import calendar

from renoplan.frames import days_to_frame, group_by_week, plan_summary, schedule_to_frame
from renoplan.models import DEFAULT_CAPACITIES
from renoplan.project_io import ProjectFileError, clamp_capacity, project_from_dict, sample_project
from renoplan.scheduler import generate_plan

from prometheus_client import start_http_server, Summary


# ✅ Create metric only once
if "PLAN_TIME" not in st.session_state:
    st.session_state.PLAN_TIME = Summary(
        "plan_generation_seconds",
        "Time spent building the renovation schedule and conflict map",
    )
PLAN_TIME = st.session_state.PLAN_TIME

# ✅ Start metrics server only once
if "metrics_started" not in st.session_state:
    start_http_server(8000)
    st.session_state.metrics_started = True

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


# Session State Setup
if "milestones" not in st.session_state:
    st.session_state.milestones, st.session_state.config = sample_project()


# Sidebar: Inputs
st.sidebar.title("Renovation Planner")

st.sidebar.subheader("Project file")
uploaded = st.sidebar.file_uploader("Load project JSON", type=["json"])
if uploaded is not None:
    try:
        st.session_state.milestones, st.session_state.config = project_from_dict(
            json.loads(uploaded.getvalue().decode("utf-8"))
        )
    except (ProjectFileError, json.JSONDecodeError) as e:
        st.sidebar.error(f"Could not load project: {e}")

config = st.session_state.config

st.sidebar.subheader("Start")
start = st.sidebar.date_input("Project start", value=config.start_date.date())
config.start_date = pd.Timestamp(start)

st.sidebar.subheader("Hours per weekday")
for wd in [1, 2, 3, 4, 5, 6, 0]:
    hours = st.sidebar.number_input(
        WEEKDAY_NAMES[wd], 0.0, 24.0, step=0.5,
        value=float(config.day_capacities.get(wd, DEFAULT_CAPACITIES[wd])),
        key=f"cap_{wd}",
    )
    config.day_capacities[wd] = clamp_capacity(hours)


# Main: Plan
st.title("Renovation Timeline")

try:
    with PLAN_TIME.time():
        schedule, conflicts = generate_plan(st.session_state.milestones, config)
except ValueError as e:
    st.error(str(e))
    st.stop()

summary = plan_summary(schedule)
if summary["last_date"] is not None:
    st.markdown(
        f"**{summary['scheduled_days']} working days**, "
        f"{summary['total_hours']:g} hours, done by **{summary['last_date'].date()}**"
    )

flagged = {k: v for k, v in conflicts.items() if v.is_conflicted or v.is_timed_conflict}
for task_id, info in flagged.items():
    if info.is_conflicted:
        st.warning(f"{task_id}: runs into a fixed appointment")
    else:
        st.info(f"{task_id}: too much work before the {info.conflicting_appointment_time} appointment")


# Real Calendar UI with FullCalendar
if schedule:
    def conflict_color(info):
        if info is None:
            return "#1f77b4"  # blue
        if info.is_conflicted:
            return "#ff9f0e"  # amber
        if info.is_timed_conflict:
            return "#e6c200"  # yellow
        return "#1f77b4"

    pinned_ids = {t.id for m in st.session_state.milestones for t in m.tasks if t.is_pinned}

    events = []
    for day in schedule:
        for p in day.parts:
            title = p.task_name if p.total_parts == 1 else f"{p.task_name} ({p.part_index}/{p.total_parts})"
            events.append({
                "title": f"{title} · {p.hours_spent:g}h",
                "start": day.date.strftime("%Y-%m-%d"),
                "allDay": True,
                "id": f"{p.task_id}-{p.part_index}",
                "color": "#7f7f7f" if p.task_id in pinned_ids else conflict_color(conflicts.get(p.task_id)),
            })

    cal_options = {
        "initialView": "dayGridMonth",
        "initialDate": schedule[0].date.strftime("%Y-%m-%d"),
        "weekNumbers": True,
        "firstDay": 1,  # Monday
    }
    calendar(events=events, options=cal_options, key="calendar")

    st.markdown("### Weeks")
    for week in group_by_week(schedule):
        with st.expander(f"{week.week_id} · {week.total_hours:g}h"):
            week_df = schedule_to_frame(week.days, conflicts)
            st.dataframe(week_df)

    st.markdown("### Capacity per Day")
    days = days_to_frame(schedule, config.capacity_for)
    fig = px.bar(days, x="date", y=["hours", "remaining_capacity"],
                 labels={"date": "Date", "value": "Hours"})
    st.plotly_chart(fig, use_container_width=True)
else:
    st.info("Add tasks with hour estimates to see the timeline.")
