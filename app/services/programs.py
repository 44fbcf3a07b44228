"""Turning a saved program's plan into dated calendar entries."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from app.schemas.program import PlanData


def build_schedule(
    program_name: str,
    plan: PlanData,
    start_date: date,
    default_weeks: int,
) -> list[dict[str, Any]]:
    """Expand ``plan`` into one entry per plan workout per week.

    Day 1 of each week falls on ``start_date + 7 * week``; a workout on day
    ``d`` lands ``d - 1`` days later.
    """
    weeks = plan.weeks or default_weeks
    entries: list[dict[str, Any]] = []
    for week in range(weeks):
        for workout in plan.workouts:
            entries.append(
                {
                    "title": f"{workout.name} (Week {week + 1})",
                    "workout_date": start_date + timedelta(days=week * 7 + (workout.day - 1)),
                    "notes": f"From program: {program_name}\nFocus: {workout.focus or ''}",
                    "scheduled_exercises": list(workout.exercises),
                }
            )
    return entries
