"""Progress analytics computed in memory from fetched rows.

The queries return flat rows; grouping, summing and streak walking happen here
so they can be unit-tested without a database.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from app.core.constants import STREAK_MAX_GAP_DAYS


@dataclass(frozen=True)
class SetRow:
    """One set joined with its exercise name and workout."""

    workout_id: object
    workout_date: date
    exercise_name: str
    weight: float
    reps: int


def personal_records(
    rows: Iterable[SetRow],
    exercise_filter: str | None = None,
    limit: int = 10,
) -> list[dict]:
    """Heaviest set per exercise (case-insensitive name), heaviest first.

    Ties on weight keep the first row seen.
    """
    best: dict[str, SetRow] = {}
    needle = exercise_filter.lower() if exercise_filter else None
    for row in rows:
        key = row.exercise_name.lower()
        if needle and needle not in key:
            continue
        current = best.get(key)
        if current is None or row.weight > current.weight:
            best[key] = row

    ranked = sorted(best.values(), key=lambda r: r.weight, reverse=True)[:limit]
    return [
        {
            "exercise_name": r.exercise_name,
            "weight": float(r.weight),
            "reps": r.reps,
            "date": r.workout_date,
        }
        for r in ranked
    ]


def volume_by_day(rows: Iterable[SetRow], period_days: int) -> dict:
    """Daily volume (weight x reps), sets and reps plus a period summary.

    Days without any sets are omitted; ``workout_count`` counts workouts that
    contributed at least one set.
    """
    daily: dict[date, dict] = {}
    workouts_with_sets: set = set()
    for row in rows:
        day = daily.setdefault(
            row.workout_date,
            {"date": row.workout_date, "total_volume": 0.0, "total_sets": 0, "total_reps": 0},
        )
        weight = float(row.weight or 0)
        reps = int(row.reps or 0)
        day["total_volume"] += weight * reps
        day["total_sets"] += 1
        day["total_reps"] += reps
        workouts_with_sets.add(row.workout_id)

    days = [d for d in sorted(daily.values(), key=lambda d: d["date"]) if d["total_sets"] > 0]
    total_volume = sum(d["total_volume"] for d in days)
    workout_count = len(workouts_with_sets)
    return {
        "daily": days,
        "summary": {
            "total_volume": total_volume,
            "total_sets": sum(d["total_sets"] for d in days),
            "total_reps": sum(d["total_reps"] for d in days),
            "workout_count": workout_count,
            "avg_volume_per_workout": round(total_volume / workout_count) if workout_count else 0,
            "period_days": period_days,
        },
    }


def _run_length(dates_desc: Sequence[date], start: int) -> int:
    """Length of the run beginning at ``start`` where gaps stay within the allowed rest."""
    run = 1
    for i in range(start + 1, len(dates_desc)):
        if (dates_desc[i - 1] - dates_desc[i]).days <= STREAK_MAX_GAP_DAYS:
            run += 1
        else:
            break
    return run


def streak_stats(workout_dates: Iterable[date], today: date) -> dict:
    """Current and longest streaks over unique workout days.

    A streak tolerates a single rest day between sessions. The current streak
    is zero once the last workout is more than a day old.
    """
    dates_desc = sorted(set(workout_dates), reverse=True)
    week_ago = today - timedelta(days=7)
    month_ago = today - timedelta(days=30)
    stats = {
        "current_streak": 0,
        "longest_streak": 0,
        "last_workout_date": dates_desc[0] if dates_desc else None,
        "total_workouts": len(dates_desc),
        "workouts_last_7_days": sum(1 for d in dates_desc if d >= week_ago),
        "workouts_last_30_days": sum(1 for d in dates_desc if d >= month_ago),
    }
    if not dates_desc:
        return stats

    if (today - dates_desc[0]).days <= 1:
        stats["current_streak"] = _run_length(dates_desc, 0)

    longest = 1
    run = 1
    for i in range(1, len(dates_desc)):
        if (dates_desc[i - 1] - dates_desc[i]).days <= STREAK_MAX_GAP_DAYS:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    stats["longest_streak"] = max(longest, stats["current_streak"])
    return stats
