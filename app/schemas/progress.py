"""Progress analytics response schemas."""

from datetime import date

from pydantic import BaseModel


class PersonalRecord(BaseModel):
    exercise_name: str
    weight: float
    reps: int
    date: date


class DailyVolume(BaseModel):
    date: date
    total_volume: float
    total_sets: int
    total_reps: int


class VolumeSummary(BaseModel):
    total_volume: float
    total_sets: int
    total_reps: int
    workout_count: int
    avg_volume_per_workout: int
    period_days: int


class VolumeReport(BaseModel):
    daily: list[DailyVolume]
    summary: VolumeSummary


class StreakStats(BaseModel):
    current_streak: int
    longest_streak: int
    last_workout_date: date | None = None
    total_workouts: int
    workouts_last_7_days: int
    workouts_last_30_days: int
