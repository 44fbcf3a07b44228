"""Saved training programs and the workouts scheduled from them."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import ProgramSource, WorkoutStatus
from app.db.base import Base, JSONType, utcnow


class SavedProgram(Base):
    """A multi-week plan; plan_data holds ``{"weeks": n, "workouts": [...]}``."""

    __tablename__ = "saved_programs"
    __table_args__ = (Index("ix_saved_programs_user_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    weeks: Mapped[int] = mapped_column(Integer, default=4, nullable=False)
    days_per_week: Mapped[int] = mapped_column(Integer, nullable=False)
    goal: Mapped[str | None] = mapped_column(String(50), nullable=True)
    experience_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    equipment: Mapped[str | None] = mapped_column(String(50), nullable=True)
    source: Mapped[str] = mapped_column(String(20), default=ProgramSource.MANUAL.value, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    plan_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class ScheduledWorkout(Base):
    """A calendar entry generated from a program (or added by hand)."""

    __tablename__ = "scheduled_workouts"
    __table_args__ = (
        Index("ix_scheduled_workouts_user_id_workout_date", "user_id", "workout_date"),
        Index("ix_scheduled_workouts_program_id", "program_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    program_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("saved_programs.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    workout_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=WorkoutStatus.PLANNED.value, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    scheduled_exercises: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONType, nullable=True)
    completed_workout_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("workouts.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
