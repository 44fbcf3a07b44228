"""ORM models - import all so Base.metadata is complete for migrations."""

from app.models.audit_log import AuditLog
from app.models.billing import Entitlement, Subscription, UsageLimit
from app.models.program import SavedProgram, ScheduledWorkout
from app.models.user import PasswordResetToken, Profile, User
from app.models.workout import Workout, WorkoutExercise, WorkoutSet

__all__ = [
    "AuditLog",
    "Entitlement",
    "PasswordResetToken",
    "Profile",
    "SavedProgram",
    "ScheduledWorkout",
    "Subscription",
    "UsageLimit",
    "User",
    "Workout",
    "WorkoutExercise",
    "WorkoutSet",
]
