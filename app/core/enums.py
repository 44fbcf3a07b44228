"""Shared enums for models and API."""

from enum import Enum


class WorkoutStatus(str, Enum):
    """Lifecycle of a logged or scheduled workout."""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class ProgramSource(str, Enum):
    """Where a saved program came from."""

    AI = "ai"
    MANUAL = "manual"
    TEMPLATE = "template"


class SubscriptionPlan(str, Enum):
    FREE = "free"
    PRO = "pro"


class SubscriptionStatus(str, Enum):
    """Billing provider subscription states."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    TRIALING = "trialing"


class UnlockReason(str, Enum):
    """Why progress analytics are unlocked."""

    EARNED = "earned"  # Logged enough workouts
    PURCHASE = "purchase"
    ADMIN = "admin"
    PRO = "pro"  # Derived from an active subscription, never stored


class AuditEventType(str, Enum):
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    SIGNUP = "signup"
    PASSWORD_RESET_REQUEST = "password_reset_request"
    PASSWORD_CHANGED = "password_changed"
    PROFILE_UPDATED = "profile_updated"
    WORKOUT_CREATED = "workout_created"
    WORKOUT_DELETED = "workout_deleted"
    SUBSCRIPTION_CREATED = "subscription_created"
    SUBSCRIPTION_CANCELLED = "subscription_cancelled"
    PAYMENT_SUCCESS = "payment_success"
    PAYMENT_FAILED = "payment_failed"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"
    API_KEY_CREATED = "api_key_created"
    API_KEY_DELETED = "api_key_deleted"


class AuditSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
