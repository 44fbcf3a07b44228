"""Application constants."""

# Input limits (characters)
MAX_LENGTHS = {
    "username": 30,
    "full_name": 100,
    "workout_title": 100,
    "notes": 1000,
    "exercise_name": 100,
    "bio": 500,
    "email": 255,
    "password": 128,
    "program_name": 100,
    "description": 1000,
}

# Inclusive numeric bounds
NUMERIC_BOUNDS = {
    "weight": (0, 2000),  # kg or lbs
    "reps": (0, 1000),
    "sets": (1, 100),
    "rir": (0, 10),
    "rpe": (0, 10),
    "duration": (1, 600),  # minutes
    "order_index": (0, 100),
    "days_per_week": (1, 7),
    "weeks": (1, 52),
    "plan_day": (1, 7),  # day of the program week
}

MAX_PLAN_WORKOUTS = 50

# Monthly workout quota per plan
FREE_WORKOUTS_PER_MONTH = 45
PRO_WORKOUTS_PER_MONTH = 90

# Workouts needed before progress analytics unlock on the free plan
PROGRESS_UNLOCK_THRESHOLD = 10

# Listing / progress query bounds
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50
DEFAULT_PR_LIMIT = 10
MAX_PR_LIMIT = 50
DEFAULT_VOLUME_DAYS = 30
MIN_VOLUME_DAYS = 7
MAX_VOLUME_DAYS = 365
DEFAULT_AUDIT_LOG_LIMIT = 50

# Streaks tolerate one rest day between sessions
STREAK_MAX_GAP_DAYS = 2

GENERIC_ERROR = "Internal server error"
UNAUTHORIZED = "Unauthorized"
TOO_MANY_REQUESTS = "Too many requests. Please try again later."
