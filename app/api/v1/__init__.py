"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    account,
    auth,
    billing,
    entitlements,
    exercises,
    health,
    profile,
    programs,
    progress,
    scheduled_workouts,
    sets,
    workouts,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(account.router, prefix="/account", tags=["account"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(workouts.router, prefix="/workouts", tags=["workouts"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(sets.router, prefix="/sets", tags=["sets"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
api_router.include_router(programs.router, prefix="/programs", tags=["programs"])
api_router.include_router(scheduled_workouts.router, prefix="/scheduled-workouts", tags=["scheduled-workouts"])
api_router.include_router(entitlements.router, prefix="/entitlements", tags=["entitlements"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
