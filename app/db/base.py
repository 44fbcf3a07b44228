"""Declarative base and column helpers shared by every model."""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Timezone-aware default for created_at / updated_at columns."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base for all ORM models."""
