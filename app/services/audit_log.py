"""Audit trail for security-relevant events.

Events are written to ``audit_logs`` in a session of their own, so an entry
survives even when the request that produced it is rolled back. When the
database write fails (or is disabled) the entry is written to the application
log instead. Logging an audit event never raises.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import AuditEventType, AuditSeverity
from app.core.security import get_client_ip
from app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

AUTH_EVENT_SEVERITY = {
    AuditEventType.LOGIN_FAILED: AuditSeverity.MEDIUM,
    AuditEventType.PASSWORD_RESET_REQUEST: AuditSeverity.MEDIUM,
    AuditEventType.PASSWORD_CHANGED: AuditSeverity.HIGH,
}

PAYMENT_EVENT_SEVERITY = {
    AuditEventType.PAYMENT_FAILED: AuditSeverity.MEDIUM,
    AuditEventType.SUBSCRIPTION_CANCELLED: AuditSeverity.MEDIUM,
}

USER_AGENT_MAX_LENGTH = 500


class AuditLogger:
    """Writes audit events through ``session_factory`` with a log fallback."""

    def __init__(self, session_factory: Callable[[], AsyncSession], write_to_db: bool = True):
        self._session_factory = session_factory
        self._write_to_db = write_to_db

    async def log_event(
        self,
        event_type: AuditEventType,
        *,
        user_id: uuid.UUID | None = None,
        request: Request | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        metadata: dict[str, Any] | None = None,
        severity: AuditSeverity = AuditSeverity.LOW,
    ) -> None:
        try:
            if request is not None:
                ip_address = ip_address or get_client_ip(request)
                user_agent = user_agent or request.headers.get("user-agent")
            entry = {
                "event_type": event_type.value,
                "user_id": str(user_id) if user_id else None,
                "ip_address": ip_address or "unknown",
                "user_agent": user_agent[:USER_AGENT_MAX_LENGTH] if user_agent else None,
                "metadata": metadata or {},
                "severity": severity.value,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            payload = json.dumps(entry, default=str)

            if not self._write_to_db:
                logger.info("[AUDIT] %s", payload)
            else:
                try:
                    await self._insert(entry, user_id)
                except Exception as e:
                    logger.warning("[AUDIT] Database logging failed: %s", e)
                    logger.info("[AUDIT] %s", payload)

            if severity in (AuditSeverity.HIGH, AuditSeverity.CRITICAL):
                logger.warning("[AUDIT %s] %s", severity.value.upper(), payload)
        except Exception:
            logger.exception("[AUDIT ERROR] failed to record %s", event_type)

    async def _insert(self, entry: dict[str, Any], user_id: uuid.UUID | None) -> None:
        async with self._session_factory() as session:
            session.add(
                AuditLog(
                    user_id=user_id,
                    event_type=entry["event_type"],
                    event_data=json.loads(json.dumps(entry["metadata"], default=str)),
                    severity=entry["severity"],
                    ip_address=entry["ip_address"],
                    user_agent=entry["user_agent"],
                )
            )
            await session.commit()

    async def log_auth_event(
        self,
        event_type: AuditEventType,
        user_id: uuid.UUID | None = None,
        *,
        request: Request | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        await self.log_event(
            event_type,
            user_id=user_id,
            request=request,
            metadata=metadata,
            severity=AUTH_EVENT_SEVERITY.get(event_type, AuditSeverity.LOW),
        )

    async def log_security_event(
        self,
        event_type: AuditEventType,
        details: dict[str, Any],
        *,
        user_id: uuid.UUID | None = None,
        request: Request | None = None,
        severity: AuditSeverity | None = None,
    ) -> None:
        """Rate limit hits default to medium severity, suspicious activity to high."""
        if severity is None:
            severity = (
                AuditSeverity.HIGH
                if event_type == AuditEventType.SUSPICIOUS_ACTIVITY
                else AuditSeverity.MEDIUM
            )
        await self.log_event(
            event_type,
            user_id=user_id,
            request=request,
            metadata=details,
            severity=severity,
        )

    async def log_payment_event(
        self,
        event_type: AuditEventType,
        user_id: uuid.UUID,
        metadata: dict[str, Any],
        *,
        request: Request | None = None,
    ) -> None:
        await self.log_event(
            event_type,
            user_id=user_id,
            request=request,
            metadata=metadata,
            severity=PAYMENT_EVENT_SEVERITY.get(event_type, AuditSeverity.LOW),
        )

    async def recent_events(self, user_id: uuid.UUID, limit: int = 50) -> list[AuditLog] | None:
        """Newest events for a user, or None if they could not be read."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AuditLog)
                    .where(AuditLog.user_id == user_id)
                    .order_by(AuditLog.created_at.desc())
                    .limit(limit)
                )
                return list(result.scalars().all())
        except Exception:
            logger.exception("Error fetching audit logs for %s", user_id)
            return None
