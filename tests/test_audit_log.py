"""AuditLogger: database writes, log fallback and severity defaults."""

import json
import logging
import uuid

from sqlalchemy import select

from app.core.enums import AuditEventType, AuditSeverity
from app.db.session import async_session_maker
from app.models.audit_log import AuditLog
from app.services.audit_log import AuditLogger

LOGGER = "app.services.audit_log"


def broken_session_factory():
    raise RuntimeError("database unavailable")


def audit_payloads(caplog, prefix="[AUDIT] "):
    return [
        json.loads(r.getMessage()[len(prefix):])
        for r in caplog.records
        if r.name == LOGGER and r.getMessage().startswith(prefix + "{")
    ]


async def test_event_written_to_database(db_session):
    audit = AuditLogger(async_session_maker)
    user_id = uuid.uuid4()
    await audit.log_event(
        AuditEventType.WORKOUT_CREATED,
        user_id=user_id,
        ip_address="198.51.100.4",
        user_agent="x" * 600,
        metadata={"workout_id": "w1"},
    )

    entry = (await db_session.execute(select(AuditLog))).scalar_one()
    assert entry.user_id == user_id
    assert entry.event_type == "workout_created"
    assert entry.severity == "low"
    assert entry.event_data == {"workout_id": "w1"}
    assert entry.ip_address == "198.51.100.4"
    assert len(entry.user_agent) == 500

    events = await audit.recent_events(user_id)
    assert [e.event_type for e in events] == ["workout_created"]


async def test_falls_back_to_log_when_database_fails(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    audit = AuditLogger(broken_session_factory)

    await audit.log_auth_event(AuditEventType.LOGIN_FAILED, metadata={"email": "a@example.com"})

    assert any("Database logging failed" in r.getMessage() for r in caplog.records)
    [payload] = audit_payloads(caplog)
    assert payload["event_type"] == "login_failed"
    assert payload["severity"] == "medium"
    assert payload["ip_address"] == "unknown"
    assert payload["user_id"] is None
    assert payload["metadata"] == {"email": "a@example.com"}


async def test_log_only_mode(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    audit = AuditLogger(broken_session_factory, write_to_db=False)

    await audit.log_event(AuditEventType.SIGNUP, user_id=uuid.uuid4())

    assert not any("Database logging failed" in r.getMessage() for r in caplog.records)
    assert [p["event_type"] for p in audit_payloads(caplog)] == ["signup"]


async def test_high_severity_also_warns(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    audit = AuditLogger(broken_session_factory, write_to_db=False)

    await audit.log_security_event(AuditEventType.SUSPICIOUS_ACTIVITY, {"path": "/../etc"})
    await audit.log_security_event(AuditEventType.RATE_LIMIT_EXCEEDED, {"endpoint": "/auth/login"})

    high = audit_payloads(caplog, prefix="[AUDIT HIGH] ")
    assert [p["event_type"] for p in high] == ["suspicious_activity"]
    assert [p["severity"] for p in audit_payloads(caplog)] == ["high", "medium"]


async def test_payment_event_severity(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    audit = AuditLogger(broken_session_factory, write_to_db=False)

    await audit.log_payment_event(AuditEventType.PAYMENT_FAILED, uuid.uuid4(), {"amount": 999})
    await audit.log_payment_event(AuditEventType.PAYMENT_SUCCESS, uuid.uuid4(), {"amount": 999})

    assert [p["severity"] for p in audit_payloads(caplog)] == ["medium", "low"]


async def test_recent_events_returns_none_on_failure():
    audit = AuditLogger(broken_session_factory)
    assert await audit.recent_events(uuid.uuid4()) is None


async def test_explicit_severity_overrides_default(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    audit = AuditLogger(broken_session_factory, write_to_db=False)
    await audit.log_security_event(
        AuditEventType.SUSPICIOUS_ACTIVITY, {"action": "x"}, severity=AuditSeverity.MEDIUM
    )
    assert [p["severity"] for p in audit_payloads(caplog)] == ["medium"]
    assert audit_payloads(caplog, prefix="[AUDIT HIGH] ") == []
