"""Signup, login, password reset, bearer auth and per-IP limits."""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from app.api.v1.endpoints import auth as auth_endpoints
from app.core.security import hash_string
from app.models.audit_log import AuditLog
from app.models.user import PasswordResetToken, User
from tests.conftest import API, PASSWORD


async def test_signup_and_login(client):
    resp = await client.post(
        f"{API}/auth/signup",
        json={"email": "New@Example.com", "password": PASSWORD, "full_name": "New Lifter"},
    )
    assert resp.status_code == 201
    assert resp.json() == {"success": True, "data": None, "error": None, "message": "Account created!"}

    resp = await client.post(f"{API}/auth/login", json={"email": "new@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["email"] == "new@example.com"
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == 24 * 60 * 60
    assert data["access_token"]


async def test_signup_duplicate_email(client, register):
    await register("dup@example.com")
    resp = await client.post(
        f"{API}/auth/signup",
        json={"email": "dup@example.com", "password": PASSWORD, "full_name": "Again"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "An account with this email already exists"}


async def test_signup_rejects_weak_password(client):
    resp = await client.post(
        f"{API}/auth/signup",
        json={"email": "weak@example.com", "password": "lowercase1", "full_name": "Weak"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid password: Password must contain at least one uppercase letter"


async def test_signup_missing_field(client):
    resp = await client.post(f"{API}/auth/signup", json={"email": "x@example.com", "password": PASSWORD})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid full_name: Field required"}


async def test_login_wrong_password(client, register):
    await register("lifter@example.com")
    resp = await client.post(f"{API}/auth/login", json={"email": "lifter@example.com", "password": "Wrong1234!"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Invalid email or password"}


async def test_login_unknown_email_is_audited(client, db_session):
    resp = await client.post(f"{API}/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
    assert resp.status_code == 401
    result = await db_session.execute(select(AuditLog).where(AuditLog.event_type == "login_failed"))
    entry = result.scalar_one()
    assert entry.severity == "medium"
    assert entry.event_data["reason"] == "unknown_email"


async def test_login_unknown_email_still_checks_a_hash(client, register, monkeypatch):
    calls = []
    monkeypatch.setattr(auth_endpoints, "dummy_verify_password", lambda: calls.append("dummy"))
    await register("lifter@example.com")

    resp = await client.post(f"{API}/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
    assert resp.status_code == 401
    assert calls == ["dummy"]

    resp = await client.post(f"{API}/auth/login", json={"email": "lifter@example.com", "password": "Wrong1234!"})
    assert resp.status_code == 401
    assert calls == ["dummy"]


async def test_login_rate_limited_per_ip(client, db_session):
    body = {"email": "ghost@example.com", "password": PASSWORD}
    for _ in range(10):
        assert (await client.post(f"{API}/auth/login", json=body)).status_code == 401

    resp = await client.post(f"{API}/auth/login", json=body)
    assert resp.status_code == 429
    assert resp.json() == {
        "success": False,
        "error": "Too many login attempts. Please try again in 15 minutes.",
    }
    assert resp.headers["X-RateLimit-Remaining"] == "0"
    assert 0 < int(resp.headers["X-RateLimit-Reset"]) <= 900

    # A different client IP has its own budget
    resp = await client.post(f"{API}/auth/login", json=body, headers={"X-Forwarded-For": "203.0.113.7"})
    assert resp.status_code == 401

    result = await db_session.execute(select(AuditLog).where(AuditLog.event_type == "rate_limit_exceeded"))
    assert result.scalar_one().event_data["endpoint"] == "/auth/login"


async def test_cross_origin_auth_post_rejected(client):
    resp = await client.post(
        f"{API}/auth/login",
        json={"email": "a@example.com", "password": PASSWORD},
        headers={"Origin": "https://evil.example"},
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "Invalid request origin"


async def test_protected_route_requires_token(client):
    resp = await client.get(f"{API}/workouts")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Unauthorized"}

    resp = await client.get(f"{API}/workouts", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"


async def test_forgot_and_reset_password(client, register, caplog):
    await register("reset@example.com")
    caplog.set_level(logging.DEBUG, logger="app.api.v1.endpoints.auth")

    resp = await client.post(f"{API}/auth/forgot-password", json={"email": "reset@example.com"})
    assert resp.status_code == 200
    assert resp.json()["message"] == (
        "If an account exists with this email, you will receive a password reset link."
    )
    record = next(r for r in caplog.records if r.getMessage().startswith("Password reset link"))
    token = record.args[2]

    resp = await client.post(f"{API}/auth/reset-password", json={"token": token, "password": "N3wPassword!"})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Password updated successfully"

    resp = await client.post(
        f"{API}/auth/login", json={"email": "reset@example.com", "password": "N3wPassword!"}
    )
    assert resp.status_code == 200

    # Tokens are single use
    resp = await client.post(f"{API}/auth/reset-password", json={"token": token, "password": "An0therPass!"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid or expired reset token"


async def test_forgot_password_unknown_email_same_reply(client):
    resp = await client.post(f"{API}/auth/forgot-password", json={"email": "nobody@example.com"})
    assert resp.status_code == 200
    assert resp.json()["message"].startswith("If an account exists")


async def test_reset_password_expired_token(client, register, db_session):
    await register("expired@example.com")
    user = (await db_session.execute(select(User).where(User.email == "expired@example.com"))).scalar_one()
    db_session.add(
        PasswordResetToken(
            user_id=user.id,
            token_hash=hash_string("stale-token"),
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
    )
    await db_session.commit()

    resp = await client.post(
        f"{API}/auth/reset-password", json={"token": "stale-token", "password": "N3wPassword!"}
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid or expired reset token"


async def test_forgot_password_rate_limited(client):
    body = {"email": "someone@example.com"}
    for _ in range(3):
        assert (await client.post(f"{API}/auth/forgot-password", json=body)).status_code == 200
    resp = await client.post(f"{API}/auth/forgot-password", json=body)
    assert resp.status_code == 429
    assert resp.json()["error"] == "Too many password reset requests. Please try again later."
