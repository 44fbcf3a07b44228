"""Security utilities: passwords, JWT, tokens and request inspection."""

from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import unquote_plus, urlparse

from fastapi import Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

password_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str) -> str:
    return password_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return password_context.verify(plain, hashed)


def dummy_verify_password() -> None:
    """Spend a bcrypt verification when there is no stored hash to check against."""
    password_context.dummy_verify()


# ── Tokens ──


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT whose ``sub`` claim is the user id."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": subject, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT.

    Raises:
        ValueError: If the token is invalid, expired, or has no ``sub``.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not payload.get("sub"):
        raise ValueError("Token missing required claim: sub")
    return payload


def generate_secure_token(length: int = 32) -> str:
    """Hex string built from ``length`` random bytes."""
    return secrets.token_hex(length)


def hash_string(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def timing_safe_equal(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


# ── Sanitization ──

_SANITIZE_PATTERNS = [
    re.compile(r"[<>]"),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+=", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
]

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}


def sanitize_string(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    for pattern in _SANITIZE_PATTERNS:
        value = pattern.sub("", value)
    return value.strip()


def html_encode(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in value)


def sanitize_object(obj: dict[str, Any]) -> dict[str, Any]:
    """Recursively sanitize keys and string values of a JSON-like dict."""
    sanitized: dict[str, Any] = {}
    for key, value in obj.items():
        sanitized[sanitize_string(key)] = _sanitize_value(value)
    return sanitized


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return sanitize_object(value)
    if isinstance(value, list):
        return [_sanitize_value(item) for item in value]
    return value


# ── Request inspection ──

SUSPICIOUS_PATTERNS = [
    re.compile(r"\.\./"),  # path traversal
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"SELECT.*FROM", re.IGNORECASE),
    re.compile(r"UNION.*SELECT", re.IGNORECASE),
    re.compile(r"INSERT.*INTO", re.IGNORECASE),
    re.compile(r"DROP.*TABLE", re.IGNORECASE),
    re.compile(r"DELETE.*FROM", re.IGNORECASE),
    re.compile(r"UPDATE.*SET", re.IGNORECASE),
    re.compile(r"'.*OR.*'", re.IGNORECASE),
    re.compile(r'".*OR.*"', re.IGNORECASE),
    re.compile(r"exec\s*\(", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"\$\{"),  # template injection
]

SCANNER_USER_AGENTS = ("sqlmap", "nikto", "acunetix", "nessus", "masscan")

LOCAL_DEV_HOSTS = ("localhost:3000", "127.0.0.1:3000")


def get_client_ip(request: Request) -> str:
    """Client IP, preferring proxy headers over the socket peer."""
    headers = request.headers
    cf_ip = headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def validate_origin(request: Request) -> bool:
    """True for same-origin requests or ones from the site / local dev hosts."""
    origin = request.headers.get("origin")
    referer = request.headers.get("referer")
    if not origin and not referer:
        return True

    site_host = urlparse(get_settings().site_url).netloc
    allowed_hosts = {h for h in (request.headers.get("host"), site_host) if h}
    allowed_hosts.update(LOCAL_DEV_HOSTS)

    source = origin or referer
    try:
        source_host = urlparse(source).netloc
    except ValueError:
        return False
    return bool(source_host) and source_host in allowed_hosts


def is_api_request(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    content_type = request.headers.get("content-type", "")
    return (
        "application/json" in accept
        or "application/json" in content_type
        or "x-api-key" in request.headers
    )


def contains_suspicious_content(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return any(pattern.search(value) for pattern in SUSPICIOUS_PATTERNS)


def analyze_request_security(request: Request) -> tuple[bool, list[str]]:
    """Flag attack-looking paths, query strings and scanner user agents."""
    reasons: list[str] = []
    if contains_suspicious_content(request.url.path):
        reasons.append("Suspicious path pattern detected")
    if contains_suspicious_content(unquote_plus(request.url.query)):
        reasons.append("Suspicious query parameter detected")
    user_agent = request.headers.get("user-agent", "").lower()
    if any(agent in user_agent for agent in SCANNER_USER_AGENTS):
        reasons.append("Suspicious user agent detected")
    return bool(reasons), reasons
