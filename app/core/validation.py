"""Input validation and sanitization helpers.

Every validator returns the cleaned value or raises ValueError with a message
suitable for the API error envelope. They are used directly by handlers and
from pydantic ``field_validator`` hooks in the request schemas.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from urllib.parse import urlparse

from app.core.constants import MAX_LENGTHS

_XSS_PATTERNS = [
    (re.compile(r"[<>]"), ""),
    (re.compile(r"javascript:", re.IGNORECASE), ""),
    (re.compile(r"vbscript:", re.IGNORECASE), ""),
    (re.compile(r"data:", re.IGNORECASE), ""),
    (re.compile(r"on\w+\s*=", re.IGNORECASE), ""),
    (re.compile(r"expression\s*\(", re.IGNORECASE), ""),
    (re.compile(r"url\s*\(", re.IGNORECASE), ""),
]

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
DATE_STRING_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
SPECIAL_CHAR_RE = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")

RESERVED_USERNAMES = frozenset(
    {"admin", "root", "system", "moderator", "support", "help", "api", "www"}
)

COMMON_PASSWORDS = frozenset(
    {
        "password", "password1", "password123", "123456", "12345678", "123456789",
        "qwerty", "qwerty123", "abc123", "letmein", "welcome", "welcome1",
        "monkey", "dragon", "master", "iloveyou", "admin", "admin123",
        "login", "passw0rd", "football", "baseball", "sunshine", "princess",
        "trustno1", "111111", "000000", "1234567890", "changeme",
    }
)


def sanitize_for_xss(value: str) -> str:
    """Strip angle brackets, script schemes and inline handlers."""
    for pattern, replacement in _XSS_PATTERNS:
        value = pattern.sub(replacement, value)
    return value


def validate_string(
    value: object,
    max_length: int,
    *,
    min_length: int | None = None,
    allow_empty: bool = False,
    sanitize: bool = True,
) -> str:
    """Trim, length-check and (by default) XSS-sanitize a string."""
    if not isinstance(value, str):
        raise ValueError("Value must be a string")
    trimmed = value.strip()
    if not allow_empty and not trimmed:
        raise ValueError("Value cannot be empty")
    if min_length is not None and len(trimmed) < min_length:
        raise ValueError(f"Value must be at least {min_length} characters")
    if len(trimmed) > max_length:
        raise ValueError(f"Value must be at most {max_length} characters")
    return sanitize_for_xss(trimmed) if sanitize else trimmed


def validate_optional_string(value: object, max_length: int) -> str | None:
    """Like validate_string, but None and blank strings become None."""
    if value is None:
        return None
    cleaned = validate_string(value, max_length, allow_empty=True)
    return cleaned or None


def validate_number(
    value: object,
    min_value: float,
    max_value: float,
    *,
    allow_decimals: bool = False,
) -> float:
    """Parse and range-check a number. Numeric strings are accepted."""
    if isinstance(value, bool):
        raise ValueError("Value must be a number")
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except (ValueError, OverflowError):
            raise ValueError("Value must be a number") from None
    elif isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            raise ValueError("Value must be a number") from None
    else:
        raise ValueError("Value must be a number")
    if math.isnan(number) or math.isinf(number):
        raise ValueError("Value must be a number")
    if not allow_decimals and not number.is_integer():
        raise ValueError("Value must be a whole number")
    if number < min_value or number > max_value:
        raise ValueError(f"Value must be between {min_value:g} and {max_value:g}")
    return number


def validate_integer(value: object, min_value: int, max_value: int) -> int:
    return int(validate_number(value, min_value, max_value))


def validate_uuid(value: object) -> str:
    """Return the lowercase form of an RFC 4122 (v1-v5) UUID string."""
    if not isinstance(value, str):
        raise ValueError("Invalid ID format")
    if not UUID_RE.match(value):
        raise ValueError("Invalid ID format")
    return value.lower()


def validate_email(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError("Email must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Email is required")
    if len(trimmed) > MAX_LENGTHS["email"]:
        raise ValueError("Email is too long")
    if not EMAIL_RE.match(trimmed):
        raise ValueError("Invalid email format")
    return trimmed.lower()


@dataclass
class PasswordCheck:
    valid: bool
    error: str | None = None
    strength: str = "weak"
    checks: dict[str, bool] = field(default_factory=dict)


def validate_password(password: object) -> PasswordCheck:
    """Score a password and decide whether it meets the account policy.

    Strength counts passed checks (special characters only raise strength).
    Validity requires a non-common password, length, mixed case and a digit;
    errors are reported in that order.
    """
    if not isinstance(password, str):
        return PasswordCheck(valid=False, error="Password must be a string")

    checks = {
        "min_length": len(password) >= 8,
        "has_uppercase": bool(re.search(r"[A-Z]", password)),
        "has_lowercase": bool(re.search(r"[a-z]", password)),
        "has_number": bool(re.search(r"[0-9]", password)),
        "has_special": bool(SPECIAL_CHAR_RE.search(password)),
        "not_common": password.lower() not in COMMON_PASSWORDS,
    }
    passed = sum(checks.values())
    if passed <= 2:
        strength = "weak"
    elif passed == 3:
        strength = "fair"
    elif passed == 4:
        strength = "good"
    else:
        strength = "strong"

    if len(password) > MAX_LENGTHS["password"]:
        return PasswordCheck(
            valid=False,
            error=f"Password must be at most {MAX_LENGTHS['password']} characters",
            strength=strength,
            checks=checks,
        )

    error = None
    if not checks["not_common"]:
        error = "This password is too common"
    elif not checks["min_length"]:
        error = "Password must be at least 8 characters"
    elif not checks["has_uppercase"]:
        error = "Password must contain an uppercase letter"
    elif not checks["has_lowercase"]:
        error = "Password must contain a lowercase letter"
    elif not checks["has_number"]:
        error = "Password must contain a number"

    return PasswordCheck(valid=error is None, error=error, strength=strength, checks=checks)


def validate_date(value: object) -> date:
    """Accept a date, a datetime, or an ISO date/datetime string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Invalid date format")
    text = value.strip()
    if len(text) > 10 and text[10] in "T ":
        text = text[:10]
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError("Invalid date format") from None


def validate_date_string(
    value: object,
    min_date: date | None = None,
    max_date: date | None = None,
) -> date:
    """Strict ``YYYY-MM-DD`` date with optional inclusive bounds."""
    if not isinstance(value, str) or not DATE_STRING_RE.match(value):
        raise ValueError("Date must be in YYYY-MM-DD format")
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        raise ValueError("Invalid date") from None
    if min_date and parsed < min_date:
        raise ValueError(f"Date must be on or after {min_date.isoformat()}")
    if max_date and parsed > max_date:
        raise ValueError(f"Date must be on or before {max_date.isoformat()}")
    return parsed


def validate_username(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError("Username must be a string")
    trimmed = value.strip()
    if len(trimmed) < 3:
        raise ValueError("Username must be at least 3 characters")
    if len(trimmed) > MAX_LENGTHS["username"]:
        raise ValueError(f"Username must be at most {MAX_LENGTHS['username']} characters")
    if not USERNAME_RE.match(trimmed):
        raise ValueError("Username can only contain letters, numbers, and underscores")
    if not trimmed[0].isalpha():
        raise ValueError("Username must start with a letter")
    if trimmed.lower() in RESERVED_USERNAMES:
        raise ValueError("This username is reserved")
    return trimmed.lower()


def validate_url(value: object, allowed_schemes: tuple[str, ...] = ("http", "https")) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("URL is required")
    trimmed = value.strip()
    parsed = urlparse(trimmed)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("Invalid URL format")
    if parsed.scheme not in allowed_schemes:
        raise ValueError(f"URL must use {' or '.join(allowed_schemes)}")
    return trimmed
