"""Validation and sanitization helpers."""

from datetime import date, datetime

import pytest

from app.core.validation import (
    sanitize_for_xss,
    validate_date,
    validate_date_string,
    validate_email,
    validate_integer,
    validate_number,
    validate_optional_string,
    validate_password,
    validate_string,
    validate_url,
    validate_username,
    validate_uuid,
)


def test_sanitize_strips_markup_and_handlers():
    assert sanitize_for_xss("<b>hi</b>") == "bhi/b"
    assert sanitize_for_xss("javascript:alert(1)") == "alert(1)"
    assert sanitize_for_xss('x onclick="y"') == 'x "y"'


def test_validate_string_trims_and_sanitizes():
    assert validate_string("  Push <day>  ", 100) == "Push day"
    assert validate_string("<raw>", 100, sanitize=False) == "<raw>"


@pytest.mark.parametrize(
    "value, kwargs, message",
    [
        (42, {}, "Value must be a string"),
        ("   ", {}, "Value cannot be empty"),
        ("ab", {"min_length": 3}, "Value must be at least 3 characters"),
        ("abcdef", {}, "Value must be at most 5 characters"),
    ],
)
def test_validate_string_errors(value, kwargs, message):
    with pytest.raises(ValueError, match=message):
        validate_string(value, 5, **kwargs)


def test_validate_optional_string():
    assert validate_optional_string(None, 10) is None
    assert validate_optional_string("   ", 10) is None
    assert validate_optional_string(" note ", 10) == "note"


def test_validate_number():
    assert validate_number("12.5", 0, 100, allow_decimals=True) == 12.5
    assert validate_integer(7, 0, 10) == 7
    with pytest.raises(ValueError, match="whole number"):
        validate_number(2.5, 0, 10)
    with pytest.raises(ValueError, match="between 0 and 10"):
        validate_number(11, 0, 10)
    with pytest.raises(ValueError, match="must be a number"):
        validate_number(True, 0, 10)
    with pytest.raises(ValueError, match="must be a number"):
        validate_number("ten", 0, 10)


def test_validate_number_rejects_huge_values():
    with pytest.raises(ValueError, match="must be a number"):
        validate_number(10**400, 0, 2000, allow_decimals=True)
    with pytest.raises(ValueError, match="must be a number"):
        validate_number("1e400", 0, 2000, allow_decimals=True)


def test_validate_uuid():
    value = "3F2504E0-4F89-41D3-9A0C-0305E82C3301"
    assert validate_uuid(value) == value.lower()
    for bad in ("not-a-uuid", "3f2504e0-4f89-01d3-9a0c-0305e82c3301", 123):
        with pytest.raises(ValueError, match="Invalid ID format"):
            validate_uuid(bad)


def test_validate_email():
    assert validate_email("  Lifter@Example.COM ") == "lifter@example.com"
    with pytest.raises(ValueError, match="Email is required"):
        validate_email("")
    with pytest.raises(ValueError, match="Invalid email format"):
        validate_email("no-at-sign")
    with pytest.raises(ValueError, match="too long"):
        validate_email("a" * 250 + "@x.com")


def test_password_strength_and_policy():
    strong = validate_password("Str0ngPass!")
    assert strong.valid and strong.strength == "strong"

    no_special = validate_password("Str0ngPass")
    assert no_special.valid
    assert no_special.checks["has_special"] is False

    assert validate_password("short1A").error == "Password must be at least 8 characters"
    assert validate_password("alllower1").error == "Password must contain an uppercase letter"
    assert validate_password("PASSWORD456").error == "Password must contain a lowercase letter"
    assert validate_password("NoDigitsHere").error == "Password must contain a number"
    assert validate_password(None).valid is False


def test_common_password_rejected_case_insensitively():
    for password in ("Password1", "Passw0rd", "Welcome1"):
        result = validate_password(password)
        assert not result.valid
        assert result.error == "This password is too common"


def test_common_password_reported_before_other_rules():
    # "12345678" also lacks letters, but the common check comes first
    assert validate_password("12345678").error == "This password is too common"
    assert validate_password("admin").error == "This password is too common"


def test_special_characters_are_punctuation_only():
    assert validate_password("Str0ngPass#").checks["has_special"] is True
    assert validate_password("Str0ngPass~").checks["has_special"] is False
    assert validate_password("Str0ng Pass").checks["has_special"] is False


def test_validate_date_accepts_iso_forms():
    assert validate_date("2024-05-01") == date(2024, 5, 1)
    assert validate_date("2024-05-01T10:30:00Z") == date(2024, 5, 1)
    assert validate_date(datetime(2024, 5, 1, 8)) == date(2024, 5, 1)
    with pytest.raises(ValueError, match="Invalid date format"):
        validate_date("05/01/2024")


def test_validate_date_string_is_strict():
    assert validate_date_string("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValueError, match="YYYY-MM-DD"):
        validate_date_string("2024-2-29")
    with pytest.raises(ValueError, match="Invalid date"):
        validate_date_string("2023-02-29")
    with pytest.raises(ValueError, match="on or after"):
        validate_date_string("2024-01-01", min_date=date(2024, 6, 1))


def test_validate_username():
    assert validate_username("Iron_Lifter") == "iron_lifter"
    with pytest.raises(ValueError, match="start with a letter"):
        validate_username("1lifter")
    with pytest.raises(ValueError, match="reserved"):
        validate_username("Admin")
    with pytest.raises(ValueError, match="letters, numbers, and underscores"):
        validate_username("iron-lifter")


def test_validate_url():
    assert validate_url("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"
    with pytest.raises(ValueError, match="http or https"):
        validate_url("ftp://example.com/file")
    with pytest.raises(ValueError, match="Invalid URL format"):
        validate_url("example.com")
