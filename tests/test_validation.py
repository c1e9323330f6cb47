"""Username and phone rules."""
import pytest

from app.services.validation import (
    normalize_phone,
    normalize_username,
    validate_phone,
    validate_username,
)


@pytest.mark.parametrize("raw, expected", [
    ("Ola.Nordmann", "ola.nordmann"),
    ("  kari_n  ", "kari_n"),
    ("abc", "abc"),
    ("a" * 32, "a" * 32),
    ("per-hansen99", "per-hansen99"),
])
def test_valid_usernames_are_normalized(raw, expected):
    result = validate_username(raw)
    assert result.valid
    assert result.error is None
    assert result.normalized == expected
    assert normalize_username(result.normalized) == result.normalized


@pytest.mark.parametrize("raw, fragment", [
    ("", "required"),
    (None, "required"),
    ("ab", "3–32"),
    ("a" * 33, "3–32"),
    ("1ola", "start with a letter"),
    ("ola nordmann", "No spaces"),
    ("ola..n", "Double separators"),
    ("ola__n", "Double separators"),
    ("ola.", "cannot end"),
    ("Admin", "reserved"),
])
def test_invalid_usernames_name_the_rule(raw, fragment):
    result = validate_username(raw)
    assert not result.valid
    assert fragment in result.error
    assert result.normalized is None


def test_username_messages_are_localized():
    assert validate_username("", "no").error == "Brukernavn er påkrevd"
    assert validate_username("", "en").error == "Username is required"


@pytest.mark.parametrize("raw, expected", [
    ("+47 464 27 042", "4746427042"),
    ("464-27-042", "46427042"),
    ("004746427042", "004746427042"),
    ("123456789012345", "123456789012345"),
])
def test_valid_phones_are_digits_only(raw, expected):
    result = validate_phone(raw)
    assert result.valid
    assert result.normalized == expected
    assert result.normalized.isdigit()
    assert 8 <= len(result.normalized) <= 15
    assert normalize_phone(result.normalized) == result.normalized


@pytest.mark.parametrize("raw, fragment", [
    ("", "required"),
    ("46a27042", "only contain digits"),
    ("(47)46427042", "only contain digits"),
    ("1234567", "8–15"),
    ("1234567890123456", "8–15"),
])
def test_invalid_phones(raw, fragment):
    result = validate_phone(raw)
    assert not result.valid
    assert fragment in result.error


def test_normalize_phone_does_not_validate():
    assert normalize_phone("+47 abc") == "47abc"
