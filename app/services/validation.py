"""Username and phone rules shared by lookup, submission and staff login.

Pure functions. Uniqueness and lookups depend on every caller normalizing the same way.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 32
PHONE_MIN_LEN = 8
PHONE_MAX_LEN = 15

RESERVED_USERNAMES = frozenset({
    "admin", "crew", "guest", "root", "system", "support",
    "kiosk", "test", "null", "staff", "event", "security",
})

_STARTS_WITH_LETTER = re.compile(r"^[a-z]")
_USERNAME_CHARS = re.compile(r"^[a-z][a-z0-9._-]*$")
_DOUBLE_SEPARATOR = re.compile(r"\.\.|--|__")
_TRAILING_SEPARATOR = re.compile(r"[._-]$")
_PHONE_STRIP = re.compile(r"[\s\-+]")
_DIGITS = re.compile(r"^[0-9]+$")

_MESSAGES = {
    "no": {
        "username_required": "Brukernavn er påkrevd",
        "username_length": "Brukernavn må være 3–32 tegn",
        "username_start": "Brukernavn må starte med en bokstav (a–z)",
        "username_chars": "Bruk kun bokstaver (a–z), tall, punktum, bindestrek eller underscore. Ingen mellomrom.",
        "username_double": "Ingen doble separatorer (.., --, __) tillatt",
        "username_trailing": "Brukernavn kan ikke slutte med punktum, bindestrek eller underscore",
        "username_reserved": "Dette brukernavnet er reservert",
        "phone_required": "Mobilnummer er påkrevd",
        "phone_digits": "Mobilnummer kan kun inneholde tall",
        "phone_length": "Mobilnummer må være 8–15 siffer (inkl. landskode)",
    },
    "en": {
        "username_required": "Username is required",
        "username_length": "Username must be 3–32 characters",
        "username_start": "Username must start with a letter (a–z)",
        "username_chars": "Use only letters (a–z), digits, dot, hyphen or underscore. No spaces.",
        "username_double": "Double separators (.., --, __) are not allowed",
        "username_trailing": "Username cannot end with a dot, hyphen or underscore",
        "username_reserved": "This username is reserved",
        "phone_required": "Mobile number is required",
        "phone_digits": "Mobile number can only contain digits",
        "phone_length": "Mobile number must be 8–15 digits (including country code)",
    },
}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None
    normalized: str | None = None


def _msg(key: str, lang: str) -> str:
    return _MESSAGES.get(lang, _MESSAGES["en"])[key]


def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


def validate_username(username: str | None, lang: str = "en") -> ValidationResult:
    """Check a platform username. Never raises; the error names the rule that failed."""
    if not username:
        return ValidationResult(False, _msg("username_required", lang))

    normalized = normalize_username(username)

    if len(normalized) < USERNAME_MIN_LEN or len(normalized) > USERNAME_MAX_LEN:
        return ValidationResult(False, _msg("username_length", lang))
    if not _STARTS_WITH_LETTER.match(normalized):
        return ValidationResult(False, _msg("username_start", lang))
    if not _USERNAME_CHARS.match(normalized):
        return ValidationResult(False, _msg("username_chars", lang))
    if _DOUBLE_SEPARATOR.search(normalized):
        return ValidationResult(False, _msg("username_double", lang))
    if _TRAILING_SEPARATOR.search(normalized):
        return ValidationResult(False, _msg("username_trailing", lang))
    if normalized in RESERVED_USERNAMES:
        return ValidationResult(False, _msg("username_reserved", lang))

    return ValidationResult(True, normalized=normalized)


def normalize_phone(phone: str) -> str:
    """Strip spaces, dashes and '+'. No length or charset check."""
    return _PHONE_STRIP.sub("", phone or "")


def validate_phone(phone: str | None, lang: str = "en") -> ValidationResult:
    if not phone:
        return ValidationResult(False, _msg("phone_required", lang))

    normalized = normalize_phone(phone)

    if not _DIGITS.match(normalized):
        return ValidationResult(False, _msg("phone_digits", lang))
    if len(normalized) < PHONE_MIN_LEN or len(normalized) > PHONE_MAX_LEN:
        return ValidationResult(False, _msg("phone_length", lang))

    return ValidationResult(True, normalized=normalized)
