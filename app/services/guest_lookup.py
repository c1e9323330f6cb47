"""Two-phase guest lookup for the kiosk.

Phase 1 (verify_username) only reveals guest-list membership. Phase 2 (lookup_phone)
discloses contact details, and only when the phone itself matches a stored record.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.errors import NotOnGuestlist, PhoneAlreadyUsed, ValidationFailed
from app.models.event_guest import EventGuest
from app.models.guest import Guest
from app.services.validation import validate_phone, validate_username

logger = logging.getLogger(__name__)

PREFILL_PREVIOUS_REGISTRATION = "previous_registration"
PREFILL_GUESTLIST = "guestlist"
PREFILL_NONE = "none"


@dataclass(frozen=True)
class UsernameCheck:
    on_guestlist: bool
    sm_username: str


@dataclass(frozen=True)
class Prefill:
    sm_username: str
    phone: str
    first_name: str
    last_name: str
    email: str
    location: str
    guest_exists: bool
    prefill_source: str


def _require_username(sm_username: str | None, lang: str) -> str:
    result = validate_username(sm_username, lang)
    if not result.valid:
        raise ValidationFailed(result.error)
    return result.normalized


def _require_phone(phone: str | None, lang: str) -> str:
    result = validate_phone(phone, lang)
    if not result.valid:
        raise ValidationFailed(result.error)
    return result.normalized


def verify_username(db: Session, event_id: int, sm_username: str | None, lang: str = "en") -> UsernameCheck:
    username = _require_username(sm_username, lang)
    entry = (
        db.query(EventGuest.id)
        .filter(EventGuest.event_id == event_id, EventGuest.sm_username == username)
        .first()
    )
    if entry is None:
        logger.info("lookup: username not on guest list for event %s", event_id)
        raise NotOnGuestlist(
            "This username is not on the guest list for this event",
            on_guestlist=False,
        )
    return UsernameCheck(on_guestlist=True, sm_username=username)


def lookup_phone(
    db: Session,
    event_id: int,
    sm_username: str | None,
    phone: str | None,
    lang: str = "en",
) -> Prefill:
    username = _require_username(sm_username, lang)
    normalized_phone = _require_phone(phone, lang)

    # One phone may not cover two guest-list slots at the same event
    taken = (
        db.query(EventGuest.id)
        .filter(
            EventGuest.event_id == event_id,
            EventGuest.phone == normalized_phone,
            EventGuest.sm_username != username,
        )
        .first()
    )
    if taken is not None:
        logger.info("lookup: phone already used by another guest-list entry on event %s", event_id)
        raise PhoneAlreadyUsed(
            "This mobile number is already registered on this event. Please enter your personal mobile number.",
            phone_already_used=True,
        )

    existing_guest = db.query(Guest).filter(Guest.phone == normalized_phone).first()
    event_guest = (
        db.query(EventGuest)
        .filter(
            EventGuest.event_id == event_id,
            EventGuest.sm_username == username,
            EventGuest.phone == normalized_phone,
        )
        .first()
    )

    # Knowing a username is not enough: personal fields only come back when the phone matches a record
    if existing_guest is None and event_guest is None:
        return Prefill(
            sm_username=username,
            phone=normalized_phone,
            first_name="",
            last_name="",
            email="",
            location="",
            guest_exists=False,
            prefill_source=PREFILL_NONE,
        )

    def pick(field: str) -> str:
        for record in (existing_guest, event_guest):
            value = getattr(record, field, None) if record is not None else None
            if value:
                return value
        return ""

    return Prefill(
        sm_username=username,
        phone=normalized_phone,
        first_name=pick("first_name"),
        last_name=pick("last_name"),
        email=pick("email"),
        location=(existing_guest.location or "") if existing_guest is not None else "",
        guest_exists=existing_guest is not None,
        prefill_source=PREFILL_PREVIOUS_REGISTRATION if existing_guest is not None else PREFILL_GUESTLIST,
    )
