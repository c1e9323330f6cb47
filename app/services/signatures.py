"""Kiosk signature submission and the administrative delete/reset override.

A submission runs in one database transaction: guest upsert (with audited phone
change), duplicate guard, signature row with its PNG, EventGuest status.
"""
from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import (
    AccessDenied,
    ConcurrentUpdate,
    DuplicateSignature,
    NotFound,
    NotOnGuestlist,
    PhoneCollision,
    ValidationFailed,
)
from app.models.event import Event
from app.models.event_guest import EventGuest, EventGuestStatus
from app.models.guest import Guest, GuestPhoneHistory, PhoneChangeVia
from app.models.nda_signature import Language, NdaSignature
from app.models.user import UserRole
from app.schemas.signature import SignatureSubmitRequest
from app.services.access import StaffContext
from app.services.app_config import get_app_config
from app.services.audit_log import (
    ACTION_GUEST_PHONE_CHANGED,
    ACTION_NDA_DELETED,
    ACTION_NDA_SIGNED,
    ENTITY_GUEST,
    ENTITY_NDA_SIGNATURE,
    create_log,
)
from app.services.kiosk_sessions import validate_session
from app.services.validation import validate_phone, validate_username

logger = logging.getLogger(__name__)

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
MAX_SIGNATURE_BYTES = 2 * 1024 * 1024


@dataclass(frozen=True)
class SubmittedSignature:
    signature_id: int
    guest_id: int
    event_guest_status: EventGuestStatus
    phone_changed: bool


def decode_signature_png(encoded: str) -> bytes:
    """Accept raw base64 or a canvas data URL; the result must be a PNG."""
    raw = (encoded or "").strip()
    if raw.startswith("data:"):
        raw = raw.split(",", 1)[-1]
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationFailed("Signature image is not valid base64")
    if not data.startswith(PNG_MAGIC):
        raise ValidationFailed("Signature must be a PNG image")
    if len(data) > MAX_SIGNATURE_BYTES:
        raise ValidationFailed("Signature image is too large")
    return data


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def _apply_contact_fields(guest: Guest, data: SignatureSubmitRequest, username: str) -> None:
    guest.first_name = data.first_name.strip()
    guest.last_name = data.last_name.strip()
    guest.sm_username = username
    guest.email = _clean(data.email)
    guest.location = _clean(data.location)


def _new_guest(db: Session, data: SignatureSubmitRequest, username: str, phone: str) -> Guest:
    guest = Guest(phone=phone)
    _apply_contact_fields(guest, data, username)
    db.add(guest)
    try:
        db.flush()
    except IntegrityError:
        # Another kiosk created a guest with this phone between our read and insert
        db.rollback()
        raise ConcurrentUpdate("This mobile number was registered at the same time on another device. Please try again.")
    return guest


def submit_signature(
    db: Session,
    kiosk_token: str | None,
    data: SignatureSubmitRequest,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SubmittedSignature:
    lang = data.language
    if not (
        data.event_id and data.sm_username and data.phone and (data.first_name or "").strip()
        and (data.last_name or "").strip() and data.signature_png_base64
    ):
        raise ValidationFailed("Missing required fields")
    if not (data.read_confirmed and data.privacy_accepted):
        raise ValidationFailed("You must confirm that you have read the NDA and accept the privacy notice")

    username_check = validate_username(data.sm_username, lang)
    if not username_check.valid:
        raise ValidationFailed(username_check.error)
    phone_check = validate_phone(data.phone, lang)
    if not phone_check.valid:
        raise ValidationFailed(phone_check.error)
    username = username_check.normalized
    phone = phone_check.normalized

    validate_session(db, kiosk_token, data.event_id)

    event_guest = (
        db.query(EventGuest)
        .filter(EventGuest.event_id == data.event_id, EventGuest.sm_username == username)
        .first()
    )
    if event_guest is None:
        raise NotOnGuestlist("You are not on the guest list for this event", status_code=403)

    event = db.query(Event).filter(Event.id == data.event_id).first()
    if event is None:
        raise NotFound("Event not found")
    config = get_app_config(db)
    image = decode_signature_png(data.signature_png_base64)

    existing_by_phone = db.query(Guest).filter(Guest.phone == phone).first()
    list_phone = event_guest.phone
    phone_changed = bool(list_phone and list_phone != phone)

    # A new number already held by any directory record would merge two guests
    if phone_changed and existing_by_phone is not None:
        raise PhoneCollision("This mobile number is already registered to another guest")

    if existing_by_phone is not None:
        guest = existing_by_phone
        _apply_contact_fields(guest, data, username)
        db.flush()
    elif phone_changed:
        old_guest = db.query(Guest).filter(Guest.phone == list_phone).first()
        if old_guest is not None:
            guest = old_guest
            db.add(GuestPhoneHistory(
                guest_id=guest.id,
                old_phone=list_phone,
                new_phone=phone,
                changed_via=PhoneChangeVia.kiosk,
            ))
            # Guarded on the old value so two devices cannot both move the same guest
            moved = (
                db.query(Guest)
                .filter(Guest.id == guest.id, Guest.phone == list_phone)
                .update({Guest.phone: phone}, synchronize_session="fetch")
            )
            if moved != 1:
                db.rollback()
                raise ConcurrentUpdate("This guest's mobile number was changed on another device. Please try again.")
            _apply_contact_fields(guest, data, username)
            create_log(
                db,
                ACTION_GUEST_PHONE_CHANGED,
                ENTITY_GUEST,
                guest.id,
                ip_address=ip_address,
                user_agent=user_agent,
                meta={"event_id": event.id, "changed_via": PhoneChangeVia.kiosk},
            )
        else:
            guest = _new_guest(db, data, username, phone)
    else:
        guest = _new_guest(db, data, username, phone)

    if event_guest.phone != phone:
        event_guest.phone = phone
    db.flush()

    already = (
        db.query(NdaSignature.id)
        .filter(NdaSignature.event_id == event.id, NdaSignature.guest_id == guest.id)
        .first()
    )
    if already is not None:
        db.rollback()
        logger.info("submission rejected: duplicate signature for event %s", data.event_id)
        raise DuplicateSignature("You have already signed the NDA for this event")

    signature = NdaSignature(
        event_id=event.id,
        guest_id=guest.id,
        event_guest_id=event_guest.id,
        language=Language(lang),
        nda_text_snapshot=event.nda_text(lang),
        read_confirmed=True,
        privacy_accepted=True,
        privacy_text_snapshot=config.privacy_text(lang),
        privacy_version=config.privacy_version,
        signed_at=datetime.now(timezone.utc),
        signature_png=image,
    )
    db.add(signature)
    try:
        db.flush()
        advanced = (
            db.query(EventGuest)
            .filter(EventGuest.id == event_guest.id, EventGuest.status != EventGuestStatus.verified)
            .update({EventGuest.status: EventGuestStatus.signed_pending_verification}, synchronize_session=False)
        )
        if not advanced:
            logger.warning("event guest %s was already verified when signature %s was recorded", event_guest.id, signature.id)
        create_log(
            db,
            ACTION_NDA_SIGNED,
            ENTITY_NDA_SIGNATURE,
            signature.id,
            ip_address=ip_address,
            user_agent=user_agent,
            meta={"event_id": event.id, "guest_id": guest.id, "language": lang, "phone_changed": phone_changed},
        )
        signature_id, guest_id = signature.id, guest.id
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if "nda_signatures" in str(getattr(e, "orig", e)):
            raise DuplicateSignature("You have already signed the NDA for this event")
        raise ConcurrentUpdate("Guest details were changed on another device. Please try again.")
    except Exception:
        db.rollback()
        raise

    logger.info("signature %s recorded for event %s (phone_changed=%s)", signature_id, data.event_id, phone_changed)
    return SubmittedSignature(
        signature_id=signature_id,
        guest_id=guest_id,
        event_guest_status=EventGuestStatus.signed_pending_verification,
        phone_changed=phone_changed,
    )


def delete_signature(
    db: Session,
    staff: StaffContext,
    signature_id: int,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Administrative override: remove a signature and put the guest back to invited."""
    signature = db.query(NdaSignature).filter(NdaSignature.id == signature_id).first()
    if signature is None:
        raise NotFound("Signature not found")
    event = db.query(Event).filter(Event.id == signature.event_id).first()
    if staff.role == UserRole.organizer:
        if event is None or event.created_by != staff.user_id:
            raise AccessDenied("You do not have access to this event")
    elif staff.role != UserRole.admin:
        raise AccessDenied("Only admins or the event organizer can delete signatures")

    meta = {
        "event_id": signature.event_id,
        "guest_id": signature.guest_id,
        "was_verified": signature.verified_at is not None,
    }

    if signature.event_guest_id is not None:
        db.query(EventGuest).filter(EventGuest.id == signature.event_guest_id).update(
            {EventGuest.status: EventGuestStatus.invited}, synchronize_session=False
        )
    db.delete(signature)
    create_log(
        db,
        ACTION_NDA_DELETED,
        ENTITY_NDA_SIGNATURE,
        signature_id,
        actor_user_id=staff.user_id,
        ip_address=ip_address,
        user_agent=user_agent,
        meta=meta,
    )
    db.commit()
    logger.info("signature %s deleted by user %s", signature_id, staff.user_id)
