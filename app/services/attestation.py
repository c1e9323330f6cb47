"""Crew-side attestation of pending signatures.

pending (verified_at IS NULL) -> verified. The conditional UPDATE with its affected-row
count is the commit point; the EventGuest status follows as a separate side effect.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.errors import AlreadyVerified, NotFound
from app.models.event import Event
from app.models.event_guest import EventGuest, EventGuestStatus
from app.models.guest import Guest
from app.models.nda_signature import NdaSignature
from app.services.access import StaffContext, accessible_event_ids, require_event_access
from app.services.audit_log import ACTION_NDA_VERIFIED, ENTITY_NDA_SIGNATURE, create_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    signature_id: int
    verified_at: datetime
    verified_by: int
    status_propagated: bool


def list_pending(db: Session, staff: StaffContext, event_id: int | None = None) -> list[dict]:
    """Unverified signatures the caller may attest, oldest first."""
    event_ids = accessible_event_ids(db, staff)
    if event_ids is not None and not event_ids:
        return []

    query = (
        db.query(NdaSignature, Guest, Event, EventGuest)
        .join(Guest, Guest.id == NdaSignature.guest_id)
        .join(Event, Event.id == NdaSignature.event_id)
        .outerjoin(EventGuest, EventGuest.id == NdaSignature.event_guest_id)
        .filter(NdaSignature.verified_at.is_(None))
    )
    if event_ids is not None:
        query = query.filter(NdaSignature.event_id.in_(event_ids))
    if event_id is not None:
        query = query.filter(NdaSignature.event_id == event_id)

    rows = query.order_by(NdaSignature.signed_at.asc(), NdaSignature.id.asc()).all()
    return [
        {
            "signature_id": sig.id,
            "signed_at": sig.signed_at,
            "language": sig.language.value if sig.language else None,
            "event_id": event.id,
            "event_name": event.name,
            "first_name": guest.first_name,
            "last_name": guest.last_name,
            "sm_username": guest.sm_username,
            "guest_type": event_guest.guest_type.value if event_guest is not None and event_guest.guest_type else None,
        }
        for sig, guest, event, event_guest in rows
    ]


def _propagate_verified_status(db: Session, signature_id: int, event_guest_id: int | None) -> bool:
    """Best-effort: mirror the verification onto the guest-list entry.

    Runs after the verification commit. A failure leaves the two views out of
    sync, so it is logged loudly instead of being raised to the caller.
    """
    if event_guest_id is None:
        logger.warning("signature %s verified but its guest-list entry is gone; event guest status not updated", signature_id)
        return False
    try:
        changed = (
            db.query(EventGuest)
            .filter(EventGuest.id == event_guest_id)
            .update({EventGuest.status: EventGuestStatus.verified}, synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("signature %s verified but event guest status update failed", signature_id)
        return False
    if not changed:
        logger.warning("signature %s verified but event guest %s no longer exists", signature_id, event_guest_id)
        return False
    return True


def verify_signature(
    db: Session,
    staff: StaffContext,
    signature_id: int,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> VerificationResult:
    signature = db.query(NdaSignature).filter(NdaSignature.id == signature_id).first()
    if signature is None:
        raise NotFound("Signature not found")
    event_id = signature.event_id
    require_event_access(db, staff, event_id)
    event_guest_id = signature.event_guest_id

    now = datetime.now(timezone.utc)
    # Single atomic conditional write; only one caller can move verified_at off NULL
    changed = (
        db.query(NdaSignature)
        .filter(NdaSignature.id == signature_id, NdaSignature.verified_at.is_(None))
        .update(
            {NdaSignature.verified_at: now, NdaSignature.verified_by: staff.user_id},
            synchronize_session=False,
        )
    )
    if changed != 1:
        db.rollback()
        logger.info("signature %s already verified; user %s lost the claim", signature_id, staff.user_id)
        raise AlreadyVerified("This signature was already verified by someone else")

    create_log(
        db,
        ACTION_NDA_VERIFIED,
        ENTITY_NDA_SIGNATURE,
        signature_id,
        actor_user_id=staff.user_id,
        ip_address=ip_address,
        user_agent=user_agent,
        meta={"event_id": event_id},
    )
    db.commit()
    logger.info("signature %s verified by user %s", signature_id, staff.user_id)

    propagated = _propagate_verified_status(db, signature_id, event_guest_id)
    return VerificationResult(
        signature_id=signature_id,
        verified_at=now,
        verified_by=staff.user_id,
        status_propagated=propagated,
    )
