"""Kiosk session protocol: issue, validate and revoke scoped bearer tokens.

A session is active until revoked_at is set (terminal) or expires_at passes (terminal,
never written). The plaintext token is returned once at issue time and never stored.
"""
from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.errors import AccessDenied, NotFound, SessionInvalid
from app.models.event import Event
from app.models.kiosk_session import KioskSession
from app.models.user import STAFF_ROLES, UserRole
from app.services.access import StaffContext, can_access_event, require_event_access
from app.services.audit_log import (
    ACTION_KIOSK_SESSION_REVOKED,
    ACTION_KIOSK_SESSION_STARTED,
    ENTITY_KIOSK_SESSION,
    create_log,
)

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32  # 256-bit


@dataclass(frozen=True)
class IssuedKioskSession:
    kiosk_token: str
    session_id: int
    event_id: int
    event_name: str
    expires_at: datetime


def hash_kiosk_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def issue_session(
    db: Session,
    staff: StaffContext,
    event_id: int,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> IssuedKioskSession:
    if staff.role not in STAFF_ROLES:
        raise AccessDenied("Only crew, organizers or admins can start a kiosk")
    event = require_event_access(db, staff, event_id)

    settings = get_settings()
    now = _utcnow()
    expires_at = now + timedelta(hours=settings.kiosk_session_hours)

    # Retry on the (astronomically unlikely) hash collision with an existing session
    for _ in range(3):
        token = secrets.token_hex(TOKEN_BYTES)
        session = KioskSession(
            event_id=event.id,
            crew_user_id=staff.user_id,
            token_hash=hash_kiosk_token(token),
            expires_at=expires_at,
        )
        db.add(session)
        try:
            db.flush()
            break
        except IntegrityError:
            db.rollback()
    else:
        raise RuntimeError("Could not allocate a unique kiosk token")

    create_log(
        db,
        ACTION_KIOSK_SESSION_STARTED,
        ENTITY_KIOSK_SESSION,
        session.id,
        actor_user_id=staff.user_id,
        ip_address=ip_address,
        user_agent=user_agent,
        meta={"event_id": event.id, "event_name": event.name, "expires_at": expires_at},
    )
    db.commit()
    logger.info("kiosk session %s started for event %s by user %s", session.id, event.id, staff.user_id)

    return IssuedKioskSession(
        kiosk_token=token,
        session_id=session.id,
        event_id=event.id,
        event_name=event.name,
        expires_at=expires_at,
    )


def validate_session(db: Session, token: str | None, event_id: int | None) -> KioskSession:
    """Resolve a presented token to its active session for this event.

    Every failure (missing, unknown, other event, expired, revoked) is the same
    SessionInvalid so callers cannot tell which check failed.
    """
    if not token or event_id is None:
        raise SessionInvalid()
    session = (
        db.query(KioskSession)
        .filter(
            KioskSession.token_hash == hash_kiosk_token(token.strip()),
            KioskSession.event_id == event_id,
            KioskSession.revoked_at.is_(None),
            KioskSession.expires_at > _utcnow(),
        )
        .first()
    )
    if session is None:
        raise SessionInvalid()
    return session


def revoke_session(
    db: Session,
    staff: StaffContext,
    session_id: int,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> KioskSession:
    """Set revoked_at once. Revoking an already revoked session is a no-op."""
    session = db.query(KioskSession).filter(KioskSession.id == session_id).first()
    if not session:
        raise NotFound("Kiosk session not found")
    is_issuer = session.crew_user_id == staff.user_id
    if not is_issuer and staff.role == UserRole.crew:
        raise AccessDenied("You do not have access to this kiosk session")
    if not is_issuer:
        event = db.query(Event).filter(Event.id == session.event_id).first()
        if event is None or not can_access_event(db, staff, event):
            raise AccessDenied("You do not have access to this kiosk session")

    changed = (
        db.query(KioskSession)
        .filter(KioskSession.id == session_id, KioskSession.revoked_at.is_(None))
        .update({KioskSession.revoked_at: _utcnow()}, synchronize_session=False)
    )
    if changed:
        create_log(
            db,
            ACTION_KIOSK_SESSION_REVOKED,
            ENTITY_KIOSK_SESSION,
            session.id,
            actor_user_id=staff.user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            meta={"event_id": session.event_id},
        )
        logger.info("kiosk session %s revoked by user %s", session.id, staff.user_id)
    db.commit()
    db.refresh(session)
    return session
