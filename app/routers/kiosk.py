"""Kiosk surface: staff start/revoke sessions; the device bootstraps, looks up and submits."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import client_info, get_kiosk_token, require_staff
from app.errors import NotFound
from app.models.event import Event
from app.schemas.kiosk import (
    KioskEventResponse,
    KioskSessionCreate,
    KioskSessionResponse,
    LookupRequest,
    PrefillResponse,
    UsernameCheckResponse,
    VerifyUsernameRequest,
)
from app.schemas.signature import SignatureSubmitRequest, SignatureSubmitResponse
from app.services.access import StaffContext
from app.services.app_config import get_app_config
from app.services.guest_lookup import lookup_phone, verify_username
from app.services.kiosk_sessions import issue_session, revoke_session, validate_session
from app.services.signatures import submit_signature

router = APIRouter(prefix="/kiosk", tags=["kiosk"])


@router.post("/sessions", response_model=KioskSessionResponse)
def start_kiosk_session(
    request: Request,
    data: KioskSessionCreate,
    db: Session = Depends(get_db),
    staff: StaffContext = Depends(require_staff),
):
    ip, ua = client_info(request)
    issued = issue_session(db, staff, data.event_id, ip_address=ip, user_agent=ua)
    return KioskSessionResponse(
        kiosk_token=issued.kiosk_token,
        session_id=issued.session_id,
        event_id=issued.event_id,
        event_name=issued.event_name,
        expires_at=issued.expires_at,
    )


@router.post("/sessions/{session_id}/revoke", response_model=KioskSessionResponse)
def revoke_kiosk_session(
    session_id: int,
    request: Request,
    db: Session = Depends(get_db),
    staff: StaffContext = Depends(require_staff),
):
    ip, ua = client_info(request)
    session = revoke_session(db, staff, session_id, ip_address=ip, user_agent=ua)
    return KioskSessionResponse(
        session_id=session.id,
        event_id=session.event_id,
        expires_at=session.expires_at,
        revoked_at=session.revoked_at,
    )


@router.get("/events/{event_id}", response_model=KioskEventResponse)
def kiosk_event(
    event_id: int,
    db: Session = Depends(get_db),
    kiosk_token: str | None = Depends(get_kiosk_token),
):
    """Everything the device needs to render the NDA flow for its event."""
    validate_session(db, kiosk_token, event_id)
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFound("Event not found")
    config = get_app_config(db)
    db.commit()
    return KioskEventResponse(
        event_id=event.id,
        event_name=event.name,
        nda_text_no=event.nda_text_no or "",
        nda_text_en=event.nda_text_en or "",
        privacy_text_no=config.privacy_text_no,
        privacy_text_en=config.privacy_text_en,
        privacy_version=config.privacy_version,
        auto_lock_enabled=config.auto_lock_enabled,
        auto_lock_minutes=config.auto_lock_minutes,
    )


@router.post("/lookup", response_model=UsernameCheckResponse | PrefillResponse)
def kiosk_lookup(
    data: LookupRequest,
    db: Session = Depends(get_db),
    kiosk_token: str | None = Depends(get_kiosk_token),
):
    req = data.root
    validate_session(db, kiosk_token, req.event_id)
    if isinstance(req, VerifyUsernameRequest):
        check = verify_username(db, req.event_id, req.sm_username, req.language)
        return UsernameCheckResponse(on_guestlist=check.on_guestlist, sm_username=check.sm_username)
    prefill = lookup_phone(db, req.event_id, req.sm_username, req.phone, req.language)
    return PrefillResponse(
        sm_username=prefill.sm_username,
        phone=prefill.phone,
        first_name=prefill.first_name,
        last_name=prefill.last_name,
        email=prefill.email,
        location=prefill.location,
        guest_exists=prefill.guest_exists,
        prefill_source=prefill.prefill_source,
    )


@router.post("/signatures", response_model=SignatureSubmitResponse)
def kiosk_submit_signature(
    request: Request,
    data: SignatureSubmitRequest,
    db: Session = Depends(get_db),
    kiosk_token: str | None = Depends(get_kiosk_token),
):
    ip, ua = client_info(request)
    result = submit_signature(db, kiosk_token, data, ip_address=ip, user_agent=ua)
    return SignatureSubmitResponse(
        signature_id=result.signature_id,
        guest_id=result.guest_id,
        status=result.event_guest_status,
        phone_changed=result.phone_changed,
    )
