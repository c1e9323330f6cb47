"""Append-only audit log service. Never update or delete - immutable audit trail."""
from __future__ import annotations

import enum
import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

ACTION_LOGIN = "login"
ACTION_KIOSK_SESSION_STARTED = "kiosk_session_started"
ACTION_KIOSK_SESSION_REVOKED = "kiosk_session_revoked"
ACTION_NDA_SIGNED = "nda_signed"
ACTION_NDA_VERIFIED = "nda_verified"
ACTION_NDA_DELETED = "nda_deleted"
ACTION_NDA_PDF_GENERATED = "nda_pdf_generated"
ACTION_GUEST_PHONE_CHANGED = "guest_phone_changed"

ENTITY_USER = "user"
ENTITY_KIOSK_SESSION = "kiosk_session"
ENTITY_NDA_SIGNATURE = "nda_signature"
ENTITY_GUEST = "guest"

# Column limits (match model)
_ACTION_LEN = 64
_ENTITY_TYPE_LEN = 32
_ENTITY_ID_LEN = 64
_IP_LEN = 64
_USER_AGENT_LEN = 500


def _sanitize_meta_value(v: Any) -> Any:
    """Convert to JSON-serializable value so meta never raises on INSERT."""
    if v is None:
        return None
    if isinstance(v, (str, int, float, bool)):
        return v
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if isinstance(v, enum.Enum):
        return getattr(v, "value", str(v))
    if isinstance(v, dict):
        return {str(k): _sanitize_meta_value(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_sanitize_meta_value(x) for x in v]
    return str(v)


def _sanitize_meta(meta: dict[str, Any] | None) -> dict[str, Any] | None:
    if meta is None:
        return None
    return {str(k): _sanitize_meta_value(v) for k, v in meta.items()}


def create_log(
    db: Session,
    action: str,
    entity_type: str,
    entity_id: Any = None,
    *,
    actor_user_id: int | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    meta: dict[str, Any] | None = None,
) -> AuditLog:
    """Append one immutable audit record. Commit remains with the caller so the
    entry lands in the same transaction as the change it describes."""
    act = (action or "")[:_ACTION_LEN].strip() or "unknown"
    ent = (entity_type or "")[:_ENTITY_TYPE_LEN].strip() or "unknown"
    ent_id = str(entity_id)[:_ENTITY_ID_LEN] if entity_id is not None else None
    ip = (ip_address[:_IP_LEN] if ip_address else None) or None
    ua = (str(user_agent)[:_USER_AGENT_LEN] if user_agent else None) or None

    entry = AuditLog(
        actor_user_id=actor_user_id,
        action=act,
        entity_type=ent,
        entity_id=ent_id,
        ip_address=ip,
        user_agent=ua,
        meta=_sanitize_meta(meta),
    )
    db.add(entry)
    db.flush()  # get entry.id if caller needs it
    logger.debug("audit %s %s:%s actor=%s", act, ent, ent_id, actor_user_id)
    return entry
