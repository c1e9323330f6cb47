"""Signature submission and attestation schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from app.models.event_guest import EventGuestStatus


class SignatureSubmitRequest(BaseModel):
    event_id: int
    sm_username: str
    phone: str
    first_name: str
    last_name: str
    email: str | None = None
    location: str | None = None
    language: Literal["no", "en"] = "en"
    read_confirmed: bool = False
    privacy_accepted: bool = False
    signature_png_base64: str


class SignatureSubmitResponse(BaseModel):
    signature_id: int
    guest_id: int
    status: EventGuestStatus
    phone_changed: bool


class PendingSignatureItem(BaseModel):
    signature_id: int
    signed_at: datetime | None = None
    language: str | None = None
    event_id: int
    event_name: str
    first_name: str
    last_name: str
    sm_username: str | None = None
    guest_type: str | None = None


class VerifyResponse(BaseModel):
    signature_id: int
    verified_at: datetime
    verified_by: int
    status_propagated: bool
