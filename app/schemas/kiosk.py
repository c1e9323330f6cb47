"""Kiosk session, bootstrap and two-phase lookup schemas."""
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, RootModel


class KioskSessionCreate(BaseModel):
    event_id: int


class KioskSessionResponse(BaseModel):
    kiosk_token: str | None = None  # only present in the issue response
    session_id: int
    event_id: int
    event_name: str | None = None
    expires_at: datetime
    revoked_at: datetime | None = None


class KioskEventResponse(BaseModel):
    event_id: int
    event_name: str
    nda_text_no: str
    nda_text_en: str
    privacy_text_no: str
    privacy_text_en: str
    privacy_version: int
    auto_lock_enabled: bool
    auto_lock_minutes: int


class VerifyUsernameRequest(BaseModel):
    step: Literal["verify_username"]
    event_id: int
    sm_username: str
    language: Literal["no", "en"] = "en"


class LookupPhoneRequest(BaseModel):
    step: Literal["lookup_phone"]
    event_id: int
    sm_username: str
    phone: str
    language: Literal["no", "en"] = "en"


class LookupRequest(RootModel):
    """Tagged on ``step``; the phase is never inferred from which fields are present."""
    root: Annotated[Union[VerifyUsernameRequest, LookupPhoneRequest], Field(discriminator="step")]


class UsernameCheckResponse(BaseModel):
    on_guestlist: bool
    sm_username: str


class PrefillResponse(BaseModel):
    sm_username: str
    phone: str
    first_name: str
    last_name: str
    email: str
    location: str
    guest_exists: bool
    prefill_source: Literal["previous_registration", "guestlist", "none"]
