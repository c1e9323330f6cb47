from app.schemas.auth import LoginRequest, StaffResponse, Token
from app.schemas.kiosk import (
    KioskEventResponse,
    KioskSessionCreate,
    KioskSessionResponse,
    LookupPhoneRequest,
    LookupRequest,
    PrefillResponse,
    UsernameCheckResponse,
    VerifyUsernameRequest,
)
from app.schemas.signature import (
    PendingSignatureItem,
    SignatureSubmitRequest,
    SignatureSubmitResponse,
    VerifyResponse,
)
