"""Domain errors raised by services and rendered by the API exception handler.

Every error has an HTTP status, a stable machine ``code`` the caller can branch on,
and a human ``detail``. Extra keyword arguments are merged into the JSON body.
"""
from __future__ import annotations

from typing import Any

KIOSK_SESSION_INVALID = "Invalid or expired kiosk session"


class ServiceError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, detail: str, *, status_code: int | None = None, **extra: Any):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        return {"detail": self.detail, "code": self.code, **self.extra}


class ValidationFailed(ServiceError):
    status_code = 400
    code = "validation_failed"


class SessionInvalid(ServiceError):
    status_code = 401
    code = "kiosk_session_invalid"

    def __init__(self) -> None:
        super().__init__(KIOSK_SESSION_INVALID)


class AccessDenied(ServiceError):
    status_code = 403
    code = "access_denied"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"


class NotOnGuestlist(ServiceError):
    status_code = 404
    code = "not_on_guestlist"


class PhoneAlreadyUsed(ServiceError):
    status_code = 400
    code = "phone_already_used"


class PhoneCollision(ServiceError):
    status_code = 409
    code = "phone_collision"


class DuplicateSignature(ServiceError):
    status_code = 409
    code = "duplicate_signature"


class AlreadyVerified(ServiceError):
    status_code = 409
    code = "already_verified"


class ConcurrentUpdate(ServiceError):
    """Lost a race on shared guest state; safe to retry."""
    status_code = 409
    code = "concurrent_update"

