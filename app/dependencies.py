"""Shared dependencies: DB session, current staff user, kiosk token, client info."""
from fastapi import Depends, Header, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import STAFF_ROLES, User
from app.services.access import StaffContext
from app.services.auth import decode_token_with_error

security = HTTPBearer(auto_error=False)

KIOSK_TOKEN_HEADER = "X-Kiosk-Token"


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    token_str = (credentials.credentials or "").strip()
    payload, _ = decode_token_with_error(token_str)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_staff(current_user: User = Depends(get_current_user)) -> StaffContext:
    """Resolve the caller to the explicit (user_id, role) context services take."""
    if current_user.role not in STAFF_ROLES:
        raise HTTPException(status_code=403, detail="Staff role required")
    return StaffContext(user_id=current_user.id, role=current_user.role)


def get_kiosk_token(x_kiosk_token: str | None = Header(default=None, alias=KIOSK_TOKEN_HEADER)) -> str | None:
    """Raw kiosk token; validation happens in the service against the requested event."""
    return (x_kiosk_token or "").strip() or None


def client_info(request: Request) -> tuple[str | None, str | None]:
    ip = request.client.host if request.client else None
    ua = (request.headers.get("user-agent") or "").strip() or None
    return ip, ua
