"""Staff authentication: username/password login and identity."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import client_info, get_current_user
from app.models.user import User
from app.schemas.auth import LoginRequest, StaffResponse, Token
from app.services.audit_log import ACTION_LOGIN, ENTITY_USER, create_log
from app.services.auth import create_access_token, verify_password
from app.services.validation import normalize_username

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/login", response_model=Token)
def login(request: Request, data: LoginRequest, db: Session = Depends(get_db)):
    username = normalize_username(data.username)
    user = db.query(User).filter(User.username == username).first() if username else None
    if not user or not verify_password(data.password or "", user.hashed_password):
        logger.info("staff login failed")
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    ip, ua = client_info(request)
    create_log(
        db,
        ACTION_LOGIN,
        ENTITY_USER,
        user.id,
        actor_user_id=user.id,
        ip_address=ip,
        user_agent=ua,
        meta={"role": user.role.value},
    )
    db.commit()
    return Token(access_token=create_access_token(user.id, user.username, user.role))


@router.get("/me", response_model=StaffResponse)
def me(current_user: User = Depends(get_current_user)):
    return StaffResponse.model_validate(current_user)
