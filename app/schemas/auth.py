"""Staff auth schemas."""
from pydantic import BaseModel

from app.models.user import UserRole


class LoginRequest(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class StaffResponse(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    role: UserRole

    class Config:
        from_attributes = True
