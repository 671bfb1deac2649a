from pydantic import BaseModel, Field
from app.models.role import Role
from app.schemas.common import EMAIL_PATTERN, RequestModel, ResponseModel


class RegisterRequest(RequestModel):
    """Sign-up creates a new tenant whose root is an administrator"""

    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6, max_length=64)


class LoginRequest(RequestModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=64)


class ProfileUpdate(RequestModel):
    name: str | None = Field(None, min_length=2, max_length=255)
    phone: str | None = Field(None, max_length=50)
    position: str | None = Field(None, max_length=100)


class SessionUser(ResponseModel):
    id: int
    name: str | None
    email: str
    role: Role
    parent_admin_id: int | None
    phone: str | None = None
    position: str | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: SessionUser


class SessionResponse(BaseModel):
    """Current session; user is null when not logged in"""

    authenticated: bool
    user: SessionUser | None = None
    tenant_id: int | None = None
    home: str | None = None
