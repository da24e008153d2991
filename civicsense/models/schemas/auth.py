"""
Pydantic schemas for sign-in, registration and the access gate.
"""
from typing import Optional
from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator
from ..db.enums import UserRole, Destination

class Session(BaseModel):
    """Authenticated session as returned by the auth endpoint (or the local stub)."""
    role: UserRole
    email: str
    name: Optional[str] = None
    token: Optional[str] = None

    model_config = ConfigDict(frozen=True)

class SignInRequest(BaseModel):
    # Any non-empty identifier; the authority (when configured) decides validity
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1)
    # Role mode pre-selected by the prompt; used by the local stub only
    role: UserRole = UserRole.USER

    model_config = ConfigDict(json_schema_extra={
        "example": {"email": "you@example.com", "password": "secret", "role": "user"}
    })

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v

class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=1)
    role: UserRole = UserRole.USER

class SignInPrompt(BaseModel):
    open: bool = False
    mode: UserRole = UserRole.USER

class GateRead(BaseModel):
    authenticated: bool
    role: Optional[UserRole] = None
    email: Optional[str] = None
    name: Optional[str] = None
    active_destination: Destination
    prompt: SignInPrompt
