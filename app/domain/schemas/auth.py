"""Pydantic schemas for User, registration and Auth."""

from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from app.domain.models.enums import Role


class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = None
    role: Role = Role.PATRON

    @field_validator("role")
    @classmethod
    def check_role(cls, value: Role) -> Role:
        if value == Role.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return value


class RegisterResponse(BaseModel):
    message: str
    user_id: int
    otp_sent: bool


class ResendOtpRequest(BaseModel):
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    user_id: int
    code: str = Field(pattern=r"^\d{6}$")


class MessageResponse(BaseModel):
    message: str


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Role
    library_card_number: str
    is_verified: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SessionUser(BaseModel):
    """User fields returned to the browser after login."""
    id: int
    name: str
    email: str
    role: Role
    library_card_number: str

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    email: str
    password: str
    role: Optional[Role] = None


class LoginResponse(BaseModel):
    message: str = "Logged in"
    user: SessionUser


class AuthPayload(BaseModel):
    """Identity carried by a verified auth token."""
    id: int
    email: str
    role: Role


class MeResponse(BaseModel):
    user: AuthPayload


class UserList(BaseModel):
    users: list[UserRead]
