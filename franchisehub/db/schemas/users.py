import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from franchisehub.utils.roles import RoleEnum


class UserBase(BaseModel):
    email: str
    role: RoleEnum = RoleEnum.manager
    tenant_id: Optional[uuid.UUID] = None
    restaurant_id: Optional[uuid.UUID] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str):
        v = (v or "").strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class UserCreate(UserBase):
    password: str = Field(min_length=6)


class User(BaseModel):
    id: uuid.UUID
    email: str
    role: str
    tenant_id: Optional[uuid.UUID] = None
    restaurant_id: Optional[uuid.UUID] = None
    is_active: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class UserActiveUpdate(BaseModel):
    is_active: bool


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SignupWithInvite(BaseModel):
    token: str
    password: str = Field(min_length=6)
    restaurant_name: Optional[str] = None
    restaurant_city: Optional[str] = None


class SignupResponse(BaseModel):
    user: User
    access_token: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    email: str
    code: str
    new_password: str = Field(min_length=6)


class MessageResponse(BaseModel):
    message: str
