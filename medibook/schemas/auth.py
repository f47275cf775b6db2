from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from ..core.security import UserRole

def _check_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not any(ch.isdigit() for ch in value):
        raise ValueError("Password must contain at least one digit")
    if not any(ch.isalpha() for ch in value):
        raise ValueError("Password must contain at least one letter")
    return value

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserRegister(BaseModel):
    email: EmailStr
    password: str
    role: UserRole = UserRole.PATIENT
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone_number: Optional[str] = None

    # Patient profile
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None

    # Doctor profile
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, ge=0)
    qualification: Optional[str] = None
    bio: Optional[str] = None
    consultation_fee: Optional[Decimal] = Field(None, ge=0)
    office_address: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return _check_password_strength(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v == UserRole.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return v

    @model_validator(mode="after")
    def validate_doctor_fields(self):
        if self.role == UserRole.DOCTOR and not (self.specialization and self.license_number):
            raise ValueError("Doctors must provide specialization and license_number")
        return self

class UserResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    full_name: str
    is_active: bool
    is_verified: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse

class RefreshTokenRequest(BaseModel):
    refresh_token: str

class PasswordReset(BaseModel):
    email: EmailStr

class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v):
        return _check_password_strength(v)

class ChangePassword(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v):
        return _check_password_strength(v)

class OAuthCallback(BaseModel):
    code: str
    state: str

class OAuthUserInfo(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    oauth_id: str
    provider: str
