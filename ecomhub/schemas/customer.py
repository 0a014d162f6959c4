"""
Customer account schemas: registration, OTP, login, tokens and profile.
"""
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .common import Email, Otp, Phone, check_email, check_phone, clean_text


class RegistrationRequest(BaseModel):
    """Used both by direct registration and by the OTP registration flow."""
    name: str = Field(..., description="Customer name (2-50 characters)")
    email: Email = Field(..., description="Email address")
    phone: Phone = Field(..., description="Mobile number, optional leading +")
    password: str = Field(..., min_length=6, max_length=128, description="Plain password")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = clean_text(v)
        if len(v) < 2:
            raise ValueError('Name must be at least 2 characters long')
        if len(v) > 50:
            raise ValueError('Name must be less than 50 characters')
        return v


class VerifyOtpRequest(BaseModel):
    phone: Phone
    otp: Otp


class PhoneRequest(BaseModel):
    phone: Phone


class ResetOtpRequest(BaseModel):
    phone: Optional[str] = None
    email: Optional[str] = None

    @model_validator(mode='after')
    def require_identifier(self):
        if not self.phone and not self.email:
            raise ValueError('Phone or email is required')
        if self.phone:
            self.phone = check_phone(self.phone)
        if self.email:
            self.email = check_email(self.email)
        return self


class ResetPasswordRequest(BaseModel):
    phone: Phone
    otp: Optional[Otp] = Field(None, description="Required unless the OTP was already verified")
    new_password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=1, description="Password is required")


class LogoutRequest(BaseModel):
    access_token: Optional[str] = Field(None, description="Defaults to the bearer token")
    refresh_token: Optional[str] = None


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    name: str
    email: Email

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = clean_text(v)
        if len(v) < 2:
            raise ValueError('Name must be at least 2 characters long')
        return v
