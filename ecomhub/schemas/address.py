"""
Customer address schemas.
"""
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .common import clean_text

ADDRESS_TYPES = ['home', 'work', 'other']


class AddressRequest(BaseModel):
    """Create/replace payload; the same fields are required on update."""
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., description="10-digit phone number")
    address_line_1: str = Field(..., min_length=1, max_length=255)
    address_line_2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., description="6-digit postal code")
    landmark: Optional[str] = Field(None, max_length=255)
    address_type: str = Field('home')
    is_default: bool = Field(False)

    @field_validator('name', 'address_line_1', 'address_line_2', 'city', 'state', 'landmark')
    @classmethod
    def clean(cls, v):
        return clean_text(v)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        if not re.fullmatch(r"\d{10}", v.strip()):
            raise ValueError('Invalid phone number format')
        return v.strip()

    @field_validator('pincode')
    @classmethod
    def validate_pincode(cls, v):
        if not re.fullmatch(r"\d{6}", v.strip()):
            raise ValueError('Invalid pincode format')
        return v.strip()

    @field_validator('address_type')
    @classmethod
    def validate_address_type(cls, v):
        if v.lower() not in ADDRESS_TYPES:
            raise ValueError(f'Invalid address type. Must be one of: {ADDRESS_TYPES}')
        return v.lower()
