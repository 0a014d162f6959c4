"""
Admin API schemas: staff authentication, users, roles and role assignments.
"""
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .common import Email, check_phone

USER_STATUSES = ['active', 'inactive']


class AdminLoginRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=1)
    remember_me: bool = False


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Email
    phone: Optional[str] = None
    password: str = Field(..., min_length=6, max_length=128)
    status: str = Field('active')
    role_id: Optional[str] = Field(None, description="Role assigned right after creation")

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return check_phone(v) if v else None

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v.lower() not in USER_STATUSES:
            raise ValueError(f'Invalid status. Must be one of: {USER_STATUSES}')
        return v.lower()


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[Email] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    status: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return check_phone(v) if v else v

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v is not None and v.lower() not in USER_STATUSES:
            raise ValueError(f'Invalid status. Must be one of: {USER_STATUSES}')
        return v.lower() if v else v


class RoleRequest(BaseModel):
    role_name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator('role_name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Role name is required')
        return v


class AssignRoleRequest(BaseModel):
    user_id: str
    role_id: str


class UpdateRoleAssignmentRequest(BaseModel):
    user_id: str
    old_role_id: str
    new_role_id: str
