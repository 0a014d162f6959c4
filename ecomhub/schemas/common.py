"""
Common schemas used across the API.
"""
import html
import math
import re
from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, Field

from ..utils.serializers import utcnow

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?\d{10,15}$")
OTP_RE = re.compile(r"^\d{6}$")


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim and HTML-escape free text coming from customers."""
    if value is None:
        return None
    return html.escape(value.strip(), quote=True)


def check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_RE.match(value):
        raise ValueError("Please provide a valid email address")
    return value


def check_phone(value: str) -> str:
    value = value.strip().replace(" ", "")
    if not PHONE_RE.match(value):
        raise ValueError("Please provide a valid phone number")
    return value


def check_otp(value: str) -> str:
    value = value.strip()
    if not OTP_RE.match(value):
        raise ValueError("OTP must be a 6-digit number")
    return value


Email = Annotated[str, AfterValidator(check_email)]
Phone = Annotated[str, AfterValidator(check_phone)]
Otp = Annotated[str, AfterValidator(check_otp)]


class HealthCheckResponse(BaseModel):
    """Response schema for health check endpoint."""
    success: bool = Field(True, description="Always true while the process serves requests")
    message: str = Field(..., description="Human-readable status")
    database: str = Field(..., description="Database connection status")
    timestamp: str = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")


class RootResponse(BaseModel):
    """Response schema for root endpoint."""
    success: bool = Field(True)
    message: str = Field(..., description="Welcome message")
    version: str = Field(..., description="API version")
    docs: str = Field(..., description="Documentation URL")
    health: str = Field(..., description="Health check URL")


class SuccessResponse(BaseModel):
    """Generic success response schema."""
    success: bool = Field(True, description="Operation success status")
    message: str = Field(..., description="Success message")
    data: Optional[Any] = Field(None, description="Response data")
    timestamp: datetime = Field(default_factory=utcnow, description="Response timestamp")


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""
    current_page: int = Field(..., description="Current page number")
    total_pages: int = Field(..., description="Total number of pages")
    total_items: int = Field(..., description="Total number of items")
    limit: int = Field(..., description="Items per page")
    has_next_page: bool = Field(..., description="Whether there are more pages")
    has_prev_page: bool = Field(..., description="Whether earlier pages exist")


def ok(message: str, data: Any = None) -> SuccessResponse:
    return SuccessResponse(message=message, data=data)


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit) if limit else 0
    return PaginationMeta(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        limit=limit,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
