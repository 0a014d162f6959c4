"""
Root and health check endpoints.
"""
import logging

from fastapi import APIRouter

from ..config.database import get_database_manager
from ..config.settings import get_settings
from ..schemas.common import HealthCheckResponse, RootResponse
from ..utils.serializers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/", response_model=RootResponse)
async def root():
    """Root endpoint - Always accessible"""
    return RootResponse(
        message="Customer Backend is running",
        version=get_settings().app_version,
        docs="/docs",
        health="/health",
    )


@router.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Health check endpoint - Always accessible"""
    connected = await get_database_manager().ping()
    return HealthCheckResponse(
        message="Customer API is running",
        database="connected" if connected else "disconnected",
        timestamp=utcnow().isoformat(),
        version=get_settings().app_version,
    )
