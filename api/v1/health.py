"""Health check endpoint."""

from datetime import datetime, UTC

from fastapi import APIRouter, Depends

from api.deps import get_settings
from config import Settings

router = APIRouter()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint.

    Returns:
        dict: Status, environment and which integrations are configured
    """
    return {
        "status": "ok",
        "env": settings.ENV,
        "auth_configured": bool(settings.JWT_SECRET),
        "payments_configured": bool(settings.STRIPE_SECRET_KEY),
        "timestamp": datetime.now(UTC).isoformat(),
    }
