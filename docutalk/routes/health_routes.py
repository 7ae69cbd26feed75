"""Health check routes for service monitoring and load balancing."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from docutalk.version import VERSION

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/heartbeat")
async def heartbeat() -> Dict[str, str]:
    """Lightweight heartbeat endpoint for uptime monitoring."""
    return {"status": "ok"}


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint for service monitoring.

    Returns:
        Dictionary containing:
        - status: Service health status ("healthy")
        - service: Service name
        - version: Service version
        - timestamp: Current UTC timestamp in ISO-8601 format
    """
    return {
        "status": "healthy",
        "service": "docutalk-backend",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
