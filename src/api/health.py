"""Health check endpoints.

/health/live - Liveness probe: is the process up and is a router configured?

These are public endpoints - no auth required.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter

from src.api import model_routing

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict:
    """Liveness probe - always returns 200 if the process is running."""
    try:
        model_count = len(model_routing.get_model_router().catalog)
    except RuntimeError:
        model_count = None
    return {
        "status": "ok",
        "router_configured": model_count is not None,
        "model_count": model_count,
        "timestamp": datetime.now(UTC).isoformat(),
    }
