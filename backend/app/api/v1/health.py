"""
Health check
Progetto: Invoice Manager (Gestionale Fatture)

Endpoint pubblico, montato sia su /health sia su /api/health.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from app.core.config import settings
from app.core.database import ping_db

router = APIRouter(tags=["System"])


@router.get(
    "/health",
    name="Health Check",
    summary="Controlla lo stato dell'applicazione",
)
async def health_check() -> dict[str, str]:
    """
    Endpoint per il controllo dello stato di salute.

    Returns:
        dict: Stato dell'applicazione e raggiungibilità del database
    """
    database_ok = await ping_db()
    return {
        "status": "OK" if database_ok else "DEGRADED",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
        "database": "connected" if database_ok else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


__all__ = ["router"]
