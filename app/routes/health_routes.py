# -*- coding: utf-8 -*-
"""
backend/app/routes/health_routes.py

Endpoints de health check del backend de membresías.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from fastapi import APIRouter

from app.shared.config import get_settings
from app.shared.database.database import check_database_health
from app.modules.membership.utils.datetime_helpers import to_iso8601, utcnow

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check del backend",
    description="Estado básico del backend, con verificación simple de conectividad a la base de datos.",
)
async def health_check() -> dict:
    settings = get_settings()
    db_ok = await check_database_health(timeout_s=2.0)

    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": to_iso8601(utcnow()),
        "environment": settings.python_env,
        "database": {
            "reachable": db_ok,
        },
        "service": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
    }


@router.get("/api/health/live", summary="Liveness")
async def health_live() -> dict:
    return {"status": "alive"}

# Fin del archivo backend/app/routes/health_routes.py
