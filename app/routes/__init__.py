# -*- coding: utf-8 -*-
"""
backend/app/routes/__init__.py

Ensamblador principal de ruteadores.

Responsabilidades:
- Incluir el router de health (/health, /api/health/live).
- Montar el módulo de membresías bajo /api.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from fastapi import APIRouter

from app.modules.membership import router as membership_router
from .health_routes import router as health_router

router = APIRouter()

# Health check sin prefijo adicional
router.include_router(health_router)

api = APIRouter(prefix="/api")
api.include_router(membership_router)
router.include_router(api)

__all__ = ["router"]

# Fin del archivo backend/app/routes/__init__.py
