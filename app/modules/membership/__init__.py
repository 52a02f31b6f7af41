# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/__init__.py

Módulo de membresías: checkout, webhooks de Stripe, reconciliación,
ledger de facturación y verificación de pagos.

Exporta un router unificado que incluye:
- /api/membership/checkout
- /api/membership/verify
- /api/membership/status
- /api/membership/webhooks/stripe

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from fastapi import APIRouter

from .routes import router as membership_router
from .webhook_routes import router as membership_webhook_router

router = APIRouter(tags=["membership"])
router.include_router(membership_router)
router.include_router(membership_webhook_router)

__all__ = ["router"]
