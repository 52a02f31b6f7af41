# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/webhook_routes.py

Rutas de webhooks para membresías.

Endpoint:
- POST /api/membership/webhooks/stripe

Respuestas:
- 400: firma ausente/inválida o payload ilegible (sin procesamiento)
- 500: webhook secret no configurado, o fallo al persistir (Stripe reintenta)
- 200: processed | already_processed | ignored | dropped

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.database import get_async_session
from app.shared.config.settings_payments import get_payments_settings
from .dependencies import get_reconciler
from .errors import MembershipConfigError, MembershipStorageError
from .services.reconciler import MembershipReconciler
from .webhooks.stripe_handler import (
    handle_membership_webhook,
    verify_stripe_webhook_signature,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/membership/webhooks",
    tags=["membership:webhooks"],
)


@router.post(
    "/stripe",
    status_code=status.HTTP_200_OK,
)
async def stripe_membership_webhook(
    request: Request,
    session: AsyncSession = Depends(get_async_session),
    reconciler: MembershipReconciler = Depends(get_reconciler),
) -> Dict[str, Any]:
    """
    Webhook de Stripe para membresías.

    Procesa eventos:
    - checkout.session.completed
    - invoice.paid

    Requiere header Stripe-Signature para validación.
    """
    settings = get_payments_settings()

    raw_body = await request.body()
    sig_header = request.headers.get("Stripe-Signature")

    if settings.allow_insecure_webhooks:
        logger.warning("INSECURE: Skipping webhook signature verification")
    else:
        if not sig_header:
            logger.warning("Webhook received without Stripe-Signature header")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing Stripe-Signature header",
            )
        try:
            verify_stripe_webhook_signature(raw_body, sig_header)
        except MembershipConfigError as e:
            logger.error("Webhook configuration error: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Webhook not configured",
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", e)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid signature",
            )
        except ValueError as e:
            logger.warning("Invalid webhook payload: %s", e)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid payload",
            )

    # Firma verificada: se trabaja sobre el JSON plano del evento
    try:
        event = json.loads(raw_body)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload",
        )
    if not isinstance(event, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload",
        )

    logger.info(
        "Membership webhook received: type=%s id=%s",
        event.get("type"), event.get("id"),
    )

    try:
        return await handle_membership_webhook(session, event, reconciler)
    except MembershipStorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Webhook processing error: {e}",
        )


__all__ = ["router"]
