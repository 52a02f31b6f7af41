# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/webhooks/stripe_handler.py

Handler de webhooks Stripe para membresías.

Procesa eventos:
- checkout.session.completed: otorga/renueva la membresía
- invoice.paid: renovación mensual de la suscripción

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.config.settings_payments import get_payments_settings
from ..errors import MembershipConfigError
from .events import classify_event

if TYPE_CHECKING:
    from ..services.reconciler import MembershipReconciler

logger = logging.getLogger(__name__)


def verify_stripe_webhook_signature(
    payload: bytes,
    sig_header: str,
    webhook_secret: Optional[str] = None,
    tolerance: Optional[int] = None,
) -> stripe.Event:
    """
    Verifica la firma de un webhook de Stripe.

    Args:
        payload: Body raw del request
        sig_header: Header Stripe-Signature
        webhook_secret: Secret del webhook (si no se provee, usa settings)
        tolerance: Ventana de tolerancia del timestamp en segundos

    Returns:
        stripe.Event verificado

    Raises:
        stripe.SignatureVerificationError: Si la firma es inválida
        ValueError: Si el payload no es JSON válido
        MembershipConfigError: Si no hay webhook secret configurado
    """
    settings = get_payments_settings()
    secret = webhook_secret or settings.stripe_webhook_secret
    if not secret:
        raise MembershipConfigError("STRIPE_WEBHOOK_SECRET not configured")

    return stripe.Webhook.construct_event(
        payload,
        sig_header,
        secret,
        tolerance=tolerance or settings.stripe_webhook_tolerance_seconds,
    )


async def handle_membership_webhook(
    session: AsyncSession,
    event: Mapping[str, Any],
    reconciler: MembershipReconciler,
) -> Dict[str, Any]:
    """
    Clasifica el evento y lo aplica con el reconciliador.

    Returns:
        Dict con el resultado (processed | already_processed | ignored | dropped)

    Raises:
        MembershipStorageError: si el upsert falla (el endpoint responde 5xx)
    """
    event_type = event.get("type")
    event_id = event.get("id")
    classification = classify_event(event)

    if classification.status == "ignored":
        logger.info(
            "Membership webhook ignored: type=%s id=%s reason=%s",
            event_type, event_id, classification.reason,
        )
        return {"status": "ignored", "event_type": event_type, "reason": classification.reason}

    if classification.status == "dropped":
        logger.warning(
            "Membership webhook dropped: type=%s id=%s reason=%s",
            event_type, event_id, classification.reason,
        )
        return {"status": "dropped", "reason": classification.reason}

    payment = classification.event
    logger.info(
        "Processing %s: id=%s payment_ref=%s email=%s scope=%r",
        event_type, event_id, payment.payment_ref, payment.email, payment.scope_key,
    )
    result = await reconciler.apply_payment_event(session, payment)

    response: Dict[str, Any] = {
        "status": "processed" if result.applied else "already_processed",
        "event_type": event_type,
        "payment_ref": result.payment_ref,
    }
    if result.expires_at is not None:
        response["expires_at"] = result.expires_at.isoformat()
    return response


__all__ = [
    "verify_stripe_webhook_signature",
    "handle_membership_webhook",
]
