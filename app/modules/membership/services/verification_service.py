# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/services/verification_service.py

Verificación de una sesión de checkout al volver del redirect de Stripe.

- payment_ref ya registrado          → success
- sesión complete y pagada           → reconcilia (misma clave que el webhook) → success
- sesión open / no pagada            → pending
- sesión expired o sin email         → error
- Stripe no responde                 → pending (el cliente reintenta)

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import VerificationStatus
from ..errors import CheckoutProviderError
from ..providers.stripe_provider import StripeCheckoutProvider
from ..repository import MembershipRepository, PaymentEventRepository
from ..utils.datetime_helpers import ensure_utc
from ..webhooks.events import FOREIGN_SOURCE_REASON, classify_checkout_session
from .reconciler import MembershipReconciler

logger = logging.getLogger(__name__)


@dataclass
class VerificationOutcome:
    status: VerificationStatus
    detail: Optional[str] = None
    expires_at: Optional[datetime] = None
    already_processed: bool = False

    def to_response(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "detail": self.detail,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "already_processed": self.already_processed,
        }


def _as_mapping(stripe_object: Any) -> Mapping[str, Any]:
    if isinstance(stripe_object, Mapping):
        return stripe_object
    to_dict = getattr(stripe_object, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return {}


class MembershipVerificationService:
    def __init__(
        self,
        *,
        provider: StripeCheckoutProvider,
        reconciler: MembershipReconciler,
        payment_events: Optional[PaymentEventRepository] = None,
        memberships: Optional[MembershipRepository] = None,
    ):
        self._provider = provider
        self._reconciler = reconciler
        self._payment_events = payment_events or PaymentEventRepository()
        self._memberships = memberships or MembershipRepository()

    async def _current_expiry(
        self, session: AsyncSession, email: str, scope_key: str
    ) -> Optional[datetime]:
        membership = await self._memberships.get(session, email, scope_key)
        if membership is None or membership.expires_at is None:
            return None
        return ensure_utc(membership.expires_at)

    async def verify(self, session: AsyncSession, session_id: str) -> VerificationOutcome:
        record = await self._payment_events.get_by_payment_ref(session, session_id)
        if record is not None:
            return VerificationOutcome(
                status=VerificationStatus.SUCCESS,
                expires_at=await self._current_expiry(session, record.email, record.scope_key),
                already_processed=True,
            )

        try:
            checkout_session = _as_mapping(
                await self._provider.retrieve_checkout_session(session_id)
            )
        except CheckoutProviderError as e:
            return VerificationOutcome(status=VerificationStatus.PENDING, detail=str(e))

        session_status = checkout_session.get("status")
        if session_status == "expired":
            logger.info("Checkout session expired: session=%s", session_id)
            return VerificationOutcome(
                status=VerificationStatus.ERROR, detail="checkout_session_expired"
            )
        if session_status != "complete":
            return VerificationOutcome(
                status=VerificationStatus.PENDING, detail=f"session_{session_status}"
            )

        classification = classify_checkout_session(checkout_session)
        if classification.reason == FOREIGN_SOURCE_REASON:
            logger.warning("Verify called with a non-membership checkout session: session=%s", session_id)
            return VerificationOutcome(status=VerificationStatus.ERROR, detail=classification.reason)
        if classification.status == "ignored":
            return VerificationOutcome(status=VerificationStatus.PENDING, detail=classification.reason)
        if classification.status == "dropped":
            logger.warning(
                "Verified session cannot be reconciled: session=%s reason=%s",
                session_id, classification.reason,
            )
            return VerificationOutcome(status=VerificationStatus.ERROR, detail=classification.reason)

        result = await self._reconciler.apply_payment_event(session, classification.event)
        expires_at = result.expires_at
        if expires_at is None:
            expires_at = await self._current_expiry(
                session, classification.event.email, classification.event.scope_key
            )
        return VerificationOutcome(
            status=VerificationStatus.SUCCESS,
            expires_at=expires_at,
            already_processed=not result.applied,
        )


__all__ = [
    "VerificationOutcome",
    "MembershipVerificationService",
]
