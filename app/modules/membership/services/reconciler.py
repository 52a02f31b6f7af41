# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/services/reconciler.py

Reconciliador de membresías: aplica un evento de pago clasificado.

Flujo (una sola transacción):
1. Registrar payment_ref en membership_payment_events (ON CONFLICT DO NOTHING).
   Si ya existía → already_processed, sin mutaciones.
2. Upsert de la membresía por (email, scope_key) calculando la nueva
   vigencia en la base de datos (renovación anticipada extiende desde la
   vigencia previa).
3. Reflejar la activación en la metadata de la cuenta (si existe).
4. Commit. Error de base de datos → rollback + MembershipStorageError.

Después del commit se entrega el pago al ledger. Un fallo del ledger se
registra y no revierte la membresía.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import MembershipStorageError
from ..repository import (
    MemberAccountRepository,
    MembershipRepository,
    PaymentEventRepository,
)
from ..utils.datetime_helpers import add_months, ensure_utc, utcnow
from ..webhooks.events import ClassifiedPaymentEvent

logger = logging.getLogger(__name__)

APPLIED = "applied"
ALREADY_PROCESSED = "already_processed"


@dataclass
class ReconcileResult:
    status: str
    payment_ref: str
    email: str
    scope_key: str
    expires_at: Optional[datetime] = None
    invoice_url: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status == APPLIED


def _parse_uuid(value: Optional[str]) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


class MembershipReconciler:
    """
    Aplica eventos de pago de forma idempotente.

    Args:
        ledger: productor de ledger/factura (opcional, best-effort)
        clock: reloj UTC inyectable
    """

    def __init__(
        self,
        ledger=None,
        *,
        clock: Callable[[], datetime] = utcnow,
        accounts: Optional[MemberAccountRepository] = None,
        memberships: Optional[MembershipRepository] = None,
        payment_events: Optional[PaymentEventRepository] = None,
    ):
        self._ledger = ledger
        self._clock = clock
        self._accounts = accounts or MemberAccountRepository()
        self._memberships = memberships or MembershipRepository()
        self._payment_events = payment_events or PaymentEventRepository()

    async def apply_payment_event(
        self,
        session: AsyncSession,
        event: ClassifiedPaymentEvent,
    ) -> ReconcileResult:
        now = ensure_utc(self._clock())

        try:
            inserted = await self._payment_events.record_if_new(
                session,
                payment_ref=event.payment_ref,
                provider_event_id=event.provider_event_id,
                event_type=event.event_type,
                email=event.email,
                scope_key=event.scope_key,
                amount_cents=event.amount_cents,
                processed_at=now,
            )
            if not inserted:
                await session.rollback()
                logger.info(
                    "Payment already processed, skipping: payment_ref=%s email=%s",
                    event.payment_ref, event.email,
                )
                return ReconcileResult(
                    status=ALREADY_PROCESSED,
                    payment_ref=event.payment_ref,
                    email=event.email,
                    scope_key=event.scope_key,
                )

            account = await self._accounts.get_by_email(session, event.email)
            auth_user_id = account.auth_user_id if account else _parse_uuid(event.auth_user_id)

            _, expires_at = await self._memberships.upsert_on_payment(
                session,
                email=event.email,
                scope_key=event.scope_key,
                now=now,
                fresh_expiry=add_months(now, 1),
                payment_ref=event.payment_ref,
                auth_user_id=auth_user_id,
                subscription_id=event.subscription_id,
            )

            if account is not None:
                await self._accounts.mark_membership_active(
                    session,
                    email=event.email,
                    activated_at=now,
                    payment_ref=event.payment_ref,
                )

            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(
                "Membership upsert failed: payment_ref=%s email=%s error=%s",
                event.payment_ref, event.email, e,
            )
            raise MembershipStorageError(
                f"No se pudo registrar la membresía para {event.payment_ref}"
            ) from e

        logger.info(
            "Membership granted: email=%s scope=%r kind=%s payment_ref=%s expires_at=%s",
            event.email, event.scope_key, event.kind.value, event.payment_ref, expires_at.isoformat(),
        )

        result = ReconcileResult(
            status=APPLIED,
            payment_ref=event.payment_ref,
            email=event.email,
            scope_key=event.scope_key,
            expires_at=expires_at,
        )

        if self._ledger is not None:
            try:
                result.invoice_url = await self._ledger.record(
                    session,
                    email=event.email,
                    full_name=event.full_name or (account.full_name if account else None),
                    scope_key=event.scope_key,
                    amount_cents=event.amount_cents,
                    currency=event.currency,
                    paid_at=now,
                    expires_at=expires_at,
                    receipt_ref=event.receipt_ref,
                )
            except Exception as e:
                # La membresía ya está otorgada; el ledger no la revierte
                await session.rollback()
                logger.exception(
                    "Ledger hand-off failed (membership kept): payment_ref=%s error=%s",
                    event.payment_ref, e,
                )

        return result


__all__ = [
    "APPLIED",
    "ALREADY_PROCESSED",
    "ReconcileResult",
    "MembershipReconciler",
]
