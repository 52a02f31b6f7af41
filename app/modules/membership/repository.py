# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/repository.py

Repositorios del módulo de membresías.

Todas las escrituras concurrentes usan INSERT ... ON CONFLICT del dialecto
activo, de modo que dos requests simultáneos convergen sin locks:
- cuentas: insert-or-fetch por email
- pagos procesados: insert-if-new por payment_ref
- membresías: upsert por (email, scope_key) con la nueva vigencia calculada
  en la misma sentencia
- ledger: insert-if-new por receipt_ref (append-only)

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID, uuid4

from sqlalchemy import DateTime, and_, case, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.upsert import add_months, dialect_insert
from .enums import MembershipStatus
from .models import (
    AppSetting,
    BillingHistoryEntry,
    MemberAccount,
    Membership,
    PaymentEventRecord,
)
from .utils.datetime_helpers import ensure_utc, to_iso8601

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Email canónico: sin espacios y en minúsculas."""
    return (email or "").strip().lower()


class MemberAccountRepository:
    """Almacén de identidades (una cuenta por email)."""

    async def get_by_email(self, session: AsyncSession, email: str) -> Optional[MemberAccount]:
        stmt = select(MemberAccount).where(MemberAccount.email == normalize_email(email))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_or_get_existing(
        self,
        session: AsyncSession,
        *,
        email: str,
        full_name: Optional[str],
        phone: Optional[str],
        metadata: Dict[str, Any],
    ) -> Tuple[MemberAccount, bool]:
        """
        Inserta la cuenta o devuelve la existente.

        Returns:
            (cuenta, created). created=False si otra request la creó primero.
        """
        email = normalize_email(email)
        table = MemberAccount.__table__
        stmt = (
            dialect_insert(session, table)
            .values(
                auth_user_id=uuid4(),
                email=email,
                full_name=full_name,
                phone=phone,
                account_metadata=metadata,
            )
            .on_conflict_do_nothing(index_elements=[table.c.email])
            .returning(table.c.auth_user_id)
        )
        inserted_id = (await session.execute(stmt)).scalar_one_or_none()
        await session.commit()

        account = await self.get_by_email(session, email)
        if account is None:
            raise RuntimeError(f"Cuenta no encontrada tras insert-or-fetch: {email}")

        if inserted_id is None:
            logger.info("Account already existed, reusing: email=%s", email)
        return account, inserted_id is not None

    async def mark_membership_active(
        self,
        session: AsyncSession,
        *,
        email: str,
        activated_at: datetime,
        payment_ref: str,
    ) -> Optional[MemberAccount]:
        """Refleja la activación en la metadata de la cuenta (si existe). No hace commit."""
        account = await self.get_by_email(session, email)
        if account is None:
            return None
        account.account_metadata = {
            **(account.account_metadata or {}),
            "membership_active": True,
            "membership_activated_at": to_iso8601(activated_at),
            "stripe_session_id": payment_ref,
        }
        await session.flush()
        return account


class MembershipRepository:
    """Lectura y upsert atómico de membresías."""

    async def get(
        self, session: AsyncSession, email: str, scope_key: str
    ) -> Optional[Membership]:
        stmt = select(Membership).where(
            Membership.email == normalize_email(email),
            Membership.scope_key == scope_key,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_on_payment(
        self,
        session: AsyncSession,
        *,
        email: str,
        scope_key: str,
        now: datetime,
        fresh_expiry: datetime,
        payment_ref: str,
        auth_user_id: Optional[UUID] = None,
        plan_reference: Optional[str] = None,
        subscription_id: Optional[str] = None,
    ) -> Tuple[int, datetime]:
        """
        INSERT ... ON CONFLICT (email, scope_key) DO UPDATE en una sola sentencia.

        Vigencia nueva:
            expires_at futura  → expires_at + 1 mes (renovación anticipada sin pérdida)
            en otro caso       → fresh_expiry (now + 1 mes)

        No hace commit.

        Returns:
            (membership_id, expires_at)
        """
        table = Membership.__table__
        ins = dialect_insert(session, table).values(
            email=normalize_email(email),
            scope_key=scope_key,
            auth_user_id=auth_user_id,
            status=MembershipStatus.ACTIVE.value,
            activated_at=now,
            expires_at=fresh_expiry,
            plan_reference=plan_reference,
            stripe_subscription_id=subscription_id,
            last_payment_ref=payment_ref,
            created_at=now,
            updated_at=now,
        )
        new_expiry = case(
            (
                and_(table.c.expires_at.is_not(None), table.c.expires_at > now),
                add_months(table.c.expires_at, 1),
            ),
            else_=literal(fresh_expiry, DateTime(timezone=True)),
        )
        stmt = ins.on_conflict_do_update(
            index_elements=[table.c.email, table.c.scope_key],
            set_={
                "status": MembershipStatus.ACTIVE.value,
                "activated_at": now,
                "expires_at": new_expiry,
                "auth_user_id": func.coalesce(ins.excluded.auth_user_id, table.c.auth_user_id),
                "plan_reference": func.coalesce(ins.excluded.plan_reference, table.c.plan_reference),
                "stripe_subscription_id": func.coalesce(
                    ins.excluded.stripe_subscription_id, table.c.stripe_subscription_id
                ),
                "last_payment_ref": ins.excluded.last_payment_ref,
                "updated_at": now,
            },
        ).returning(table.c.id, table.c.expires_at)

        row = (await session.execute(stmt)).one()
        return row.id, ensure_utc(row.expires_at)


class PaymentEventRepository:
    """Registro de pagos ya aplicados (idempotencia por payment_ref)."""

    async def get_by_payment_ref(
        self, session: AsyncSession, payment_ref: str
    ) -> Optional[PaymentEventRecord]:
        stmt = select(PaymentEventRecord).where(PaymentEventRecord.payment_ref == payment_ref)
        return (await session.execute(stmt)).scalar_one_or_none()

    async def exists(self, session: AsyncSession, payment_ref: str) -> bool:
        stmt = select(PaymentEventRecord.id).where(PaymentEventRecord.payment_ref == payment_ref)
        return (await session.execute(stmt)).scalar_one_or_none() is not None

    async def record_if_new(
        self,
        session: AsyncSession,
        *,
        payment_ref: str,
        provider_event_id: Optional[str],
        event_type: str,
        email: str,
        scope_key: str,
        amount_cents: int,
        processed_at: datetime,
    ) -> bool:
        """
        Inserta el registro si el payment_ref es nuevo. No hace commit.

        Returns:
            True si se insertó; False si ya existía (redelivery).
        """
        table = PaymentEventRecord.__table__
        stmt = (
            dialect_insert(session, table)
            .values(
                payment_ref=payment_ref,
                provider_event_id=provider_event_id,
                event_type=event_type,
                email=normalize_email(email),
                scope_key=scope_key,
                amount_cents=amount_cents,
                processed_at=processed_at,
            )
            .on_conflict_do_nothing(index_elements=[table.c.payment_ref])
            .returning(table.c.id)
        )
        return (await session.execute(stmt)).scalar_one_or_none() is not None


@dataclass
class NewBillingEntry:
    entry_id: UUID
    email: str
    scope_key: str
    amount_cents: int
    currency: str
    paid_at: datetime
    expires_at: datetime
    receipt_ref: Optional[str]
    invoice_path: str


class BillingHistoryRepository:
    """
    Ledger append-only. Solo inserción y lectura: no hay update ni delete.
    """

    async def insert_if_absent(self, session: AsyncSession, entry: NewBillingEntry) -> bool:
        """
        Inserta la entrada salvo que receipt_ref ya exista. No hace commit.

        Returns:
            True si se insertó una fila nueva.
        """
        table = BillingHistoryEntry.__table__
        stmt = (
            dialect_insert(session, table)
            .values(
                id=entry.entry_id,
                email=normalize_email(entry.email),
                scope_key=entry.scope_key,
                amount_cents=entry.amount_cents,
                currency=entry.currency,
                paid_at=entry.paid_at,
                expires_at=entry.expires_at,
                receipt_ref=entry.receipt_ref,
                invoice_path=entry.invoice_path,
            )
            .on_conflict_do_nothing(index_elements=[table.c.receipt_ref])
            .returning(table.c.id)
        )
        return (await session.execute(stmt)).scalar_one_or_none() is not None

    async def get_by_id(self, session: AsyncSession, entry_id: UUID) -> Optional[BillingHistoryEntry]:
        return await session.get(BillingHistoryEntry, entry_id)

    async def get_by_receipt_ref(
        self, session: AsyncSession, receipt_ref: str
    ) -> Optional[BillingHistoryEntry]:
        stmt = select(BillingHistoryEntry).where(BillingHistoryEntry.receipt_ref == receipt_ref)
        return (await session.execute(stmt)).scalar_one_or_none()

    async def list_by_email(self, session: AsyncSession, email: str) -> List[BillingHistoryEntry]:
        stmt = (
            select(BillingHistoryEntry)
            .where(BillingHistoryEntry.email == normalize_email(email))
            .order_by(BillingHistoryEntry.paid_at.desc())
        )
        return list((await session.execute(stmt)).scalars().all())


class AppSettingRepository:
    """Lectura del almacén clave-valor de configuración."""

    async def get_values(self, session: AsyncSession, keys: Iterable[str]) -> Dict[str, str]:
        stmt = select(AppSetting.key, AppSetting.value).where(AppSetting.key.in_(list(keys)))
        result = await session.execute(stmt)
        return {row.key: row.value for row in result}


__all__ = [
    "normalize_email",
    "MemberAccountRepository",
    "MembershipRepository",
    "PaymentEventRepository",
    "NewBillingEntry",
    "BillingHistoryRepository",
    "AppSettingRepository",
]
