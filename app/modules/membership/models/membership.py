# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/models/membership.py

Modelo ORM para la tabla memberships.

Una fila por (email, scope_key). scope_key es el restaurant_id cuando la
membresía es por restaurante, o "" para la membresía global (los NULL no
participan en UNIQUE, por eso no se usa NULL).

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    DateTime,
    Index,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK
from app.modules.membership.enums import MembershipStatus
from app.modules.membership.utils.datetime_helpers import ensure_utc, utcnow

GLOBAL_SCOPE = ""
# Tope de un valor de metadata en Stripe (restaurant_id viaja por ahí)
SCOPE_KEY_MAX_LENGTH = 500


class Membership(Base):
    """
    Ventana de suscripción de una identidad en un scope.

    Solo el reconciliador escribe esta tabla. El estado "activa" se calcula
    en lectura con is_active_at(); ningún job pasa filas a expired.
    """

    __tablename__ = "memberships"

    id: Mapped[int] = mapped_column(
        BigIntPK,
        primary_key=True,
        autoincrement=True,
    )

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        doc="Email normalizado del suscriptor.",
    )

    scope_key: Mapped[str] = mapped_column(
        String(SCOPE_KEY_MAX_LENGTH),
        nullable=False,
        default=GLOBAL_SCOPE,
        doc="restaurant_id o '' (global).",
    )

    auth_user_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        doc="Cuenta asociada, si existe al momento del pago.",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MembershipStatus.NONE.value,
        doc="none, active, canceled, expired.",
    )

    activated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Fin del periodo pagado. NULL = sin vencimiento.",
    )

    plan_reference: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Price ID de Stripe del plan recurrente.",
    )

    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    last_payment_ref: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Último payment_ref aplicado (session id o invoice id).",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("email", "scope_key", name="uq_memberships_email_scope"),
        Index("ix_memberships_auth_user_id", "auth_user_id"),
    )

    def is_active_at(self, now: Optional[datetime] = None) -> bool:
        """Activa si status=active y expires_at es NULL o futuro."""
        if self.status != MembershipStatus.ACTIVE.value:
            return False
        if self.expires_at is None:
            return True
        return ensure_utc(self.expires_at) > (now or utcnow())

    def __repr__(self) -> str:
        return (
            f"<Membership(id={self.id}, email={self.email!r}, scope={self.scope_key!r}, "
            f"status={self.status}, expires_at={self.expires_at})>"
        )


__all__ = ["Membership", "GLOBAL_SCOPE", "SCOPE_KEY_MAX_LENGTH"]
