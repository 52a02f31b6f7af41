# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/models/payment_event.py

Modelo ORM para la tabla membership_payment_events.

Registro de idempotencia: una fila por pago aplicado, con payment_ref
único (checkout session id o invoice id). Se inserta en la misma
transacción que el upsert de la membresía; si ya existe, el evento es
una redelivery y no se vuelve a aplicar.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK
from .membership import SCOPE_KEY_MAX_LENGTH


class PaymentEventRecord(Base):
    """Pago ya reconciliado."""

    __tablename__ = "membership_payment_events"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    payment_ref: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        doc="checkout session id (cs_...) o invoice id (in_...).",
    )

    provider_event_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="evt_... de Stripe; NULL si se reconcilió desde /verify.",
    )

    event_type: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(320), nullable=False)

    scope_key: Mapped[str] = mapped_column(String(SCOPE_KEY_MAX_LENGTH), nullable=False, default="")

    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<PaymentEventRecord(payment_ref={self.payment_ref!r}, event_type={self.event_type!r})>"


__all__ = ["PaymentEventRecord"]
