# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/models/billing_history.py

Modelo ORM para la tabla membership_billing_history (ledger).

Append-only: una fila por pago procesado. El repositorio solo expone
inserción y lectura. receipt_ref es único para que una redelivery no
genere una segunda fila.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base
from .membership import SCOPE_KEY_MAX_LENGTH


class BillingHistoryEntry(Base):
    """Entrada inmutable del historial de cobros de membresía."""

    __tablename__ = "membership_billing_history"

    # Generado en cliente: la ruta de la factura se deriva de este id antes del INSERT
    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )

    email: Mapped[str] = mapped_column(String(320), nullable=False)

    scope_key: Mapped[str] = mapped_column(String(SCOPE_KEY_MAX_LENGTH), nullable=False, default="")

    amount_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        doc="Importe cobrado en centavos.",
    )

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")

    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        doc="Nueva fecha de vencimiento calculada por el reconciliador.",
    )

    receipt_ref: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        unique=True,
        doc="Referencia de recibo del procesador (payment_intent, hosted invoice url).",
    )

    invoice_path: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Ruta determinística del PDF en Storage.",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_membership_billing_history_email", "email"),
    )

    def __repr__(self) -> str:
        return (
            f"<BillingHistoryEntry(id={self.id}, email={self.email!r}, "
            f"amount_cents={self.amount_cents}, receipt_ref={self.receipt_ref!r})>"
        )


__all__ = ["BillingHistoryEntry"]
