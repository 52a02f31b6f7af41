# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/models/member_account.py

Modelo ORM para la tabla member_accounts (almacén de identidades).

Una cuenta por email normalizado. Las cuentas creadas desde checkout nacen
con account_metadata.membership_active = False y needs_password = True.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, JSONDocument


class MemberAccount(Base):
    """Cuenta de suscriptor (identidad)."""

    __tablename__ = "member_accounts"

    auth_user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        doc="Identificador durable del usuario.",
    )

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        doc="Email normalizado (lowercase, sin espacios). Único.",
    )

    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    account_metadata: Mapped[Dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=dict,
        doc="Metadata de usuario: full_name, phone, membership_active, needs_password.",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<MemberAccount(auth_user_id={self.auth_user_id}, email={self.email!r})>"


__all__ = ["MemberAccount"]
