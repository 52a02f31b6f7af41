# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/models/app_setting.py

Modelo ORM para la tabla app_settings (configuración clave-valor editable
desde el panel de administración).

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base

# Claves usadas por la membresía
MEMBERSHIP_FEE_KEY = "membership_fee"
MEMBERSHIP_PRICE_ID_KEY = "membership_stripe_price_id"
MEMBERSHIP_CURRENCY_KEY = "membership_currency"


class AppSetting(Base):
    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)

    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<AppSetting(key={self.key!r})>"


__all__ = [
    "AppSetting",
    "MEMBERSHIP_FEE_KEY",
    "MEMBERSHIP_PRICE_ID_KEY",
    "MEMBERSHIP_CURRENCY_KEY",
]
