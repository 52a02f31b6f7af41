# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/schemas.py

Esquemas Pydantic para el módulo de membresías.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .models import SCOPE_KEY_MAX_LENGTH
from .services.checkout_service import CheckoutOptions


class MembershipCheckoutRequest(BaseModel):
    """
    Request para iniciar el checkout de membresía.

    restaurant_id vacío o ausente = membresía global.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr = Field(description="Email del suscriptor.")

    name: Optional[str] = Field(
        default=None,
        description="Nombre completo.",
        max_length=255,
    )

    phone: Optional[str] = Field(
        default=None,
        description="Teléfono de contacto.",
        max_length=50,
    )

    restaurant_id: Optional[str] = Field(
        default=None,
        description="Restaurante al que aplica la membresía (opcional).",
        max_length=SCOPE_KEY_MAX_LENGTH,
    )

    options: CheckoutOptions = Field(default_factory=CheckoutOptions)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        # EmailStr solo baja a minúsculas el dominio; la identidad usa el email completo
        return v.lower()


class MembershipCheckoutResponse(BaseModel):
    """Respuesta de checkout: url de Stripe o redirect al login."""

    success: bool
    url: Optional[str] = None
    session_id: Optional[str] = None
    mode: Optional[str] = None
    amount_cents: Optional[int] = None
    prorated: Optional[bool] = None
    redirect: Optional[str] = None
    error: Optional[str] = None


class MembershipVerifyResponse(BaseModel):
    status: str = Field(description="pending, success o error.")
    detail: Optional[str] = None
    expires_at: Optional[str] = None
    already_processed: bool = False


class MembershipStatusRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    restaurant_id: Optional[str] = Field(default=None, max_length=SCOPE_KEY_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.lower()


class MembershipStatusResponse(BaseModel):
    user_exists: bool
    active: bool
    expires_at: Optional[str] = None
    remaining_days: int = 0


__all__ = [
    "MembershipCheckoutRequest",
    "MembershipCheckoutResponse",
    "MembershipVerifyResponse",
    "MembershipStatusRequest",
    "MembershipStatusResponse",
]
