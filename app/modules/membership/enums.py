# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/enums.py

Enums del módulo de membresías.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from enum import Enum


class MembershipStatus(str, Enum):
    """
    Estado almacenado de una membresía.

    EXPIRED existe por compatibilidad con datos históricos: este módulo no lo
    escribe nunca. "Activa" se deriva en lectura (status + expires_at).
    """
    NONE = "none"
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"


class CheckoutMode(str, Enum):
    """Modo de Stripe Checkout."""
    SUBSCRIPTION = "subscription"
    PAYMENT = "payment"


class PaymentEventKind(str, Enum):
    """Eventos de dominio derivados de webhooks de Stripe."""
    CHECKOUT_COMPLETED = "checkout_completed"
    INVOICE_PAID = "invoice_paid"


class VerificationStatus(str, Enum):
    """Resultado de verificar una sesión de checkout tras el redirect."""
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


__all__ = [
    "MembershipStatus",
    "CheckoutMode",
    "PaymentEventKind",
    "VerificationStatus",
]
