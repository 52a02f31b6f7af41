# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/providers/__init__.py

Proveedores de pago para membresías.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from .stripe_provider import StripeCheckoutProvider, StripeSessionResult

__all__ = [
    "StripeCheckoutProvider",
    "StripeSessionResult",
]
