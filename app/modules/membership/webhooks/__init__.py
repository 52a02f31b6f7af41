# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/webhooks/__init__.py

Webhooks de pagos de membresía.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from .events import (
    Classification,
    ClassifiedPaymentEvent,
    classify_checkout_session,
    classify_event,
)
from .stripe_handler import handle_membership_webhook, verify_stripe_webhook_signature

__all__ = [
    "Classification",
    "ClassifiedPaymentEvent",
    "classify_checkout_session",
    "classify_event",
    "handle_membership_webhook",
    "verify_stripe_webhook_signature",
]
