# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/models/__init__.py

Modelos ORM del módulo de membresías.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from .member_account import MemberAccount
from .membership import Membership, GLOBAL_SCOPE, SCOPE_KEY_MAX_LENGTH
from .billing_history import BillingHistoryEntry
from .payment_event import PaymentEventRecord
from .app_setting import (
    AppSetting,
    MEMBERSHIP_FEE_KEY,
    MEMBERSHIP_PRICE_ID_KEY,
    MEMBERSHIP_CURRENCY_KEY,
)

__all__ = [
    "MemberAccount",
    "Membership",
    "GLOBAL_SCOPE",
    "SCOPE_KEY_MAX_LENGTH",
    "BillingHistoryEntry",
    "PaymentEventRecord",
    "AppSetting",
    "MEMBERSHIP_FEE_KEY",
    "MEMBERSHIP_PRICE_ID_KEY",
    "MEMBERSHIP_CURRENCY_KEY",
]
