# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/services/__init__.py

Servicios del módulo de membresías.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from .proration import compute_charge, is_prorated
from .config_loader import MembershipConfig, MembershipConfigLoader, get_membership_config_loader
from .reconciler import MembershipReconciler, ReconcileResult
from .ledger_service import LedgerInvoiceProducer
from .checkout_service import CheckoutIntentBuilder, CheckoutOptions, CheckoutResult
from .verification_service import MembershipVerificationService, VerificationOutcome
from .status_service import lookup_membership_status

__all__ = [
    "compute_charge",
    "is_prorated",
    "MembershipConfig",
    "MembershipConfigLoader",
    "get_membership_config_loader",
    "MembershipReconciler",
    "ReconcileResult",
    "LedgerInvoiceProducer",
    "CheckoutIntentBuilder",
    "CheckoutOptions",
    "CheckoutResult",
    "MembershipVerificationService",
    "VerificationOutcome",
    "lookup_membership_status",
]
