# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/dependencies.py

Factories de dependencias FastAPI del módulo de membresías.

Cada colaborador externo (Stripe, Storage, email, configuración) se obtiene
por Depends para que los tests puedan sustituirlo con
app.dependency_overrides.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends

from app.shared.config import get_settings
from app.shared.config.settings_payments import get_payments_settings
from app.shared.integrations.email_sender import IEmailSender, get_email_sender
from app.shared.utils.http_storage_client import SupabaseStorageHTTPClient

from .providers.stripe_provider import StripeCheckoutProvider
from .services.checkout_service import CheckoutIntentBuilder
from .services.config_loader import MembershipConfigLoader, get_membership_config_loader
from .services.ledger_service import LedgerInvoiceProducer
from .services.reconciler import MembershipReconciler
from .services.verification_service import MembershipVerificationService

logger = logging.getLogger(__name__)

_storage_client: Optional[SupabaseStorageHTTPClient] = None


def get_storage_client() -> Optional[SupabaseStorageHTTPClient]:
    """Cliente de Storage compartido; None si Supabase no está configurado."""
    global _storage_client
    settings = get_settings()
    if not settings.storage_configured:
        return None
    if _storage_client is None:
        _storage_client = SupabaseStorageHTTPClient.from_settings(settings, get_payments_settings())
    return _storage_client


async def close_storage_client() -> None:
    global _storage_client
    if _storage_client is not None:
        await _storage_client.aclose()
        _storage_client = None


def get_membership_email_sender() -> IEmailSender:
    return get_email_sender()


def get_checkout_provider() -> StripeCheckoutProvider:
    return StripeCheckoutProvider()


def get_config_loader() -> MembershipConfigLoader:
    return get_membership_config_loader()


def get_ledger_producer(
    storage_client: Optional[SupabaseStorageHTTPClient] = Depends(get_storage_client),
    email_sender: IEmailSender = Depends(get_membership_email_sender),
) -> LedgerInvoiceProducer:
    payments = get_payments_settings()
    return LedgerInvoiceProducer(
        storage_client=storage_client,
        email_sender=email_sender,
        bucket=payments.invoice_bucket,
        send_welcome_email=payments.send_membership_welcome_email,
    )


def get_reconciler(
    ledger: LedgerInvoiceProducer = Depends(get_ledger_producer),
) -> MembershipReconciler:
    return MembershipReconciler(ledger)


def get_checkout_builder(
    provider: StripeCheckoutProvider = Depends(get_checkout_provider),
    config_loader: MembershipConfigLoader = Depends(get_config_loader),
    email_sender: IEmailSender = Depends(get_membership_email_sender),
) -> CheckoutIntentBuilder:
    payments = get_payments_settings()
    return CheckoutIntentBuilder(
        provider=provider,
        config_loader=config_loader,
        frontend_url=payments.frontend_url or get_settings().frontend_url,
        email_sender=email_sender,
        product_name=payments.membership_product_name,
    )


def get_verification_service(
    provider: StripeCheckoutProvider = Depends(get_checkout_provider),
    reconciler: MembershipReconciler = Depends(get_reconciler),
) -> MembershipVerificationService:
    return MembershipVerificationService(provider=provider, reconciler=reconciler)


__all__ = [
    "get_storage_client",
    "close_storage_client",
    "get_membership_email_sender",
    "get_checkout_provider",
    "get_config_loader",
    "get_ledger_producer",
    "get_reconciler",
    "get_checkout_builder",
    "get_verification_service",
]
