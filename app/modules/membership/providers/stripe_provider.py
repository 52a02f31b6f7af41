# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/providers/stripe_provider.py

Proveedor Stripe para el checkout de membresías.

Crea y consulta Stripe Checkout Sessions. Las llamadas al SDK (bloqueante)
se ejecutan en threadpool, con timeout corto y sin reintentos de red: el
checkout es interactivo y el usuario puede reintentar.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from app.shared.config.settings_payments import get_payments_settings
from ..enums import CheckoutMode
from ..errors import CheckoutProviderError, MembershipConfigError

logger = logging.getLogger(__name__)


@dataclass
class StripeSessionResult:
    """Resultado de crear una sesión de checkout en Stripe."""
    checkout_url: str
    session_id: str
    provider: str = "stripe"


class StripeCheckoutProvider:
    """
    Proveedor de checkout Stripe para membresías.

    Soporta dos modos:
    - subscription: price recurrente configurado (nuevos suscriptores)
    - payment: line item dinámico con el importe prorrateado (renovaciones)
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_payments_settings()
        self._secret_key = secret_key or settings.stripe_secret_key
        self._timeout = timeout_seconds or settings.stripe_request_timeout_seconds
        if self._secret_key:
            stripe.api_key = self._secret_key
            stripe.max_network_retries = 0
            stripe.default_http_client = stripe.RequestsClient(timeout=self._timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self._secret_key)

    async def create_checkout_session(
        self,
        *,
        mode: CheckoutMode,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        currency: str,
        price_id: Optional[str] = None,
        amount_cents: Optional[int] = None,
        product_name: Optional[str] = None,
    ) -> StripeSessionResult:
        """
        Crea una Stripe Checkout Session.

        Args:
            mode: subscription (requiere price_id) o payment (requiere amount_cents)
            customer_email: Email del suscriptor
            success_url: URL de redirección en éxito
            cancel_url: URL de redirección en cancelación
            metadata: Metadata propagada al webhook
            currency: Moneda ISO 4217
            price_id: Price recurrente de Stripe (modo subscription)
            amount_cents: Importe a cobrar (modo payment)
            product_name: Nombre mostrado en el line item dinámico

        Raises:
            MembershipConfigError: Si Stripe no está configurado
            CheckoutProviderError: Si Stripe rechaza o no responde
        """
        if not self.is_configured:
            raise MembershipConfigError("Stripe is not configured. Set STRIPE_SECRET_KEY.")

        if mode == CheckoutMode.SUBSCRIPTION:
            line_item: Dict[str, Any] = {"price": price_id, "quantity": 1}
        else:
            line_item = {
                "price_data": {
                    "currency": currency.lower(),
                    "unit_amount": int(amount_cents or 0),
                    "product_data": {
                        "name": product_name or get_payments_settings().membership_product_name,
                    },
                },
                "quantity": 1,
            }

        session_params: Dict[str, Any] = {
            "mode": mode.value,
            "payment_method_types": ["card"],
            "line_items": [line_item],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "customer_email": customer_email,
            "metadata": metadata,
        }
        if mode == CheckoutMode.SUBSCRIPTION:
            # La metadata de la suscripción viaja en cada invoice.paid posterior
            session_params["subscription_data"] = {"metadata": metadata}

        logger.info(
            "Creating Stripe checkout session: mode=%s email=%s",
            mode.value, customer_email,
        )
        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                **session_params,
            )
        except stripe.StripeError as e:
            logger.error("Stripe checkout session creation failed: %s", e)
            raise CheckoutProviderError(str(e)) from e

        logger.info(
            "Stripe checkout session created: session_id=%s mode=%s",
            session.id, mode.value,
        )
        return StripeSessionResult(checkout_url=session.url, session_id=session.id)

    async def retrieve_checkout_session(self, session_id: str) -> Any:
        """
        Consulta una Checkout Session existente.

        Raises:
            MembershipConfigError: Si Stripe no está configurado
            CheckoutProviderError: Si Stripe rechaza o no responde
        """
        if not self.is_configured:
            raise MembershipConfigError("Stripe is not configured. Set STRIPE_SECRET_KEY.")
        try:
            return await run_in_threadpool(stripe.checkout.Session.retrieve, session_id)
        except stripe.StripeError as e:
            logger.warning("Stripe session retrieve failed: session=%s error=%s", session_id, e)
            raise CheckoutProviderError(str(e)) from e


__all__ = [
    "StripeCheckoutProvider",
    "StripeSessionResult",
]
