# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/errors.py

Taxonomía de errores del módulo de membresías.

- MembershipConfigError: falta plan/fee o webhook secret (fatal, sin reintento).
- CheckoutProviderError: Stripe rechazó o no respondió al crear el checkout.
- MembershipStorageError: falló el upsert de membresía; el webhook debe
  responder 5xx para que Stripe reintente.
- InvoiceStorageError: falló el almacenamiento de la factura (best-effort).

Autor: EatMeetClub
Fecha: 2026-10-19
"""


class MembershipError(Exception):
    """Base de errores del módulo."""


class MembershipConfigError(MembershipError):
    pass


class CheckoutProviderError(MembershipError):
    pass


class MembershipStorageError(MembershipError):
    pass


class InvoiceStorageError(MembershipError):
    pass


class CheckoutErrorCodes:
    """Códigos de error estables para el envelope {success:false, error}."""
    CONFIG_ERROR = "membership_config_error"
    PROVIDER_ERROR = "checkout_provider_error"


__all__ = [
    "MembershipError",
    "MembershipConfigError",
    "CheckoutProviderError",
    "MembershipStorageError",
    "InvoiceStorageError",
    "CheckoutErrorCodes",
]
