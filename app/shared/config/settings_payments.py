# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_payments.py

Configuración de pagos y membresías.

Descripción:
    Centraliza credenciales de Stripe, tolerancias de webhook, timeouts de
    checkout, límites del pool de requests hacia Storage y valores por
    defecto de la membresía.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import os
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaymentsSettings(BaseSettings):
    """Configuración del sistema de pagos de membresía."""

    # =========================================================================
    # STRIPE
    # =========================================================================

    stripe_secret_key: Optional[str] = Field(
        default=None,
        description="Stripe secret key (sk_live_... o sk_test_...)"
    )

    stripe_webhook_secret: Optional[str] = Field(
        default=None,
        description="Stripe webhook signing secret (whsec_...)"
    )

    stripe_webhook_tolerance_seconds: int = Field(
        default=300,
        description="Tolerancia para validación de timestamp de webhooks Stripe (5 minutos)"
    )

    stripe_request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout corto para llamadas a Stripe desde checkout (sin reintentos)"
    )

    @field_validator('stripe_secret_key', mode='before')
    @classmethod
    def _load_stripe_secret_key(cls, v: Optional[str]) -> Optional[str]:
        """Fallback a STRIPE_SECRET_KEY env var si no está en settings."""
        if v:
            return v
        return os.getenv("STRIPE_SECRET_KEY")

    # =========================================================================
    # FRONTEND URL (normalizado desde FRONTEND_URL o FRONTEND_BASE_URL)
    # =========================================================================

    frontend_url: Optional[str] = Field(
        default=None,
        description="URL base del frontend para redirects de checkout"
    )

    @field_validator('frontend_url', mode='before')
    @classmethod
    def _load_frontend_url(cls, v: Optional[str]) -> Optional[str]:
        """Fallback a FRONTEND_URL o FRONTEND_BASE_URL."""
        if v:
            return v
        return os.getenv("FRONTEND_URL") or os.getenv("FRONTEND_BASE_URL")

    # =========================================================================
    # MEMBRESÍA
    # =========================================================================

    membership_default_fee_cents: int = Field(
        default=2500,
        description="Cuota usada cuando app_settings no define membership_fee"
    )

    membership_default_currency: str = Field(
        default="usd",
        description="Moneda de la membresía (ISO 4217, minúsculas para Stripe)"
    )

    membership_config_ttl_seconds: float = Field(
        default=60.0,
        description="TTL del cache de configuración dinámica (app_settings)"
    )

    membership_product_name: str = Field(
        default="Eat Meet Club Membership",
        description="Nombre del producto mostrado en Stripe Checkout"
    )

    # =========================================================================
    # FACTURAS / STORAGE
    # =========================================================================

    invoice_bucket: str = Field(
        default="membership-invoices",
        description="Bucket de Supabase Storage para facturas PDF"
    )

    storage_max_concurrency: int = Field(
        default=4,
        description="Máximo de requests concurrentes hacia Storage"
    )

    storage_max_retries: int = Field(
        default=3,
        description="Reintentos ante fallos transitorios de Storage"
    )

    storage_retry_base_delay: float = Field(
        default=0.5,
        description="Delay inicial (segundos) del backoff exponencial"
    )

    # =========================================================================
    # SEGURIDAD
    # =========================================================================

    allow_insecure_webhooks: bool = Field(
        default=False,
        description="Permite webhooks sin validación de firma (SOLO DESARROLLO)"
    )

    # =========================================================================
    # NOTIFICACIONES
    # =========================================================================

    send_membership_welcome_email: bool = Field(
        default=True,
        description="Enviar email de bienvenida con la factura al activar membresía"
    )

    # =========================================================================
    # CONFIGURACIÓN DE PYDANTIC
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton global
_payments_settings: Optional[PaymentsSettings] = None


def get_payments_settings() -> PaymentsSettings:
    """
    Obtiene la instancia global de configuración de pagos.

    Returns:
        PaymentsSettings: Configuración de pagos
    """
    global _payments_settings
    if _payments_settings is None:
        _payments_settings = PaymentsSettings()
    return _payments_settings


def reset_payments_settings() -> None:
    """Descarta el singleton (tests que cambian variables de entorno)."""
    global _payments_settings
    _payments_settings = None


__all__ = [
    "PaymentsSettings",
    "get_payments_settings",
    "reset_payments_settings",
]
# Fin del archivo backend/app/shared/config/settings_payments.py
