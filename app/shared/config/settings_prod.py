# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_prod.py

Settings de PRODUCCIÓN. Solo variables de entorno (sin .env), logging JSON,
SSL obligatorio hacia PostgreSQL y sin atajos de desarrollo para webhooks.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

import logging
from typing import Literal

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings

logger = logging.getLogger(__name__)


class ProdSettings(BaseAppSettings):
    python_env: Literal["development", "test", "production"] = "production"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "pretty", "plain"] = "json"

    db_sslmode: str = "require"

    model_config = SettingsConfigDict(
        env_file=None,
        extra="ignore",
    )

    def _security_checks(self) -> None:
        super()._security_checks()

        # Import local: settings_payments no depende de esta clase
        from .settings_payments import get_payments_settings

        payments = get_payments_settings()
        if payments.allow_insecure_webhooks:
            raise ValueError("ALLOW_INSECURE_WEBHOOKS no está permitido en producción")
        if not payments.stripe_webhook_secret:
            logger.warning("STRIPE_WEBHOOK_SECRET not set; Stripe webhooks will answer 500")
        if self.debug:
            logger.warning("DEBUG=true in production")


__all__ = ["ProdSettings"]
# Fin del archivo backend/app/shared/config/settings_prod.py
