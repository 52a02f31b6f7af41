# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/services/config_loader.py

Cargador de configuración dinámica de la membresía.

Lee cuota, price id de Stripe y moneda desde la tabla app_settings y
entrega un MembershipConfig tipado. El resultado se cachea con TTL; reload()
descarta el cache de forma explícita (p. ej. tras editar app_settings).

Reglas:
- membership_fee ausente → cuota por defecto (PaymentsSettings).
- membership_fee no entero o negativo → MembershipConfigError.
- membership_stripe_price_id ausente o vacío → MembershipConfigError.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.config.settings_payments import get_payments_settings
from ..errors import MembershipConfigError
from ..models import MEMBERSHIP_CURRENCY_KEY, MEMBERSHIP_FEE_KEY, MEMBERSHIP_PRICE_ID_KEY
from ..repository import AppSettingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipConfig:
    membership_fee_cents: int
    stripe_plan_price_id: str
    currency: str


class MembershipConfigLoader:
    """
    Loader con cache TTL sobre app_settings.

    Args:
        ttl_seconds: vida del cache; 0 desactiva el cache
        default_fee_cents: cuota cuando membership_fee no está definido
        default_currency: moneda cuando membership_currency no está definido
        clock: reloj monotónico inyectable
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 60.0,
        default_fee_cents: int = 2500,
        default_currency: str = "usd",
        repository: Optional[AppSettingRepository] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._default_fee = default_fee_cents
        self._default_currency = default_currency
        self._repo = repository or AppSettingRepository()
        self._clock = clock
        self._cached: Optional[MembershipConfig] = None
        self._loaded_at: float = 0.0
        self._lock = asyncio.Lock()

    def reload(self) -> None:
        """Invalida el cache; la próxima llamada a load() relee app_settings."""
        self._cached = None
        self._loaded_at = 0.0

    def _is_fresh(self) -> bool:
        return (
            self._cached is not None
            and self._ttl > 0
            and (self._clock() - self._loaded_at) < self._ttl
        )

    async def load(self, session: AsyncSession) -> MembershipConfig:
        if self._is_fresh():
            return self._cached  # type: ignore[return-value]

        async with self._lock:
            if self._is_fresh():
                return self._cached  # type: ignore[return-value]

            values = await self._repo.get_values(
                session,
                [MEMBERSHIP_FEE_KEY, MEMBERSHIP_PRICE_ID_KEY, MEMBERSHIP_CURRENCY_KEY],
            )
            config = self._parse(values)
            self._cached = config
            self._loaded_at = self._clock()
            logger.info(
                "Membership config loaded: fee=%s currency=%s price_id=%s",
                config.membership_fee_cents, config.currency, config.stripe_plan_price_id,
            )
            return config

    def _parse(self, values: dict) -> MembershipConfig:
        raw_fee = values.get(MEMBERSHIP_FEE_KEY)
        if raw_fee is None or str(raw_fee).strip() == "":
            fee = self._default_fee
        else:
            try:
                fee = int(str(raw_fee).strip())
            except ValueError:
                raise MembershipConfigError(
                    f"{MEMBERSHIP_FEE_KEY} debe ser un entero en centavos, recibido: {raw_fee!r}"
                )
            if fee < 0:
                raise MembershipConfigError(
                    f"{MEMBERSHIP_FEE_KEY} no puede ser negativo: {fee}"
                )

        price_id = (values.get(MEMBERSHIP_PRICE_ID_KEY) or "").strip()
        if not price_id:
            raise MembershipConfigError(f"{MEMBERSHIP_PRICE_ID_KEY} no configurado")

        currency = (values.get(MEMBERSHIP_CURRENCY_KEY) or self._default_currency).strip().lower()

        return MembershipConfig(
            membership_fee_cents=fee,
            stripe_plan_price_id=price_id,
            currency=currency,
        )


# Singleton del proceso
_loader: Optional[MembershipConfigLoader] = None


def get_membership_config_loader() -> MembershipConfigLoader:
    global _loader
    if _loader is None:
        settings = get_payments_settings()
        _loader = MembershipConfigLoader(
            ttl_seconds=settings.membership_config_ttl_seconds,
            default_fee_cents=settings.membership_default_fee_cents,
            default_currency=settings.membership_default_currency,
        )
    return _loader


__all__ = [
    "MembershipConfig",
    "MembershipConfigLoader",
    "get_membership_config_loader",
]
