# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/services/proration.py

Cálculo de prorrateo para membresías.

Política: si el día del mes de la fecha de referencia es mayor que 15 se
cobra la mitad de la cuota (redondeo half away from zero sobre centavos);
en caso contrario, la cuota completa.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

PRORATION_CUTOFF_DAY = 15


def round_half_away_from_zero_div2(amount_cents: int) -> int:
    """
    amount/2 redondeado half away from zero, en aritmética entera.

    Examples:
        >>> round_half_away_from_zero_div2(2500)
        1250
        >>> round_half_away_from_zero_div2(2501)
        1251
        >>> round_half_away_from_zero_div2(1)
        1
    """
    return (amount_cents + 1) // 2


def compute_charge(base_fee_cents: int, reference_date: Union[date, datetime]) -> int:
    """
    Importe a cobrar para un periodo parcial.

    Args:
        base_fee_cents: Cuota completa en centavos (>= 0)
        reference_date: Fecha de referencia (date o datetime)

    Returns:
        Importe en centavos

    Raises:
        ValueError: si la cuota es negativa
    """
    if base_fee_cents < 0:
        raise ValueError(f"base_fee_cents debe ser >= 0, recibido: {base_fee_cents}")
    if reference_date.day > PRORATION_CUTOFF_DAY:
        return round_half_away_from_zero_div2(base_fee_cents)
    return base_fee_cents


def is_prorated(reference_date: Union[date, datetime]) -> bool:
    return reference_date.day > PRORATION_CUTOFF_DAY


__all__ = [
    "PRORATION_CUTOFF_DAY",
    "compute_charge",
    "is_prorated",
    "round_half_away_from_zero_div2",
]
