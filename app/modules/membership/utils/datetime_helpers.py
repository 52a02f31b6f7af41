# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/utils/datetime_helpers.py

Utilidades para timestamps UTC y aritmética de meses de calendario.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

import calendar
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Retorna el timestamp UTC actual (timezone-aware).

    Examples:
        >>> utcnow().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Asegura que un datetime sea UTC timezone-aware.
    SQLite devuelve datetimes naive: se interpretan como UTC.

    Examples:
        >>> ensure_utc(datetime(2026, 1, 1)).tzinfo == timezone.utc
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    if dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def add_months(dt: datetime, months: int = 1) -> datetime:
    """
    Suma meses de calendario recortando al último día del mes destino
    (misma semántica que interval 'N months' de PostgreSQL).

    Examples:
        >>> add_months(datetime(2026, 1, 31), 1)
        datetime.datetime(2026, 2, 28, 0, 0)
        >>> add_months(datetime(2028, 1, 31), 1)
        datetime.datetime(2028, 2, 29, 0, 0)
        >>> add_months(datetime(2026, 12, 15), 1)
        datetime.datetime(2027, 1, 15, 0, 0)
    """
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def to_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """
    Convierte datetime a ISO 8601 con 'Z' para UTC.

    Examples:
        >>> to_iso8601(datetime(2026, 10, 26, 14, 30, tzinfo=timezone.utc))
        '2026-10-26T14:30:00Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace('+00:00', 'Z')


__all__ = ["utcnow", "ensure_utc", "add_months", "to_iso8601"]
# Fin del archivo
