# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from .database import (
    engine,
    SessionLocal,
    get_async_session,
    check_database_health,
)
from .base import Base, NAMING_CONVENTION, JSONDocument, BigIntPK
from .upsert import dialect_insert, add_months

__all__ = [
    "engine",
    "SessionLocal",
    "Base",
    "NAMING_CONVENTION",
    "JSONDocument",
    "BigIntPK",
    "get_async_session",
    "check_database_health",
    "dialect_insert",
    "add_months",
]

# Fin del archivo backend/app/shared/database/__init__.py
