# -*- coding: utf-8 -*-
"""
backend/app/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- JSONDocument: tipo JSON portable (JSONB en PostgreSQL, JSON en SQLite)
- BigIntPK: BIGINT autoincremental (INTEGER en SQLite)

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from sqlalchemy import JSON, BigInteger, Integer, MetaData
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# JSONB en producción; JSON genérico en SQLite (tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")

# SQLite solo autoincrementa INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


__all__ = ["Base", "NAMING_CONVENTION", "JSONDocument", "BigIntPK"]

# Fin del archivo backend/app/shared/database/base.py
