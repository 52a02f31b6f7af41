# -*- coding: utf-8 -*-
"""
backend/app/shared/database/upsert.py

Helpers SQL portables para escrituras atómicas:

- dialect_insert(session, table): INSERT con soporte ON CONFLICT del dialecto
  activo (PostgreSQL en producción, SQLite en tests). Ambos exponen
  on_conflict_do_nothing / on_conflict_do_update con la misma firma.
- add_months(expr, n): aritmética de calendario evaluada en el servidor,
  para que el cálculo y la escritura ocurran en la misma sentencia.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import DateTime, literal_column
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement


def dialect_insert(session: AsyncSession, table: Any):
    """
    Devuelve un INSERT del dialecto de la sesión con soporte ON CONFLICT.

    Raises:
        NotImplementedError: si el dialecto no soporta upsert nativo
    """
    name = session.get_bind().dialect.name
    if name == "postgresql":
        return pg_insert(table)
    if name == "sqlite":
        return sqlite_insert(table)
    raise NotImplementedError(f"Upsert no soportado para dialecto {name!r}")


class add_months(FunctionElement):
    """
    expr + n meses de calendario, evaluado por la base de datos.

    PostgreSQL recorta al último día del mes (31-ene + 1 mes = 28/29-feb).
    """
    type = DateTime(timezone=True)
    name = "add_months"
    inherit_cache = True

    def __init__(self, expr: Any, months: int = 1):
        # El número de meses va como literal: forma parte del cache key
        super().__init__(expr, literal_column(str(int(months))))


@compiles(add_months)
def _add_months_default(element, compiler, **kw):
    expr, months = list(element.clauses)
    return "(%s + make_interval(months => %s))" % (
        compiler.process(expr, **kw),
        compiler.process(months, **kw),
    )


@compiles(add_months, "sqlite")
def _add_months_sqlite(element, compiler, **kw):
    expr, months = list(element.clauses)
    return "datetime(%s, '+' || %s || ' months')" % (
        compiler.process(expr, **kw),
        compiler.process(months, **kw),
    )


__all__ = ["dialect_insert", "add_months"]
# Fin del archivo backend/app/shared/database/upsert.py
