# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

SQLAlchemy async. asyncpg detrás de PgBouncer en producción (NullPool, sin
prepared statement cache); cualquier otro driver (sqlite+aiosqlite en tests)
usa la configuración por defecto de SQLAlchemy.

Provee:
- engine (create_async_engine)
- SessionLocal (async_sessionmaker)
- Dependencia FastAPI: get_async_session
- check_database_health()

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncGenerator, Dict
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.shared.config import settings
from app.shared.database.base import Base  # reutilizamos la Base única

logger = logging.getLogger(__name__)

# Silenciar errores ruidosos de cierre de conexiones de NullPool
logging.getLogger("sqlalchemy.pool.impl.NullPool").setLevel(logging.CRITICAL)


def _prepared_statement_name_func() -> str:
    # Nombres únicos: evita colisiones en PgBouncer transaction mode
    return f"__asyncpg_{uuid4().hex[:8]}__"


def _engine_kwargs(url: str) -> Dict[str, Any]:
    """Argumentos del engine según el driver de la URL."""
    kwargs: Dict[str, Any] = {"echo": settings.db_echo_sql}
    if url.startswith("postgresql+asyncpg"):
        connect_args: Dict[str, Any] = {
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
            "prepared_statement_name_func": _prepared_statement_name_func,
            "server_settings": {"search_path": "public"},
            "timeout": settings.db_connect_timeout_s,
            "command_timeout": settings.db_command_timeout_s,
        }
        if settings.db_sslmode in ("require", "verify-full"):
            connect_args["ssl"] = "require"
        kwargs.update(
            poolclass=NullPool,
            pool_pre_ping=False,
            execution_options={"prepared_statement_cache_size": 0},
            connect_args=connect_args,
        )
    return kwargs


DATABASE_URL = settings.database_url

logger.info(
    "[DB] engine → %s (echo=%s)",
    DATABASE_URL.split("@")[-1],
    settings.db_echo_sql,
)

engine = create_async_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

# ── Session factory
SessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
    autoflush=False,
)


# ── Dependencia FastAPI
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        try:
            yield session
        except SQLAlchemyError:
            # rollback para liberar cualquier transacción/lock
            await session.rollback()
            raise
        finally:
            if session.in_transaction():
                await session.rollback()


# ── Health check
async def check_database_health(timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
    """
    Verifica conectividad a la base de datos.

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with engine.connect() as conn:
                await conn.execute(text(sql))
        return True
    except Exception as e:
        logger.warning("[DB] health check failed: %s", e)
        return False


__all__ = [
    "engine",
    "SessionLocal",
    "Base",
    "get_async_session",
    "check_database_health",
]
# Fin del archivo backend/app/shared/database/database.py
