# -*- coding: utf-8 -*-
"""
backend/app/shared/core/request_pool.py

Pool acotado de requests salientes.

Limita cuántas llamadas concurrentes hace el proceso hacia un servicio
externo (p. ej. Supabase Storage). Es un objeto explícito: cada cliente
recibe su pool por constructor y decide el límite.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundedRequestPool:
    """
    Semáforo con nombre y métricas mínimas (en vuelo / completadas).

    Ejemplo:
        pool = BoundedRequestPool("storage", max_concurrency=4)
        resp = await pool.run(retry_with_backoff, client.post, url, content=data)
    """

    def __init__(self, name: str, max_concurrency: int = 4):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency debe ser >= 1, recibido: {max_concurrency}")
        self.name = name
        self.max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._in_flight = 0
        self._completed = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def completed(self) -> int:
        return self._completed

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Ejecuta func(*args, **kwargs) respetando el límite de concurrencia."""
        async with self._semaphore:
            self._in_flight += 1
            logger.debug(
                "[pool:%s] start (in_flight=%d/%d)",
                self.name, self._in_flight, self.max_concurrency,
            )
            try:
                return await func(*args, **kwargs)
            finally:
                self._in_flight -= 1
                self._completed += 1

    def __repr__(self) -> str:
        return (
            f"<BoundedRequestPool(name={self.name!r}, "
            f"max_concurrency={self.max_concurrency}, in_flight={self._in_flight})>"
        )


__all__ = ["BoundedRequestPool"]
# Fin del archivo backend/app/shared/core/request_pool.py
