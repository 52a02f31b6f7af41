# -*- coding: utf-8 -*-
"""
backend/app/shared/core/http_retry_utils.py

Utilidades para reintentos con backoff exponencial y jitter en llamadas HTTP
hacia servicios externos (Supabase Storage, API de verificación).

Uso:
    from app.shared.core.http_retry_utils import retry_with_backoff

    response = await retry_with_backoff(
        client.post,
        "https://project.supabase.co/storage/v1/object/bucket/path.pdf",
        max_retries=3,
        base_delay=0.5,
        content=pdf_bytes,
    )

    @with_retry(max_retries=2)
    async def fetch(...): ...

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations
import asyncio
import functools
import logging
import random
from typing import Awaitable, Callable, Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUS = frozenset({429, 500, 502, 503, 504})


def jittered_delay(delay: float) -> float:
    """Añade hasta 20% de jitter para evitar thundering herd."""
    return delay + random.uniform(0, 0.2 * delay)


def next_delay(delay: float, backoff_factor: float, max_delay: float) -> float:
    return min(delay * backoff_factor, max_delay)


async def retry_with_backoff(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    retry_on_status: Optional[set[int]] = None,
    auto_raise: bool = False,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **kwargs
) -> httpx.Response:
    """
    Ejecuta una función HTTP con reintentos y backoff exponencial.

    Args:
        func: Función async a ejecutar (ej: client.get, client.post)
        *args: Argumentos posicionales para func
        max_retries: Número máximo de reintentos
        base_delay: Delay inicial en segundos
        max_delay: Delay máximo en segundos
        backoff_factor: Factor de multiplicación del delay
        retry_on_status: Set de códigos HTTP que deben reintentarse (default: 429/5xx)
        auto_raise: Si True, llama raise_for_status() en la respuesta final
        sleep: Función de espera (inyectable en tests)
        **kwargs: Argumentos nombrados para func

    Returns:
        Response de httpx si tiene éxito

    Raises:
        httpx.HTTPError: Si todos los reintentos fallan
    """
    if max_retries < 0:
        raise ValueError(f"max_retries debe ser >= 0, recibido: {max_retries}")
    if base_delay <= 0:
        raise ValueError(f"base_delay debe ser > 0, recibido: {base_delay}")

    if retry_on_status is None:
        retry_on_status = set(DEFAULT_RETRY_STATUS)

    delay = base_delay

    for attempt in range(max_retries + 1):
        try:
            response = await func(*args, **kwargs)
        except (httpx.TransportError, httpx.TimeoutException) as e:
            if attempt >= max_retries:
                logger.error(
                    "Transport error after %d attempts: %s", max_retries + 1, e
                )
                raise
            logger.warning(
                "Transport error (%s) on attempt %d/%d, retrying in %.1fs",
                type(e).__name__, attempt + 1, max_retries + 1, delay,
            )
            await sleep(jittered_delay(delay))
            delay = next_delay(delay, backoff_factor, max_delay)
            continue

        if response.status_code in retry_on_status:
            if attempt < max_retries:
                logger.warning(
                    "HTTP %d on attempt %d/%d, retrying in %.1fs",
                    response.status_code, attempt + 1, max_retries + 1, delay,
                )
                await sleep(jittered_delay(delay))
                delay = next_delay(delay, backoff_factor, max_delay)
                continue
            logger.error(
                "HTTP %d after %d attempts", response.status_code, max_retries + 1
            )
            response.raise_for_status()

        if attempt > 0:
            logger.info("Request succeeded after %d attempts", attempt + 1)

        if auto_raise:
            response.raise_for_status()

        return response

    raise RuntimeError("Reintentos agotados sin excepción clara")


def with_retry(
    *,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    retry_on_status: Optional[set[int]] = None,
    auto_raise: bool = False,
):
    """
    Decorador: aplica retry_with_backoff a una corrutina que devuelve httpx.Response.

    Ejemplo:
        @with_retry(max_retries=2, base_delay=0.2)
        async def upload(client, url, data):
            return await client.post(url, content=data)
    """
    def decorator(func: Callable[..., Awaitable[httpx.Response]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> httpx.Response:
            return await retry_with_backoff(
                func,
                *args,
                max_retries=max_retries,
                base_delay=base_delay,
                max_delay=max_delay,
                backoff_factor=backoff_factor,
                retry_on_status=retry_on_status,
                auto_raise=auto_raise,
                **kwargs,
            )
        return wrapper
    return decorator


__all__ = [
    "DEFAULT_RETRY_STATUS",
    "jittered_delay",
    "next_delay",
    "retry_with_backoff",
    "with_retry",
]
# Fin del archivo backend/app/shared/core/http_retry_utils.py
