# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/client/verification_poller.py

Cliente que confirma un pago de membresía tras el redirect de Stripe.

Consulta GET /api/membership/verify?session_id=... hasta obtener un
resultado terminal:
- success → dispara on_success (navegación) una sola vez
- error   → resultado terminal
- pending / fallo de transporte / 5xx → reintento con backoff exponencial
  con jitter, hasta max_attempts; agotados → error terminal

Guard por session_id: una segunda llamada para la misma sesión espera el
intento en curso (o devuelve el resultado ya obtenido) sin emitir requests.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from app.shared.core.http_retry_utils import jittered_delay, next_delay
from ..enums import VerificationStatus

logger = logging.getLogger(__name__)

VERIFY_PATH = "/api/membership/verify"


def _json_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    """Cuerpo JSON como dict; None si no es JSON o no es un objeto."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


@dataclass
class PollResult:
    status: VerificationStatus
    session_id: str
    attempts: int
    detail: Optional[str] = None
    expires_at: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == VerificationStatus.SUCCESS


class MembershipVerificationPoller:
    """
    Args:
        base_url: URL base del backend
        http_client: cliente httpx (si no se provee se crea uno propio)
        max_attempts: intentos máximos por sesión
        base_delay: delay inicial entre intentos (segundos)
        max_delay: tope del backoff
        sleep: función de espera inyectable
        on_success: callback de navegación (sync o async)
    """

    def __init__(
        self,
        base_url: str,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        max_attempts: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 8.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_success: Optional[Callable[[PollResult], Any]] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep
        self._on_success = on_success
        self._guard: Dict[str, asyncio.Future] = {}
        self._navigated: set[str] = set()

    async def verify(self, session_id: str, already_processed: bool = False) -> PollResult:
        """
        Verifica la sesión; idempotente por session_id.

        already_processed=True indica que el caller ya confirmó el pago en
        una visita previa: no se consulta al backend.
        """
        existing = self._guard.get(session_id)
        if existing is not None:
            logger.debug("Verification already in flight or done: session=%s", session_id)
            return await asyncio.shield(existing)

        future: asyncio.Future = asyncio.ensure_future(self._run(session_id, already_processed))
        self._guard[session_id] = future
        future.add_done_callback(lambda done: self._drop_if_failed(session_id, done))
        return await asyncio.shield(future)

    def _drop_if_failed(self, session_id: str, future: asyncio.Future) -> None:
        # Un fallo inesperado no debe quedar cacheado para la sesión
        if future.cancelled() or future.exception() is not None:
            if self._guard.get(session_id) is future:
                self._guard.pop(session_id, None)

    async def _run(self, session_id: str, already_processed: bool) -> PollResult:
        if already_processed:
            result = PollResult(
                status=VerificationStatus.SUCCESS,
                session_id=session_id,
                attempts=0,
                detail="already_processed",
            )
            await self._fire_success(result)
            return result

        delay = self.base_delay
        last_detail: Optional[str] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await self._client.get(
                    f"{self.base_url}{VERIFY_PATH}",
                    params={"session_id": session_id},
                )
                if response.status_code >= 500:
                    last_detail = f"http_{response.status_code}"
                elif response.status_code >= 400:
                    logger.warning(
                        "Verification rejected: session=%s status=%d",
                        session_id, response.status_code,
                    )
                    return PollResult(
                        status=VerificationStatus.ERROR,
                        session_id=session_id,
                        attempts=attempt,
                        detail=f"http_{response.status_code}",
                    )
                else:
                    body = _json_body(response)
                    if body is None:
                        # proxy/gateway con HTML u otro cuerpo no JSON: se reintenta
                        last_detail = "invalid_body"
                        logger.warning(
                            "Verification attempt %d/%d returned a non-JSON body: session=%s",
                            attempt, self.max_attempts, session_id,
                        )
                        status = None
                    else:
                        status = body.get("status")
                    if status == VerificationStatus.SUCCESS.value:
                        result = PollResult(
                            status=VerificationStatus.SUCCESS,
                            session_id=session_id,
                            attempts=attempt,
                            detail=body.get("detail"),
                            expires_at=body.get("expires_at"),
                        )
                        await self._fire_success(result)
                        return result
                    if status == VerificationStatus.ERROR.value:
                        return PollResult(
                            status=VerificationStatus.ERROR,
                            session_id=session_id,
                            attempts=attempt,
                            detail=body.get("detail"),
                        )
                    if body is not None:
                        last_detail = body.get("detail") or "pending"
            except httpx.HTTPError as e:
                last_detail = f"transport_error: {e}"
                logger.warning(
                    "Verification attempt %d/%d failed: session=%s error=%s",
                    attempt, self.max_attempts, session_id, e,
                )

            if attempt < self.max_attempts:
                await self._sleep(jittered_delay(delay))
                delay = next_delay(delay, 2.0, self.max_delay)

        logger.warning(
            "Verification gave up after %d attempts: session=%s last=%s",
            self.max_attempts, session_id, last_detail,
        )
        return PollResult(
            status=VerificationStatus.ERROR,
            session_id=session_id,
            attempts=self.max_attempts,
            detail=f"verification_timeout: {last_detail}",
        )

    async def _fire_success(self, result: PollResult) -> None:
        if self._on_success is None or result.session_id in self._navigated:
            return
        self._navigated.add(result.session_id)
        outcome = self._on_success(result)
        if asyncio.iscoroutine(outcome):
            await outcome

    def reset(self, session_id: str) -> None:
        """Permite volver a verificar una sesión (nuevo intento explícito del usuario)."""
        self._guard.pop(session_id, None)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = [
    "VERIFY_PATH",
    "PollResult",
    "MembershipVerificationPoller",
]
