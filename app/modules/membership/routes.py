# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/routes.py

Rutas públicas de membresía.

Endpoints:
- POST /api/membership/checkout
- GET  /api/membership/verify?session_id=...
- POST /api/membership/status

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.database import get_async_session

from .dependencies import get_checkout_builder, get_verification_service
from .errors import (
    CheckoutErrorCodes,
    CheckoutProviderError,
    MembershipConfigError,
    MembershipStorageError,
)
from .schemas import (
    MembershipCheckoutRequest,
    MembershipCheckoutResponse,
    MembershipStatusRequest,
    MembershipStatusResponse,
    MembershipVerifyResponse,
)
from .services.checkout_service import CheckoutIntentBuilder
from .services.status_service import lookup_membership_status
from .services.verification_service import MembershipVerificationService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/membership",
    tags=["membership"],
)


def _error_envelope(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": code, "detail": message},
    )


@router.post(
    "/checkout",
    response_model=MembershipCheckoutResponse,
    response_model_exclude_none=True,
    summary="Iniciar checkout de membresía",
    description="""
    Crea una Stripe Checkout Session para la membresía.

    - Email sin cuenta: crea la cuenta y abre un checkout de suscripción.
    - Membresía activa: no crea sesión; devuelve redirect al login.
    - Cuenta sin membresía activa: pago único con prorrateo (día > 15 → 50%).
    """,
)
async def start_membership_checkout(
    payload: MembershipCheckoutRequest,
    session: AsyncSession = Depends(get_async_session),
    builder: CheckoutIntentBuilder = Depends(get_checkout_builder),
):
    try:
        result = await builder.build(
            session,
            email=payload.email,
            full_name=payload.name,
            phone=payload.phone,
            restaurant_id=payload.restaurant_id,
            options=payload.options,
        )
    except MembershipConfigError as e:
        logger.error("Membership checkout misconfigured: %s", e)
        return _error_envelope(
            status.HTTP_500_INTERNAL_SERVER_ERROR, CheckoutErrorCodes.CONFIG_ERROR, str(e)
        )
    except CheckoutProviderError as e:
        return _error_envelope(
            status.HTTP_502_BAD_GATEWAY, CheckoutErrorCodes.PROVIDER_ERROR, str(e)
        )

    return result.to_response()


@router.get(
    "/verify",
    response_model=MembershipVerifyResponse,
    summary="Verificar sesión de checkout",
)
async def verify_membership_payment(
    session_id: str = Query(..., min_length=1, max_length=255),
    session: AsyncSession = Depends(get_async_session),
    service: MembershipVerificationService = Depends(get_verification_service),
) -> MembershipVerifyResponse:
    """
    Confirma el pago al volver de Stripe. Si Stripe ya reporta la sesión como
    pagada y el webhook aún no llegó, reconcilia aquí con la misma clave de
    idempotencia.
    """
    try:
        outcome = await service.verify(session, session_id)
    except MembershipConfigError as e:
        logger.error("Membership verification misconfigured: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payments not configured",
        )
    except MembershipStorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    return MembershipVerifyResponse(**outcome.to_response())


@router.post(
    "/status",
    response_model=MembershipStatusResponse,
    summary="Estado de membresía por email",
)
async def membership_status(
    payload: MembershipStatusRequest,
    session: AsyncSession = Depends(get_async_session),
) -> MembershipStatusResponse:
    view = await lookup_membership_status(
        session,
        payload.email,
        (payload.restaurant_id or "").strip(),
    )
    return MembershipStatusResponse(**view.to_response())


__all__ = ["router"]
