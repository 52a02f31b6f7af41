# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/services/checkout_service.py

Constructor de intents de checkout de membresía.

Decide el flujo según el estado del suscriptor:
- Sin cuenta     → crea la cuenta (insert-or-fetch), invita por email y abre
                   un checkout en modo subscription con el price configurado.
- Cuenta activa  → no llama a Stripe; redirige al login.
- Cuenta inactiva→ checkout en modo payment con el importe prorrateado.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote, urlencode

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.integrations.email_sender import IEmailSender
from ..enums import CheckoutMode
from ..errors import MembershipConfigError
from ..models import GLOBAL_SCOPE
from ..providers.stripe_provider import StripeCheckoutProvider
from ..repository import MemberAccountRepository, MembershipRepository, normalize_email
from ..utils.datetime_helpers import ensure_utc, utcnow
from ..webhooks.events import CHECKOUT_SOURCE
from .config_loader import MembershipConfigLoader
from .proration import compute_charge, is_prorated

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


class CheckoutOptions(BaseModel):
    """Opciones del flujo de checkout."""
    create_account: bool = True
    send_invite: bool = True
    check_existing: bool = True


@dataclass
class CheckoutIntent:
    """Intent efímero: lo que se pidió a Stripe y lo que devolvió."""
    email: str
    full_name: Optional[str]
    phone: Optional[str]
    scope_key: str
    amount_cents: int
    mode: CheckoutMode
    success_url: str
    cancel_url: str
    metadata: Dict[str, str] = field(default_factory=dict)
    prorated: bool = False
    checkout_url: Optional[str] = None
    session_id: Optional[str] = None


@dataclass
class CheckoutResult:
    success: bool
    intent: Optional[CheckoutIntent] = None
    redirect: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "redirect": self.redirect}
        intent = self.intent
        return {
            "success": True,
            "url": intent.checkout_url,
            "session_id": intent.session_id,
            "mode": intent.mode.value,
            "amount_cents": intent.amount_cents,
            "prorated": intent.prorated,
        }


def build_success_url(frontend_url: str, scope_key: str) -> str:
    # El placeholder lo sustituye Stripe: no se codifica
    url = f"{frontend_url}/membership-payment?success=true&session_id={CHECKOUT_SESSION_PLACEHOLDER}"
    if scope_key:
        url += "&" + urlencode({"restaurant_id": scope_key})
    return url


def build_cancel_url(frontend_url: str) -> str:
    return f"{frontend_url}/membership-payment?canceled=true"


def build_login_redirect(frontend_url: str, email: str) -> str:
    return f"{frontend_url}/login?email={quote(email)}"


class CheckoutIntentBuilder:
    """
    Orquesta el checkout de membresía.

    Args:
        provider: proveedor Stripe
        config_loader: loader de MembershipConfig
        email_sender: sender para invitaciones (None → sin invitación)
        frontend_url: URL base del frontend para redirects
        clock: reloj UTC inyectable
    """

    def __init__(
        self,
        *,
        provider: StripeCheckoutProvider,
        config_loader: MembershipConfigLoader,
        frontend_url: Optional[str],
        email_sender: Optional[IEmailSender] = None,
        product_name: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
        accounts: Optional[MemberAccountRepository] = None,
        memberships: Optional[MembershipRepository] = None,
    ):
        self._provider = provider
        self._config_loader = config_loader
        self._frontend_url = (frontend_url or "").rstrip("/")
        self._email_sender = email_sender
        self._product_name = product_name
        self._clock = clock
        self._accounts = accounts or MemberAccountRepository()
        self._memberships = memberships or MembershipRepository()

    async def build(
        self,
        session: AsyncSession,
        *,
        email: str,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
        restaurant_id: Optional[str] = None,
        options: Optional[CheckoutOptions] = None,
    ) -> CheckoutResult:
        """
        Raises:
            MembershipConfigError: configuración incompleta (plan, fee, frontend)
            CheckoutProviderError: Stripe rechazó o no respondió
        """
        options = options or CheckoutOptions()
        email = normalize_email(email)
        scope_key = (restaurant_id or "").strip() or GLOBAL_SCOPE
        now = ensure_utc(self._clock())

        config = await self._config_loader.load(session)
        if not self._frontend_url:
            raise MembershipConfigError("FRONTEND_URL not configured")

        account = await self._accounts.get_by_email(session, email)

        if account is None:
            auth_user_id = None
            if options.create_account:
                account, created = await self._accounts.create_or_get_existing(
                    session,
                    email=email,
                    full_name=full_name,
                    phone=phone,
                    metadata={
                        "full_name": full_name,
                        "phone": phone,
                        "membership_active": False,
                        "needs_password": True,
                    },
                )
                auth_user_id = account.auth_user_id
                if created and options.send_invite:
                    await self._send_invite(email, full_name)
            mode = CheckoutMode.SUBSCRIPTION
            amount_cents = config.membership_fee_cents
            prorated = False
        else:
            auth_user_id = account.auth_user_id
            full_name = full_name or account.full_name
            phone = phone or account.phone
            if options.check_existing:
                membership = await self._memberships.get(session, email, scope_key)
                if membership is not None and membership.is_active_at(now):
                    logger.info(
                        "Active membership found, redirecting to login: email=%s scope=%r",
                        email, scope_key,
                    )
                    return CheckoutResult(
                        success=False,
                        redirect=build_login_redirect(self._frontend_url, email),
                    )
            mode = CheckoutMode.PAYMENT
            amount_cents = compute_charge(config.membership_fee_cents, now.date())
            prorated = is_prorated(now)

        metadata = {
            "user_email": email,
            "user_name": full_name or "",
            "user_phone": phone or "",
            "restaurant_id": scope_key,
            "auth_user_id": str(auth_user_id) if auth_user_id else "",
            "source": CHECKOUT_SOURCE,
        }
        intent = CheckoutIntent(
            email=email,
            full_name=full_name,
            phone=phone,
            scope_key=scope_key,
            amount_cents=amount_cents,
            mode=mode,
            success_url=build_success_url(self._frontend_url, scope_key),
            cancel_url=build_cancel_url(self._frontend_url),
            metadata=metadata,
            prorated=prorated,
        )

        result = await self._provider.create_checkout_session(
            mode=mode,
            customer_email=email,
            success_url=intent.success_url,
            cancel_url=intent.cancel_url,
            metadata=metadata,
            currency=config.currency,
            price_id=config.stripe_plan_price_id,
            amount_cents=amount_cents,
            product_name=self._product_name,
        )
        intent.checkout_url = result.checkout_url
        intent.session_id = result.session_id

        logger.info(
            "Membership checkout created: email=%s mode=%s amount=%s prorated=%s session=%s",
            email, mode.value, amount_cents, prorated, result.session_id,
        )
        return CheckoutResult(success=True, intent=intent)

    async def _send_invite(self, email: str, full_name: Optional[str]) -> None:
        if self._email_sender is None:
            return
        link = f"{self._frontend_url}/set-password?email={quote(email)}"
        try:
            await self._email_sender.send_membership_invite_email(
                to_email=email,
                full_name=full_name or "",
                set_password_link=link,
            )
        except Exception as e:
            logger.warning("Invite email failed (non-fatal): email=%s error=%s", email, e)


__all__ = [
    "CheckoutOptions",
    "CheckoutIntent",
    "CheckoutResult",
    "CheckoutIntentBuilder",
    "build_success_url",
    "build_cancel_url",
    "build_login_redirect",
]
