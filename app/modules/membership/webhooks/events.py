# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/webhooks/events.py

Clasificación de eventos Stripe en eventos de pago de dominio.

- checkout.session.completed → checkout_completed
- invoice.paid               → invoice_paid (excepto billing_reason=subscription_create)
- cualquier otro tipo        → ignored

Sin email identificable el evento se descarta (dropped): no hay a quién
otorgar la membresía.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..enums import PaymentEventKind
from ..models.membership import SCOPE_KEY_MAX_LENGTH

CHECKOUT_COMPLETED_TYPE = "checkout.session.completed"
INVOICE_PAID_TYPE = "invoice.paid"

PAID_CHECKOUT_STATUSES = ("paid", "no_payment_required")
SUBSCRIPTION_CREATE_REASON = "subscription_create"

# metadata.source que el checkout de membresías pone en la sesión y la suscripción
CHECKOUT_SOURCE = "membership_checkout"
FOREIGN_SOURCE_REASON = "foreign_source"


@dataclass
class ClassifiedPaymentEvent:
    """Evento de pago normalizado, independiente del payload de Stripe."""
    kind: PaymentEventKind
    payment_ref: str
    email: str
    scope_key: str
    amount_cents: int
    currency: str
    receipt_ref: Optional[str]
    event_type: str
    provider_event_id: Optional[str] = None
    subscription_id: Optional[str] = None
    full_name: Optional[str] = None
    auth_user_id: Optional[str] = None


@dataclass
class Classification:
    """accepted (con event), ignored o dropped (con reason)."""
    status: str
    event: Optional[ClassifiedPaymentEvent] = None
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status == "accepted"


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_email(value: Any) -> Optional[str]:
    text = _clean(value)
    return text.lower() if text else None


def _is_foreign_source(metadata: Mapping[str, Any]) -> bool:
    """Sesiones sin source se aceptan (checkouts creados antes de marcar el origen)."""
    source = _clean(metadata.get("source"))
    return source is not None and source != CHECKOUT_SOURCE


def classify_checkout_session(
    checkout_session: Mapping[str, Any],
    *,
    provider_event_id: Optional[str] = None,
    event_type: str = CHECKOUT_COMPLETED_TYPE,
) -> Classification:
    """
    Clasifica un objeto Checkout Session (del webhook o de una consulta directa).
    """
    session_id = _clean(checkout_session.get("id"))
    payment_status = checkout_session.get("payment_status")
    if payment_status not in PAID_CHECKOUT_STATUSES:
        return Classification(status="ignored", reason=f"payment_status_{payment_status}")

    metadata = _mapping(checkout_session.get("metadata"))
    if _is_foreign_source(metadata):
        return Classification(status="ignored", reason=FOREIGN_SOURCE_REASON)

    customer_details = _mapping(checkout_session.get("customer_details"))
    email = (
        _normalize_email(checkout_session.get("customer_email"))
        or _normalize_email(customer_details.get("email"))
        or _normalize_email(metadata.get("user_email"))
    )
    if not email:
        return Classification(status="dropped", reason="missing_email")
    if not session_id:
        return Classification(status="dropped", reason="missing_payment_ref")

    scope_key = _clean(metadata.get("restaurant_id")) or ""
    if len(scope_key) > SCOPE_KEY_MAX_LENGTH:
        return Classification(status="dropped", reason="invalid_scope")

    return Classification(
        status="accepted",
        event=ClassifiedPaymentEvent(
            kind=PaymentEventKind.CHECKOUT_COMPLETED,
            payment_ref=session_id,
            email=email,
            scope_key=scope_key,
            amount_cents=int(checkout_session.get("amount_total") or 0),
            currency=(_clean(checkout_session.get("currency")) or "usd").lower(),
            receipt_ref=_clean(checkout_session.get("payment_intent")) or session_id,
            event_type=event_type,
            provider_event_id=provider_event_id,
            subscription_id=_clean(checkout_session.get("subscription")),
            full_name=_clean(metadata.get("user_name")) or _clean(customer_details.get("name")),
            auth_user_id=_clean(metadata.get("auth_user_id")),
        ),
    )


def classify_invoice(
    invoice: Mapping[str, Any],
    *,
    provider_event_id: Optional[str] = None,
) -> Classification:
    """Clasifica un invoice.paid (renovación de suscripción)."""
    if invoice.get("billing_reason") == SUBSCRIPTION_CREATE_REASON:
        # El primer periodo ya lo otorgó checkout.session.completed
        return Classification(status="ignored", reason="subscription_create")

    subscription_metadata = _mapping(_mapping(invoice.get("subscription_details")).get("metadata"))
    if _is_foreign_source(subscription_metadata):
        return Classification(status="ignored", reason=FOREIGN_SOURCE_REASON)

    invoice_id = _clean(invoice.get("id"))
    email = _normalize_email(invoice.get("customer_email"))
    if not email:
        return Classification(status="dropped", reason="missing_email")
    if not invoice_id:
        return Classification(status="dropped", reason="missing_payment_ref")

    metadata = _mapping(invoice.get("metadata"))
    scope_key = (
        _clean(subscription_metadata.get("restaurant_id"))
        or _clean(metadata.get("restaurant_id"))
        or ""
    )
    if len(scope_key) > SCOPE_KEY_MAX_LENGTH:
        return Classification(status="dropped", reason="invalid_scope")

    return Classification(
        status="accepted",
        event=ClassifiedPaymentEvent(
            kind=PaymentEventKind.INVOICE_PAID,
            payment_ref=invoice_id,
            email=email,
            scope_key=scope_key,
            amount_cents=int(invoice.get("amount_paid") or 0),
            currency=(_clean(invoice.get("currency")) or "usd").lower(),
            receipt_ref=_clean(invoice.get("hosted_invoice_url")) or invoice_id,
            event_type=INVOICE_PAID_TYPE,
            provider_event_id=provider_event_id,
            subscription_id=_clean(invoice.get("subscription")),
            full_name=_clean(invoice.get("customer_name")),
            auth_user_id=_clean(subscription_metadata.get("auth_user_id")),
        ),
    )


def classify_event(event: Mapping[str, Any]) -> Classification:
    """
    Clasifica un evento Stripe completo (payload JSON ya verificado).
    """
    event_type = event.get("type")
    event_id = _clean(event.get("id"))
    obj: Dict[str, Any] = dict(_mapping(_mapping(event.get("data")).get("object")))

    if event_type == CHECKOUT_COMPLETED_TYPE:
        return classify_checkout_session(obj, provider_event_id=event_id)
    if event_type == INVOICE_PAID_TYPE:
        return classify_invoice(obj, provider_event_id=event_id)
    return Classification(status="ignored", reason="unhandled_event_type")


__all__ = [
    "CHECKOUT_COMPLETED_TYPE",
    "INVOICE_PAID_TYPE",
    "CHECKOUT_SOURCE",
    "FOREIGN_SOURCE_REASON",
    "ClassifiedPaymentEvent",
    "Classification",
    "classify_checkout_session",
    "classify_invoice",
    "classify_event",
]
