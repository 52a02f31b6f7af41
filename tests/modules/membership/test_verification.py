# -*- coding: utf-8 -*-
"""
Tests de GET /api/membership/verify y del servicio de verificación.

El webhook y /verify comparten la clave de idempotencia (session id):
el que llegue primero aplica el pago, el otro lo ve como ya procesado.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from app.modules.membership.enums import VerificationStatus
from app.modules.membership.models import PaymentEventRecord
from app.modules.membership.services.reconciler import MembershipReconciler
from app.modules.membership.services.verification_service import MembershipVerificationService

VERIFY_URL = "/api/membership/verify"
UTC = timezone.utc


def _session(session_id="cs_test_v1", **overrides):
    obj = {
        "id": session_id,
        "object": "checkout.session",
        "status": "complete",
        "payment_status": "paid",
        "customer_email": "ana@example.com",
        "amount_total": 1250,
        "currency": "usd",
        "payment_intent": "pi_v1",
        "metadata": {"restaurant_id": ""},
    }
    obj.update(overrides)
    return obj


async def _payment_records(session_factory):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(PaymentEventRecord))).scalar_one()


@pytest.mark.asyncio
async def test_paid_session_is_reconciled_on_verify(async_client, fake_stripe, session_factory):
    fake_stripe.sessions["cs_test_v1"] = _session()

    r = await async_client.get(VERIFY_URL, params={"session_id": "cs_test_v1"})

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "success"
    assert body["already_processed"] is False
    assert body["expires_at"] is not None
    assert await _payment_records(session_factory) == 1


@pytest.mark.asyncio
async def test_verify_then_webhook_applies_once(async_client, fake_stripe, signed_event, session_factory):
    fake_stripe.sessions["cs_test_v1"] = _session()
    await async_client.get(VERIFY_URL, params={"session_id": "cs_test_v1"})

    body, headers = signed_event("checkout.session.completed", _session())
    r = await async_client.post("/api/membership/webhooks/stripe", content=body, headers=headers)

    assert r.json()["status"] == "already_processed"
    assert await _payment_records(session_factory) == 1


@pytest.mark.asyncio
async def test_webhook_then_verify_skips_provider(async_client, fake_stripe, signed_event):
    body, headers = signed_event("checkout.session.completed", _session())
    await async_client.post("/api/membership/webhooks/stripe", content=body, headers=headers)

    r = await async_client.get(VERIFY_URL, params={"session_id": "cs_test_v1"})

    data = r.json()
    assert data["status"] == "success"
    assert data["already_processed"] is True
    assert data["expires_at"] is not None
    assert fake_stripe.retrieve_calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, expected_status, expected_detail",
    [
        ({"status": "open", "payment_status": "unpaid"}, "pending", "session_open"),
        ({"status": "expired", "payment_status": "unpaid"}, "error", "checkout_session_expired"),
        ({"payment_status": "unpaid"}, "pending", "payment_status_unpaid"),
        ({"customer_email": None}, "error", "missing_email"),
        ({"metadata": {"source": "ticket_purchase"}}, "error", "foreign_source"),
    ],
)
async def test_non_success_outcomes(
    async_client, fake_stripe, session_factory, overrides, expected_status, expected_detail
):
    fake_stripe.sessions["cs_test_v1"] = _session(**overrides)

    r = await async_client.get(VERIFY_URL, params={"session_id": "cs_test_v1"})

    assert r.status_code == 200
    assert r.json()["status"] == expected_status
    assert r.json()["detail"] == expected_detail
    assert await _payment_records(session_factory) == 0


@pytest.mark.asyncio
async def test_provider_unreachable_is_pending(async_client, fake_stripe):
    fake_stripe.fail_retrieve = True

    r = await async_client.get(VERIFY_URL, params={"session_id": "cs_test_v1"})

    assert r.status_code == 200
    assert r.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_session_id_is_required(async_client):
    r = await async_client.get(VERIFY_URL)
    assert r.status_code == 422


class _StripeObject:
    """Imita un StripeObject: expone to_dict()."""

    def __init__(self, data):
        self._data = data

    def to_dict(self):
        return dict(self._data)


class _ObjectProvider:
    def __init__(self, data):
        self._data = data

    async def retrieve_checkout_session(self, session_id):
        return _StripeObject(self._data)


@pytest.mark.asyncio
async def test_service_accepts_stripe_objects(session_factory):
    now = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
    service = MembershipVerificationService(
        provider=_ObjectProvider(_session("cs_obj")),
        reconciler=MembershipReconciler(clock=lambda: now),
    )

    async with session_factory() as session:
        outcome = await service.verify(session, "cs_obj")

    assert outcome.status == VerificationStatus.SUCCESS
    assert outcome.expires_at == datetime(2026, 4, 10, 12, 0, tzinfo=UTC)
    assert outcome.to_response()["expires_at"] == "2026-04-10T12:00:00+00:00"
