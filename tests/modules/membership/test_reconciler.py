# -*- coding: utf-8 -*-
"""
Tests del reconciliador de membresías.

Cubre:
- Alta inicial (now + 1 mes) y sincronización de la metadata de la cuenta
- Redelivery del mismo payment_ref → already_processed sin mutaciones
- Renovación anticipada (extiende desde la vigencia previa) y tardía
- Error de base de datos → MembershipStorageError sin registro de pago
- Fallo del ledger → la membresía se mantiene
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.modules.membership.enums import MembershipStatus, PaymentEventKind
from app.modules.membership.errors import MembershipStorageError
from app.modules.membership.models import BillingHistoryEntry, Membership, PaymentEventRecord
from app.modules.membership.repository import (
    MemberAccountRepository,
    MembershipRepository,
    PaymentEventRepository,
)
from app.modules.membership.services.ledger_service import LedgerInvoiceProducer
from app.modules.membership.services.reconciler import (
    ALREADY_PROCESSED,
    APPLIED,
    MembershipReconciler,
)
from app.modules.membership.webhooks.events import ClassifiedPaymentEvent

UTC = timezone.utc
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def _event(payment_ref="cs_test_1", email="ana@example.com", scope_key="", **kwargs):
    return ClassifiedPaymentEvent(
        kind=kwargs.pop("kind", PaymentEventKind.CHECKOUT_COMPLETED),
        payment_ref=payment_ref,
        email=email,
        scope_key=scope_key,
        amount_cents=kwargs.pop("amount_cents", 2500),
        currency="usd",
        receipt_ref=kwargs.pop("receipt_ref", f"pi_{payment_ref}"),
        event_type=kwargs.pop("event_type", "checkout.session.completed"),
        provider_event_id=kwargs.pop("provider_event_id", "evt_1"),
        **kwargs,
    )


def _as_utc(dt):
    return dt if dt.tzinfo else dt.replace(tzinfo=UTC)


async def _seed_membership(session_factory, *, email, expires_at, scope_key=""):
    async with session_factory() as session:
        session.add(
            Membership(
                email=email,
                scope_key=scope_key,
                status=MembershipStatus.ACTIVE.value,
                activated_at=datetime(2026, 2, 20, 12, 0, tzinfo=UTC),
                expires_at=expires_at,
            )
        )
        await session.commit()


async def _count(session_factory, model):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_first_payment_grants_one_month(session_factory):
    reconciler = MembershipReconciler(clock=lambda: NOW)

    async with session_factory() as session:
        result = await reconciler.apply_payment_event(session, _event())

    assert result.status == APPLIED
    assert result.applied
    assert result.expires_at == datetime(2026, 4, 10, 12, 0, tzinfo=UTC)

    async with session_factory() as session:
        m = await MembershipRepository().get(session, "ana@example.com", "")
        assert m is not None
        assert m.status == MembershipStatus.ACTIVE.value
        assert m.last_payment_ref == "cs_test_1"
        assert m.is_active_at(NOW)
        assert await PaymentEventRepository().exists(session, "cs_test_1")


@pytest.mark.asyncio
async def test_redelivery_is_already_processed_without_mutation(session_factory):
    reconciler = MembershipReconciler(clock=lambda: NOW)

    async with session_factory() as session:
        first = await reconciler.apply_payment_event(session, _event())
    async with session_factory() as session:
        second = await reconciler.apply_payment_event(session, _event(provider_event_id="evt_2"))

    assert first.status == APPLIED
    assert second.status == ALREADY_PROCESSED
    assert second.expires_at is None

    async with session_factory() as session:
        m = await MembershipRepository().get(session, "ana@example.com", "")
        # sigue en la vigencia del primer pago (no se sumó otro mes)
        assert _as_utc(m.expires_at) == datetime(2026, 4, 10, 12, 0, tzinfo=UTC)
    assert await _count(session_factory, PaymentEventRecord) == 1


@pytest.mark.asyncio
async def test_early_renewal_extends_from_previous_expiry(session_factory):
    await _seed_membership(
        session_factory,
        email="ana@example.com",
        expires_at=datetime(2026, 3, 20, 12, 0, tzinfo=UTC),
    )
    reconciler = MembershipReconciler(clock=lambda: NOW)

    async with session_factory() as session:
        result = await reconciler.apply_payment_event(
            session,
            _event(payment_ref="in_renew_1", kind=PaymentEventKind.INVOICE_PAID, event_type="invoice.paid"),
        )

    assert result.expires_at == datetime(2026, 4, 20, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_lapsed_membership_restarts_from_now(session_factory):
    await _seed_membership(
        session_factory,
        email="ana@example.com",
        expires_at=datetime(2026, 3, 1, 0, 0, tzinfo=UTC),
    )
    reconciler = MembershipReconciler(clock=lambda: NOW)

    async with session_factory() as session:
        result = await reconciler.apply_payment_event(session, _event(payment_ref="cs_late"))

    assert result.expires_at == datetime(2026, 4, 10, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_scopes_are_independent(session_factory):
    reconciler = MembershipReconciler(clock=lambda: NOW)

    async with session_factory() as session:
        await reconciler.apply_payment_event(session, _event(payment_ref="cs_a", scope_key="rest-1"))
    async with session_factory() as session:
        await reconciler.apply_payment_event(session, _event(payment_ref="cs_b", scope_key="rest-2"))

    assert await _count(session_factory, Membership) == 2
    async with session_factory() as session:
        assert await MembershipRepository().get(session, "ana@example.com", "") is None


@pytest.mark.asyncio
async def test_account_metadata_reflects_activation(session_factory):
    accounts = MemberAccountRepository()
    async with session_factory() as session:
        account, created = await accounts.create_or_get_existing(
            session,
            email="ana@example.com",
            full_name="Ana",
            phone=None,
            metadata={"membership_active": False, "needs_password": True},
        )
        assert created

    async with session_factory() as session:
        await MembershipReconciler(clock=lambda: NOW).apply_payment_event(session, _event())

    async with session_factory() as session:
        refreshed = await accounts.get_by_email(session, "ana@example.com")
        assert refreshed.account_metadata["membership_active"] is True
        assert refreshed.account_metadata["needs_password"] is True
        assert refreshed.account_metadata["stripe_session_id"] == "cs_test_1"
        assert refreshed.account_metadata["membership_activated_at"] == "2026-03-10T12:00:00Z"

        m = await MembershipRepository().get(session, "ana@example.com", "")
        assert m.auth_user_id == account.auth_user_id


class _FailingMemberships(MembershipRepository):
    async def upsert_on_payment(self, session, **kwargs):
        raise OperationalError("INSERT INTO memberships", {}, Exception("db down"))


@pytest.mark.asyncio
async def test_storage_failure_raises_and_leaves_no_record(session_factory):
    reconciler = MembershipReconciler(clock=lambda: NOW, memberships=_FailingMemberships())

    async with session_factory() as session:
        with pytest.raises(MembershipStorageError):
            await reconciler.apply_payment_event(session, _event())

    # sin registro de idempotencia: la redelivery de Stripe podrá aplicarlo
    async with session_factory() as session:
        assert not await PaymentEventRepository().exists(session, "cs_test_1")
    assert await _count(session_factory, Membership) == 0


class _ExplodingLedger:
    def __init__(self):
        self.calls = 0

    async def record(self, session, **kwargs):
        self.calls += 1
        raise RuntimeError("ledger unavailable")


@pytest.mark.asyncio
async def test_ledger_failure_keeps_membership(session_factory):
    ledger = _ExplodingLedger()
    reconciler = MembershipReconciler(ledger, clock=lambda: NOW)

    async with session_factory() as session:
        result = await reconciler.apply_payment_event(session, _event())

    assert ledger.calls == 1
    assert result.applied
    assert result.invoice_url is None
    async with session_factory() as session:
        m = await MembershipRepository().get(session, "ana@example.com", "")
        assert m.is_active_at(NOW)


@pytest.mark.asyncio
async def test_ledger_receives_payment_and_welcome_email(session_factory, email_stub):
    ledger = LedgerInvoiceProducer(storage_client=None, email_sender=email_stub)
    reconciler = MembershipReconciler(ledger, clock=lambda: NOW)

    async with session_factory() as session:
        result = await reconciler.apply_payment_event(session, _event(receipt_ref="pi_abc"))

    # sin Storage la factura cae al receipt_ref
    assert result.invoice_url == "pi_abc"
    assert await _count(session_factory, BillingHistoryEntry) == 1
    assert [e["kind"] for e in email_stub.sent] == ["welcome"]
    assert email_stub.sent[0]["invoice_url"] == "pi_abc"
