# -*- coding: utf-8 -*-
from datetime import datetime, timezone

import pytest

from app.modules.membership.repository import (
    AppSettingRepository,
    MemberAccountRepository,
    MembershipRepository,
    PaymentEventRepository,
    normalize_email,
)

UTC = timezone.utc
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def test_normalize_email():
    assert normalize_email("  Ana@Example.COM ") == "ana@example.com"
    assert normalize_email(None) == ""


@pytest.mark.asyncio
async def test_create_or_get_existing_is_insert_or_fetch(session_factory):
    repo = MemberAccountRepository()

    async with session_factory() as session:
        first, created_first = await repo.create_or_get_existing(
            session, email="Ana@Example.com", full_name="Ana", phone=None, metadata={"a": 1}
        )
    async with session_factory() as session:
        second, created_second = await repo.create_or_get_existing(
            session, email="ana@example.com", full_name="Otra", phone="1", metadata={"b": 2}
        )

    assert created_first is True
    assert created_second is False
    assert first.auth_user_id == second.auth_user_id
    # la cuenta existente no se sobrescribe
    assert second.full_name == "Ana"
    assert second.account_metadata == {"a": 1}


@pytest.mark.asyncio
async def test_mark_membership_active_without_account_is_noop(session_factory):
    async with session_factory() as session:
        result = await MemberAccountRepository().mark_membership_active(
            session, email="ghost@example.com", activated_at=NOW, payment_ref="cs_1"
        )
    assert result is None


@pytest.mark.asyncio
async def test_record_if_new_detects_duplicates(session_factory):
    repo = PaymentEventRepository()
    kwargs = dict(
        payment_ref="cs_1",
        provider_event_id="evt_1",
        event_type="checkout.session.completed",
        email="ana@example.com",
        scope_key="",
        amount_cents=2500,
        processed_at=NOW,
    )
    async with session_factory() as session:
        assert await repo.record_if_new(session, **kwargs) is True
        await session.commit()
        assert await repo.record_if_new(session, **{**kwargs, "provider_event_id": "evt_2"}) is False
        await session.rollback()

        record = await repo.get_by_payment_ref(session, "cs_1")
        assert record.provider_event_id == "evt_1"


@pytest.mark.asyncio
async def test_upsert_on_payment_inserts_then_updates(session_factory):
    repo = MembershipRepository()
    async with session_factory() as session:
        first_id, first_expiry = await repo.upsert_on_payment(
            session,
            email="ana@example.com",
            scope_key="",
            now=NOW,
            fresh_expiry=datetime(2026, 4, 10, 12, 0, tzinfo=UTC),
            payment_ref="cs_1",
            subscription_id="sub_1",
        )
        await session.commit()

        second_id, second_expiry = await repo.upsert_on_payment(
            session,
            email="ana@example.com",
            scope_key="",
            now=NOW,
            fresh_expiry=datetime(2026, 4, 10, 12, 0, tzinfo=UTC),
            payment_ref="in_2",
        )
        await session.commit()

    assert first_id == second_id
    assert first_expiry == datetime(2026, 4, 10, 12, 0, tzinfo=UTC)
    assert second_expiry == datetime(2026, 5, 10, 12, 0, tzinfo=UTC)

    async with session_factory() as session:
        m = await repo.get(session, "ana@example.com", "")
        assert m.last_payment_ref == "in_2"
        # coalesce: un pago sin subscription_id no borra el existente
        assert m.stripe_subscription_id == "sub_1"


@pytest.mark.asyncio
async def test_app_setting_values(seed_membership_settings, db_session):
    await seed_membership_settings(fee="1000", price_id="price_x")
    values = await AppSettingRepository().get_values(
        db_session, ["membership_fee", "membership_stripe_price_id", "missing"]
    )
    assert values == {"membership_fee": "1000", "membership_stripe_price_id": "price_x"}
