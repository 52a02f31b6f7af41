# -*- coding: utf-8 -*-
from datetime import datetime, timedelta, timezone

import pytest

from app.modules.membership.enums import MembershipStatus
from app.modules.membership.models import Membership
from app.modules.membership.repository import MemberAccountRepository
from app.modules.membership.services.status_service import lookup_membership_status

STATUS_URL = "/api/membership/status"
UTC = timezone.utc


async def _seed(session_factory, *, expires_at, status=MembershipStatus.ACTIVE.value, scope_key=""):
    async with session_factory() as session:
        await MemberAccountRepository().create_or_get_existing(
            session, email="ana@example.com", full_name="Ana", phone=None, metadata={}
        )
        session.add(
            Membership(
                email="ana@example.com",
                scope_key=scope_key,
                status=status,
                activated_at=datetime(2026, 1, 1, tzinfo=UTC),
                expires_at=expires_at,
            )
        )
        await session.commit()


@pytest.mark.asyncio
async def test_unknown_email(async_client):
    r = await async_client.post(STATUS_URL, json={"email": "nobody@example.com"})

    assert r.status_code == 200
    assert r.json() == {
        "user_exists": False,
        "active": False,
        "expires_at": None,
        "remaining_days": 0,
    }


@pytest.mark.asyncio
async def test_active_membership(async_client, session_factory):
    expires = datetime.now(UTC) + timedelta(days=10, hours=1)
    await _seed(session_factory, expires_at=expires)

    body = (await async_client.post(STATUS_URL, json={"email": "ANA@example.com"})).json()

    assert body["user_exists"] is True
    assert body["active"] is True
    assert body["remaining_days"] == 11
    assert body["expires_at"].endswith("Z")


@pytest.mark.asyncio
async def test_scoped_membership_is_separate(async_client, session_factory):
    await _seed(
        session_factory,
        expires_at=datetime.now(UTC) + timedelta(days=5),
        scope_key="rest-1",
    )

    global_body = (await async_client.post(STATUS_URL, json={"email": "ana@example.com"})).json()
    scoped_body = (
        await async_client.post(STATUS_URL, json={"email": "ana@example.com", "restaurant_id": "rest-1"})
    ).json()

    assert global_body["user_exists"] is True
    assert global_body["active"] is False
    assert scoped_body["active"] is True


@pytest.mark.asyncio
async def test_expired_membership_is_inactive(session_factory):
    now = datetime(2026, 3, 10, tzinfo=UTC)
    await _seed(session_factory, expires_at=datetime(2026, 3, 1, tzinfo=UTC))

    async with session_factory() as session:
        view = await lookup_membership_status(session, "ana@example.com", now=now)
    assert view.active is False
    assert view.remaining_days == 0
    assert view.expires_at == datetime(2026, 3, 1, tzinfo=UTC)


@pytest.mark.asyncio
async def test_canceled_membership_is_inactive(session_factory):
    now = datetime(2026, 3, 10, tzinfo=UTC)
    await _seed(
        session_factory,
        expires_at=datetime(2026, 4, 1, tzinfo=UTC),
        status=MembershipStatus.CANCELED.value,
    )

    async with session_factory() as session:
        view = await lookup_membership_status(session, "ana@example.com", now=now)
    assert view.active is False
    assert view.remaining_days == 22


@pytest.mark.asyncio
async def test_null_expiry_is_active_indefinitely(session_factory):
    await _seed(session_factory, expires_at=None)

    async with session_factory() as session:
        view = await lookup_membership_status(session, "ana@example.com")
    assert view.active is True
    assert view.remaining_days == 0
