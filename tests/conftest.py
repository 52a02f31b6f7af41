# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests del backend de membresías.

- Entorno de pruebas (PYTHON_ENV=test) fijado ANTES de importar app.*
- Motor ASYNC: sqlite+aiosqlite en memoria (StaticPool) con create_all
- App FastAPI real con dependency_overrides para Stripe, email y Storage
- Helper para firmar webhooks con el esquema real de Stripe (t=..., v1=...)
"""

import hashlib
import hmac
import json
import os
import time
from collections.abc import AsyncIterator
from typing import Any, Dict, List, Optional

import pytest

# -----------------------------------------------------------------------------
# 0) Entorno mínimo (antes de cualquier import de app.*)
# -----------------------------------------------------------------------------
TEST_WEBHOOK_SECRET = "whsec_test_secret"
TEST_FRONTEND_URL = "https://app.eatmeet.test"

os.environ["PYTHON_ENV"] = "test"
os.environ["STRIPE_WEBHOOK_SECRET"] = TEST_WEBHOOK_SECRET
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["FRONTEND_URL"] = TEST_FRONTEND_URL
os.environ["EMAIL_MODE"] = "console"
os.environ["CORS_ORIGINS"] = "*"
for _var in ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "ALLOW_INSECURE_WEBHOOKS", "DB_URL"):
    os.environ.pop(_var, None)

from httpx import ASGITransport, AsyncClient
from asgi_lifespan import LifespanManager
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.shared.config.settings_payments import reset_payments_settings
from app.shared.database.base import Base
from app.shared.integrations.email_sender import StubEmailSender
from app.modules.membership import models  # noqa: F401  registra tablas en Base.metadata
from app.modules.membership.errors import CheckoutProviderError
from app.modules.membership.models import AppSetting, MEMBERSHIP_FEE_KEY, MEMBERSHIP_PRICE_ID_KEY
from app.modules.membership.providers.stripe_provider import StripeSessionResult


# -----------------------------------------------------------------------------
# 1) Base de datos en memoria
# -----------------------------------------------------------------------------
@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        bind=db_engine,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed_membership_settings(session_factory):
    """Escribe app_settings; por defecto fee=2500 y un price id válido."""

    async def _seed(fee: Optional[str] = "2500", price_id: Optional[str] = "price_test_membership"):
        async with session_factory() as session:
            if fee is not None:
                session.add(AppSetting(key=MEMBERSHIP_FEE_KEY, value=fee))
            if price_id is not None:
                session.add(AppSetting(key=MEMBERSHIP_PRICE_ID_KEY, value=price_id))
            await session.commit()

    return _seed


# -----------------------------------------------------------------------------
# 2) Fakes de colaboradores externos
# -----------------------------------------------------------------------------
class FakeStripeProvider:
    """Sustituto de StripeCheckoutProvider: registra llamadas, sin red."""

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.fail_create = False
        self.fail_retrieve = False
        self.retrieve_calls = 0

    async def create_checkout_session(self, **kwargs) -> StripeSessionResult:
        if self.fail_create:
            raise CheckoutProviderError("Stripe unavailable")
        self.created.append(kwargs)
        session_id = f"cs_test_{len(self.created)}"
        return StripeSessionResult(
            checkout_url=f"https://checkout.stripe.test/{session_id}",
            session_id=session_id,
        )

    async def retrieve_checkout_session(self, session_id: str) -> Dict[str, Any]:
        self.retrieve_calls += 1
        if self.fail_retrieve:
            raise CheckoutProviderError("Stripe unreachable")
        return self.sessions[session_id]


@pytest.fixture
def fake_stripe() -> FakeStripeProvider:
    return FakeStripeProvider()


@pytest.fixture
def email_stub() -> StubEmailSender:
    return StubEmailSender()


# -----------------------------------------------------------------------------
# 3) App FastAPI y cliente httpx (con ciclo de vida)
# -----------------------------------------------------------------------------
@pytest.fixture
def app(session_factory, fake_stripe, email_stub):
    """
    App principal con dependencias sustituidas:
    sesión de BD de prueba, Stripe fake, email en memoria y sin Storage.
    """
    reset_payments_settings()

    from app.main import app as fastapi_app
    from app.shared.database.database import get_async_session
    from app.modules.membership import dependencies as deps
    from app.modules.membership.services.config_loader import MembershipConfigLoader

    async def _get_session_override():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_async_session] = _get_session_override
    fastapi_app.dependency_overrides[deps.get_checkout_provider] = lambda: fake_stripe
    fastapi_app.dependency_overrides[deps.get_membership_email_sender] = lambda: email_stub
    fastapi_app.dependency_overrides[deps.get_storage_client] = lambda: None
    fastapi_app.dependency_overrides[deps.get_config_loader] = lambda: MembershipConfigLoader(ttl_seconds=0)

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()
    reset_payments_settings()


@pytest.fixture
async def async_client(app) -> AsyncIterator[AsyncClient]:
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client


# -----------------------------------------------------------------------------
# 4) Webhooks firmados
# -----------------------------------------------------------------------------
def stripe_signature(payload: bytes, secret: str = TEST_WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Header Stripe-Signature válido para el payload dado."""
    ts = int(timestamp if timestamp is not None else time.time())
    signed = f"{ts}.".encode("utf-8") + payload
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"


def build_event(event_type: str, obj: Dict[str, Any], event_id: str = "evt_test_1") -> bytes:
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "data": {"object": obj},
        }
    ).encode("utf-8")


@pytest.fixture
def sign_payload():
    """Firma un body arbitrario con el secret de pruebas."""
    return stripe_signature


@pytest.fixture
def signed_event():
    """Devuelve (body, headers) listos para POST al webhook."""

    def _make(event_type: str, obj: Dict[str, Any], event_id: str = "evt_test_1"):
        body = build_event(event_type, obj, event_id)
        headers = {
            "Stripe-Signature": stripe_signature(body),
            "Content-Type": "application/json",
        }
        return body, headers

    return _make
