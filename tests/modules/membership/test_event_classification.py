# -*- coding: utf-8 -*-
"""
Tests de clasificación de eventos Stripe → eventos de pago de dominio.
"""

from app.modules.membership.enums import PaymentEventKind
from app.modules.membership.webhooks.events import (
    classify_checkout_session,
    classify_event,
    classify_invoice,
)


def _checkout(**overrides):
    obj = {
        "id": "cs_test_123",
        "object": "checkout.session",
        "payment_status": "paid",
        "status": "complete",
        "customer_email": "Ana@Example.com ",
        "amount_total": 2500,
        "currency": "USD",
        "payment_intent": "pi_123",
        "subscription": None,
        "metadata": {"user_name": "Ana", "restaurant_id": "rest-9"},
    }
    obj.update(overrides)
    return obj


def _invoice(**overrides):
    obj = {
        "id": "in_456",
        "object": "invoice",
        "billing_reason": "subscription_cycle",
        "customer_email": "ana@example.com",
        "amount_paid": 2500,
        "currency": "usd",
        "hosted_invoice_url": "https://invoice.stripe.test/in_456",
        "subscription": "sub_1",
        "subscription_details": {"metadata": {"restaurant_id": "rest-9"}},
    }
    obj.update(overrides)
    return obj


def _event(event_type, obj, event_id="evt_1"):
    return {"id": event_id, "type": event_type, "data": {"object": obj}}


class TestCheckoutSession:
    def test_paid_session_is_accepted(self):
        c = classify_event(_event("checkout.session.completed", _checkout()))
        assert c.accepted
        ev = c.event
        assert ev.kind == PaymentEventKind.CHECKOUT_COMPLETED
        assert ev.payment_ref == "cs_test_123"
        assert ev.email == "ana@example.com"
        assert ev.scope_key == "rest-9"
        assert ev.amount_cents == 2500
        assert ev.currency == "usd"
        assert ev.receipt_ref == "pi_123"
        assert ev.provider_event_id == "evt_1"
        assert ev.full_name == "Ana"

    def test_email_fallback_order(self):
        c = classify_checkout_session(
            _checkout(customer_email=None, customer_details={"email": "details@example.com"})
        )
        assert c.event.email == "details@example.com"

        c = classify_checkout_session(
            _checkout(customer_email=None, metadata={"user_email": "meta@example.com"})
        )
        assert c.event.email == "meta@example.com"

    def test_missing_email_is_dropped(self):
        c = classify_checkout_session(_checkout(customer_email=None, metadata={}))
        assert c.status == "dropped"
        assert c.reason == "missing_email"
        assert c.event is None

    def test_unpaid_session_is_ignored(self):
        c = classify_checkout_session(_checkout(payment_status="unpaid"))
        assert c.status == "ignored"
        assert c.reason == "payment_status_unpaid"

    def test_no_payment_required_is_accepted(self):
        c = classify_checkout_session(_checkout(payment_status="no_payment_required"))
        assert c.accepted

    def test_global_scope_and_receipt_fallback(self):
        c = classify_checkout_session(_checkout(metadata={}, payment_intent=None))
        assert c.event.scope_key == ""
        assert c.event.receipt_ref == "cs_test_123"

    def test_subscription_id_is_carried(self):
        c = classify_checkout_session(_checkout(subscription="sub_9"))
        assert c.event.subscription_id == "sub_9"

    def test_session_from_another_checkout_flow_is_ignored(self):
        c = classify_checkout_session(
            _checkout(metadata={"source": "ticket_purchase", "restaurant_id": "rest-9"})
        )
        assert c.status == "ignored"
        assert c.reason == "foreign_source"

    def test_membership_source_is_accepted(self):
        c = classify_checkout_session(_checkout(metadata={"source": "membership_checkout"}))
        assert c.accepted

    def test_scope_up_to_stripe_metadata_limit_is_kept(self):
        rid = "r" * 500
        c = classify_checkout_session(_checkout(metadata={"restaurant_id": rid}))
        assert c.accepted
        assert c.event.scope_key == rid

    def test_oversized_scope_is_dropped(self):
        c = classify_checkout_session(_checkout(metadata={"restaurant_id": "r" * 501}))
        assert c.status == "dropped"
        assert c.reason == "invalid_scope"


class TestInvoice:
    def test_renewal_invoice_is_accepted(self):
        c = classify_event(_event("invoice.paid", _invoice()))
        assert c.accepted
        ev = c.event
        assert ev.kind == PaymentEventKind.INVOICE_PAID
        assert ev.payment_ref == "in_456"
        assert ev.scope_key == "rest-9"
        assert ev.receipt_ref == "https://invoice.stripe.test/in_456"
        assert ev.subscription_id == "sub_1"

    def test_subscription_create_is_ignored(self):
        c = classify_invoice(_invoice(billing_reason="subscription_create"))
        assert c.status == "ignored"
        assert c.reason == "subscription_create"

    def test_invoice_without_email_is_dropped(self):
        c = classify_invoice(_invoice(customer_email=""))
        assert c.status == "dropped"
        assert c.reason == "missing_email"

    def test_scope_falls_back_to_invoice_metadata(self):
        c = classify_invoice(
            _invoice(subscription_details={}, metadata={"restaurant_id": "rest-2"})
        )
        assert c.event.scope_key == "rest-2"

    def test_invoice_of_another_subscription_product_is_ignored(self):
        c = classify_invoice(
            _invoice(subscription_details={"metadata": {"source": "restaurant_plan"}})
        )
        assert c.status == "ignored"
        assert c.reason == "foreign_source"


def test_unhandled_event_type_is_ignored():
    c = classify_event(_event("customer.created", {"id": "cus_1"}))
    assert c.status == "ignored"
    assert c.reason == "unhandled_event_type"


def test_malformed_event_is_ignored():
    c = classify_event({"type": "checkout.session.completed", "data": None})
    assert c.status == "ignored"

    def test_oversized_invoice_scope_is_dropped(self):
        c = classify_invoice(
            _invoice(subscription_details={"metadata": {"restaurant_id": "r" * 501}})
        )
        assert c.status == "dropped"
        assert c.reason == "invalid_scope"
