# -*- coding: utf-8 -*-
from datetime import datetime, timedelta, timezone

from app.modules.membership.services.status_service import remaining_days_until
from app.modules.membership.utils.datetime_helpers import (
    add_months,
    ensure_utc,
    to_iso8601,
    utcnow,
)

UTC = timezone.utc


def test_utcnow_is_aware():
    assert utcnow().tzinfo == UTC


def test_ensure_utc_naive_and_offset():
    naive = datetime(2026, 1, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    plus_two = datetime(2026, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    converted = ensure_utc(plus_two)
    assert converted.tzinfo == UTC
    assert converted.hour == 12


def test_add_months_clamps_to_month_end():
    assert add_months(datetime(2026, 1, 31, tzinfo=UTC)) == datetime(2026, 2, 28, tzinfo=UTC)
    assert add_months(datetime(2028, 1, 31, tzinfo=UTC)) == datetime(2028, 2, 29, tzinfo=UTC)
    assert add_months(datetime(2026, 3, 31, tzinfo=UTC)) == datetime(2026, 4, 30, tzinfo=UTC)


def test_add_months_rolls_year_and_keeps_time():
    start = datetime(2026, 12, 15, 8, 30, tzinfo=UTC)
    assert add_months(start) == datetime(2027, 1, 15, 8, 30, tzinfo=UTC)
    assert add_months(start, 13) == datetime(2028, 1, 15, 8, 30, tzinfo=UTC)


def test_to_iso8601():
    assert to_iso8601(None) is None
    assert to_iso8601(datetime(2026, 10, 26, 14, 30, tzinfo=UTC)) == "2026-10-26T14:30:00Z"
    assert to_iso8601(datetime(2026, 10, 26, 14, 30)) == "2026-10-26T14:30:00Z"


def test_remaining_days_rounds_up_and_never_negative():
    now = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
    assert remaining_days_until(None, now) == 0
    assert remaining_days_until(now + timedelta(days=10), now) == 10
    assert remaining_days_until(now + timedelta(days=9, hours=1), now) == 10
    assert remaining_days_until(now + timedelta(seconds=1), now) == 1
    assert remaining_days_until(now - timedelta(days=3), now) == 0
