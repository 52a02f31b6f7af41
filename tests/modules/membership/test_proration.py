# -*- coding: utf-8 -*-
"""
Tests del cálculo de prorrateo de la membresía.

Regla: día del mes > 15 → mitad de la cuota (half away from zero);
en otro caso, cuota completa.
"""

from datetime import date, datetime, timezone

import pytest

from app.modules.membership.services.proration import (
    PRORATION_CUTOFF_DAY,
    compute_charge,
    is_prorated,
    round_half_away_from_zero_div2,
)


@pytest.mark.parametrize("day", range(1, 16))
def test_first_half_of_month_charges_full_fee(day):
    assert compute_charge(2500, date(2026, 3, day)) == 2500
    assert not is_prorated(date(2026, 3, day))


@pytest.mark.parametrize("day", range(16, 32))
def test_second_half_of_month_charges_half_fee(day):
    assert compute_charge(2500, date(2026, 3, day)) == 1250
    assert is_prorated(date(2026, 3, day))


def test_cutoff_day_is_fifteen():
    assert PRORATION_CUTOFF_DAY == 15
    assert compute_charge(1000, date(2026, 1, 15)) == 1000
    assert compute_charge(1000, date(2026, 1, 16)) == 500


@pytest.mark.parametrize(
    "fee, expected",
    [
        (2501, 1251),
        (1, 1),
        (3, 2),
        (0, 0),
        (9999, 5000),
    ],
)
def test_odd_fees_round_half_away_from_zero(fee, expected):
    assert round_half_away_from_zero_div2(fee) == expected
    assert compute_charge(fee, date(2026, 5, 20)) == expected


def test_accepts_datetime():
    ref = datetime(2026, 10, 19, 23, 59, tzinfo=timezone.utc)
    assert compute_charge(2500, ref) == 1250


def test_leap_february_end_of_month():
    assert compute_charge(2500, date(2028, 2, 29)) == 1250
    assert compute_charge(2500, date(2026, 2, 28)) == 1250


def test_negative_fee_raises():
    with pytest.raises(ValueError):
        compute_charge(-1, date(2026, 1, 1))
