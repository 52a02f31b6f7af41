# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/services/status_service.py

Consulta del estado de membresía de un email (global o por restaurante).

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..repository import MemberAccountRepository, MembershipRepository
from ..utils.datetime_helpers import ensure_utc, to_iso8601, utcnow

SECONDS_PER_DAY = 86400


@dataclass
class MembershipStatusView:
    user_exists: bool
    active: bool
    expires_at: Optional[datetime]
    remaining_days: int

    def to_response(self) -> Dict[str, Any]:
        return {
            "user_exists": self.user_exists,
            "active": self.active,
            "expires_at": to_iso8601(self.expires_at),
            "remaining_days": self.remaining_days,
        }


def remaining_days_until(expires_at: Optional[datetime], now: datetime) -> int:
    """Días restantes redondeados hacia arriba; nunca negativo."""
    if expires_at is None:
        return 0
    seconds = (ensure_utc(expires_at) - now).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


async def lookup_membership_status(
    session: AsyncSession,
    email: str,
    scope_key: str = "",
    *,
    now: Optional[datetime] = None,
) -> MembershipStatusView:
    now = ensure_utc(now or utcnow())
    account = await MemberAccountRepository().get_by_email(session, email)
    membership = await MembershipRepository().get(session, email, scope_key)

    if membership is None:
        return MembershipStatusView(
            user_exists=account is not None,
            active=False,
            expires_at=None,
            remaining_days=0,
        )

    expires_at = ensure_utc(membership.expires_at) if membership.expires_at else None
    return MembershipStatusView(
        user_exists=account is not None,
        active=membership.is_active_at(now),
        expires_at=expires_at,
        remaining_days=remaining_days_until(expires_at, now),
    )


__all__ = [
    "MembershipStatusView",
    "remaining_days_until",
    "lookup_membership_status",
]
