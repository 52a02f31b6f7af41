# -*- coding: utf-8 -*-
"""Cliente de verificación de pagos de membresía."""

from .verification_poller import MembershipVerificationPoller, PollResult

__all__ = ["MembershipVerificationPoller", "PollResult"]
