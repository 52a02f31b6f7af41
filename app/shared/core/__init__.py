# -*- coding: utf-8 -*-
"""
backend/app/shared/core/__init__.py

Primitivas compartidas para llamadas salientes: pool de concurrencia
acotada y reintentos con backoff exponencial.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from .http_retry_utils import retry_with_backoff, with_retry
from .request_pool import BoundedRequestPool

__all__ = [
    "retry_with_backoff",
    "with_retry",
    "BoundedRequestPool",
]
