# -*- coding: utf-8 -*-
"""
backend/app/shared/config/__init__.py

Punto único de acceso a la configuración:
    from app.shared.config import settings, get_settings
    from app.shared.config import get_payments_settings

`settings` se resuelve una sola vez al importar (singleton de config_loader).
Código que necesite releer el entorno (tests) debe llamar
`get_settings.cache_clear()` y usar `get_settings()` directamente.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

from .config_loader import get_settings
from .settings_base import BaseAppSettings
from .settings_payments import PaymentsSettings, get_payments_settings
from .logging_config import setup_logging

settings: BaseAppSettings = get_settings()

__all__ = [
    "settings",
    "get_settings",
    "BaseAppSettings",
    "PaymentsSettings",
    "get_payments_settings",
    "setup_logging",
]

# Fin del archivo backend/app/shared/config/__init__.py
