# -*- coding: utf-8 -*-
"""
backend/app/shared/config/config_loader.py

Selecciona la clase de settings a partir de PYTHON_ENV y la cachea
(singleton). Acepta alias cortos (dev, prod, testing) para que los
despliegues no dependan del nombre exacto.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

import logging
import os
from functools import lru_cache
from typing import Dict, Type

from .settings_base import BaseAppSettings
from .settings_dev import DevSettings
from .settings_prod import ProdSettings
from .settings_testing import EnvTestingSettings

logger = logging.getLogger(__name__)

_ENV_ALIASES: Dict[str, str] = {
    "dev": "development",
    "local": "development",
    "prod": "production",
    "testing": "test",
}

_SETTINGS_BY_ENV: Dict[str, Type[BaseAppSettings]] = {
    "development": DevSettings,
    "test": EnvTestingSettings,
    "production": ProdSettings,
}


def resolve_env_name(raw: str | None) -> str:
    """Normaliza PYTHON_ENV; valores desconocidos caen a development."""
    env = (raw or "development").strip().lower()
    env = _ENV_ALIASES.get(env, env)
    return env if env in _SETTINGS_BY_ENV else "development"


@lru_cache(maxsize=1)
def get_settings() -> BaseAppSettings:
    """
    Devuelve la configuración del entorno actual.

    Raises:
        ValueError: si las validaciones de seguridad fallan
    """
    env = resolve_env_name(os.getenv("PYTHON_ENV"))
    settings = _SETTINGS_BY_ENV[env](python_env=env)
    settings._security_checks()
    logger.debug("Settings loaded: env=%s class=%s", env, type(settings).__name__)
    return settings


__all__ = ["get_settings", "resolve_env_name"]
# Fin del archivo backend/app/shared/config/config_loader.py
