# -*- coding: utf-8 -*-
import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_env_and_cache(monkeypatch):
    """
    Aísla variables de entorno y limpia el caché de get_settings() en cada test.
    """
    for k in list(os.environ.keys()):
        if k.startswith(("DB_", "STRIPE_", "EMAIL_", "CORS_", "APP_", "SUPABASE_", "MAILERSEND_", "LOG_", "MEMBERSHIP_", "STORAGE_")):
            monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("PYTHON_ENV", "development")

    from app.shared.config import config_loader
    from app.shared.config import settings_payments

    config_loader.get_settings.cache_clear()
    settings_payments.reset_payments_settings()

    yield

    # El siguiente test (o la app) vuelve a leer el entorno restaurado
    config_loader.get_settings.cache_clear()
    settings_payments.reset_payments_settings()
# Fin del archivo backend/tests/shared/config/conftest.py
