# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Determinista: logging moderado, SQLite en memoria por defecto, email en consola
y Storage deshabilitado (las facturas caen al receipt reference).

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from typing import Optional

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class EnvTestingSettings(BaseAppSettings):
    python_env: str = "test"

    log_level: str = "WARNING"
    log_format: str = "pretty"

    db_url: Optional[str] = "sqlite+aiosqlite:///:memory:"
    db_sslmode: str = "disable"

    email_mode: str = "console"

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo backend/app/shared/config/settings_testing.py
