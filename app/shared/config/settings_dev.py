# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_dev.py

Settings de DESARROLLO local: logs DEBUG legibles, PostgreSQL sin SSL y
CORS abierto al frontend de Vite.

Los webhooks sin firma (ALLOW_INSECURE_WEBHOOKS) solo se aceptan aquí;
ProdSettings los rechaza al cargar.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class DevSettings(BaseAppSettings):
    """Configuración para entorno de desarrollo."""

    python_env: str = "development"
    debug: bool = True

    log_level: str = "DEBUG"
    log_format: str = "plain"

    db_sslmode: str = "disable"

    # Vite (5173) y el preview del frontend (8080)
    allowed_origins: str = Field(
        default="http://localhost:5173,http://localhost:8080",
        validation_alias="CORS_ORIGINS",
    )

    # Storage local (supabase start)
    storage_timeout_sec: float = 5.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["DevSettings"]

# Fin del archivo backend/app/shared/config/settings_dev.py
