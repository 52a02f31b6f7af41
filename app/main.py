# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada principal del backend de membresías.

Ajustes clave:
- .env cargado antes de cualquier import que lea configuración
- Logging centralizado (plain/json) vía setup_logging
- Ciclo de vida: verificación de base de datos al arrancar y cierre del
  cliente de Storage al apagar
- CORS desde CORS_ORIGINS (fail-closed en producción)
- JSONExceptionMiddleware + RequestLoggingMiddleware
- Health (/health, /api/health/live) y módulo de membresías bajo /api

Autor: EatMeetClub
Fecha: 2026-10-19
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

# ---------------------------------------------------------------------------
# Cargar .env ANTES de cualquier import que use os.getenv
# En PROD: override=False para respetar variables del entorno de la plataforma
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_PYTHON_ENV = os.getenv("PYTHON_ENV", "development").strip().lower()
load_dotenv(dotenv_path=_ENV_PATH, override=_PYTHON_ENV == "development")

import anyio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.shared.config import get_settings, setup_logging

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)

from app.shared.database.database import check_database_health
from app.shared.middleware import JSONExceptionMiddleware, RequestLoggingMiddleware
from app.modules.membership.dependencies import close_storage_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ────────── STARTUP ──────────
    if await check_database_health(timeout_s=3.0):
        logger.info("Database reachable")
    else:
        logger.warning("Database not reachable at startup; requests will fail until it recovers")

    logger.info("%s started (env=%s)", settings.app_name, settings.python_env)
    try:
        yield
    finally:
        # ────────── SHUTDOWN ──────────
        with anyio.CancelScope(shield=True):
            try:
                await close_storage_client()
            except Exception as e:
                logger.warning("Error closing storage client: %s", e)
        logger.info("%s stopped", settings.app_name)


openapi_tags = [
    {"name": "membership", "description": "Checkout, verificación y estado de membresías"},
    {"name": "membership:webhooks", "description": "Webhooks de Stripe"},
    {"name": "health", "description": "Health checks"},
]

app = FastAPI(
    title=settings.app_name,
    description="Motor de suscripciones de membresía y reconciliación de pagos",
    version=settings.app_version,
    lifespan=lifespan,
    openapi_tags=openapi_tags,
)


def _configure_cors(app_instance: FastAPI) -> dict:
    """
    Configura CORS.

    En producción solo se aceptan orígenes explícitos (sin wildcard).
    """
    origins = settings.get_cors_origins()
    if settings.is_prod and (not origins or "*" in origins):
        logger.error("CORS_ORIGINS must list explicit origins in production; CORS disabled")
        origins = []

    allow_credentials = "*" not in origins
    cors_config = {
        "allow_origins": origins,
        "allow_credentials": allow_credentials,
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": ["*"],
        "max_age": 600,
    }
    app_instance.add_middleware(CORSMiddleware, **cors_config)
    return cors_config


_cors = _configure_cors(app)
logger.info("CORS configured: origins=%s", _cors["allow_origins"])

app.add_middleware(RequestLoggingMiddleware)
# Registrado al final: envuelve a todos los demás
app.add_middleware(JSONExceptionMiddleware)

# Incluye router maestro
from app.routes import router as main_router

app.include_router(main_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.is_dev,
    )

# Fin del archivo backend/app/main.py
