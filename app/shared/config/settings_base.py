# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_base.py

Base de configuración (Pydantic v2) para el backend de membresías.
- Esta clase NO instancia singletons; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.
- La configuración de Stripe vive en settings_payments.py.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from typing import Literal, Optional
from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="EatMeetClub Membership", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="eatmeet", validation_alias="DB_NAME")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_sslmode: str = Field(default="prefer", validation_alias="DB_SSLMODE")  # prefer|require|disable
    db_connect_timeout_s: float = Field(default=5.0, validation_alias="DB_CONNECT_TIMEOUT_S")
    db_command_timeout_s: float = Field(default=5.0, validation_alias="DB_COMMAND_TIMEOUT_S")
    db_url: Optional[str] = Field(default=None, validation_alias="DB_URL")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        URL de conexión para SQLAlchemy async.
        Prioriza DB_URL; los esquemas postgres:// se normalizan a asyncpg.
        Cualquier otro driver (p. ej. sqlite+aiosqlite en tests) se respeta tal cual.
        """
        from urllib.parse import quote_plus

        if self.db_url:
            url = self.db_url
            if url.startswith("postgres://") or url.startswith("postgresql://"):
                url = (
                    url.replace("postgres://", "postgresql+asyncpg://", 1)
                       .replace("postgresql://", "postgresql+asyncpg://", 1)
                )
            return url

        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{self.db_user}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @computed_field  # type: ignore[misc]
    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")

    # =========================
    # Supabase (Storage para facturas)
    # =========================
    supabase_url: Optional[str] = Field(default=None, validation_alias="SUPABASE_URL")
    supabase_service_role_key: Optional[SecretStr] = Field(default=None, validation_alias="SUPABASE_SERVICE_ROLE_KEY")
    storage_timeout_sec: float = Field(default=15.0, validation_alias="STORAGE_TIMEOUT_SEC")

    # =========================
    # CORS / Frontend
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")
    frontend_url: str = Field(default="http://localhost:8080", validation_alias="FRONTEND_URL")

    # =========================
    # Email
    # =========================
    email_mode: Literal["console", "api"] = Field(default="console", validation_alias="EMAIL_MODE")
    email_provider: Literal["mailersend", ""] = Field(default="", validation_alias="EMAIL_PROVIDER")
    email_timeout_sec: int = Field(default=30, validation_alias="EMAIL_TIMEOUT_SEC")
    email_from: str = Field(default="no-reply@eatmeetclub.com", validation_alias="EMAIL_FROM")

    # MailerSend API (solo aplica si email_mode == "api")
    mailersend_api_key: Optional[SecretStr] = Field(default=None, validation_alias="MAILERSEND_API_KEY")
    mailersend_from_email: Optional[str] = Field(default=None, validation_alias="MAILERSEND_FROM_EMAIL")
    mailersend_from_name: Optional[str] = Field(default="Eat Meet Club", validation_alias="MAILERSEND_FROM_NAME")

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "pretty", "plain"] = Field(default="pretty", validation_alias="LOG_FORMAT")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    @computed_field  # type: ignore[misc]
    @property
    def storage_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    # ===== Utilidad para normalizar CORS =====
    def get_cors_origins(self) -> list[str]:
        """Convierte allowed_origins en lista procesable para CORS middleware."""
        if not self.allowed_origins or self.allowed_origins == "*":
            return ["*"]
        return [o.strip().strip('"').strip("'") for o in self.allowed_origins.split(",") if o.strip()]

    def _security_checks(self) -> None:
        """
        Validaciones mínimas de seguridad y coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        if self.is_prod:
            if self.is_postgres and self.db_sslmode != "require":
                raise ValueError("DB_SSLMODE debe ser 'require' en producción")
            if not self.storage_configured:
                logger.warning("SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY not set; invoices will fall back to receipt references")

        # Validación mínima para email, según modo (evita deploys "a medias")
        if self.email_mode == "api":
            if not self.mailersend_api_key or not self.mailersend_from_email:
                raise ValueError("EMAIL_MODE=api requiere MAILERSEND_API_KEY y MAILERSEND_FROM_EMAIL.")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName"]
# Fin del archivo backend/app/shared/config/settings_base.py
