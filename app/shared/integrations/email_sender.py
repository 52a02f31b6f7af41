# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/email_sender.py

Factory unificado para EmailSender.
Soporta dos modos:
- console: stub que solo loguea (desarrollo/tests)
- api: envío via API (MailerSend)

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from app.shared.config.settings_base import BaseAppSettings

logger = logging.getLogger(__name__)


class IEmailSender(Protocol):
    """Protocolo para implementaciones de email sender."""
    async def send_membership_invite_email(
        self, to_email: str, full_name: str, set_password_link: Optional[str]
    ) -> None: ...

    async def send_membership_welcome_email(
        self, to_email: str, full_name: str, invoice_url: str, paid_through: str
    ) -> None: ...


class StubEmailSender:
    """Implementación que no envía correos; solo hace logging (modo console)."""

    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send_membership_invite_email(
        self, to_email: str, full_name: str, set_password_link: Optional[str]
    ) -> None:
        logger.info("[CONSOLE EMAIL] Invitación → %s | link=%s", to_email, bool(set_password_link))
        self.sent.append({"kind": "invite", "to": to_email, "link": set_password_link})

    async def send_membership_welcome_email(
        self, to_email: str, full_name: str, invoice_url: str, paid_through: str
    ) -> None:
        logger.info("[CONSOLE EMAIL] Bienvenida → %s | factura=%s | vigente hasta %s", to_email, invoice_url, paid_through)
        self.sent.append({"kind": "welcome", "to": to_email, "invoice_url": invoice_url})


class EmailSender:
    """
    Factory unificado para selección de email sender.

    Variables de entorno (via settings):
    - email_mode: console | api
    - email_provider: mailersend (usado cuando email_mode=api)
    """

    @staticmethod
    def from_settings(settings: BaseAppSettings) -> IEmailSender:
        """
        Crea el email sender apropiado según settings.

        Raises:
            ValueError: si email_mode=api pero el proveedor no es soportado
        """
        mode = (settings.email_mode or "console").strip().lower()
        provider = (settings.email_provider or "").strip().lower()

        logger.info("[EmailSender] mode=%r provider=%r", mode, provider)

        if mode in ("console", "stub", "local", ""):
            return StubEmailSender()

        if mode == "api":
            if provider in ("mailersend", ""):
                from app.shared.integrations.mailersend_email_sender import MailerSendEmailSender
                return MailerSendEmailSender.from_settings(settings)

            raise ValueError(
                f"EMAIL_PROVIDER '{provider}' no soportado. "
                f"Configure EMAIL_PROVIDER=mailersend o cambie EMAIL_MODE."
            )

        if settings.is_prod:
            raise ValueError(
                f"EMAIL_MODE '{mode}' no reconocido. Configure EMAIL_MODE=console|api"
            )

        logger.warning("[EmailSender] EMAIL_MODE=%r no reconocido, usando console (solo dev)", mode)
        return StubEmailSender()


def get_email_sender() -> IEmailSender:
    """Construye el sender desde la configuración global."""
    from app.shared.config import get_settings
    return EmailSender.from_settings(get_settings())


__all__ = ["IEmailSender", "StubEmailSender", "EmailSender", "get_email_sender"]
# Fin del archivo backend/app/shared/integrations/email_sender.py
