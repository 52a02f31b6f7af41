# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/mailersend_email_sender.py

Implementación de envío de correos usando MailerSend API.
Usa templates de templates/emails/ como fuente de verdad.

Autor: EatMeetClub
Creado: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, TYPE_CHECKING

import httpx

from app.shared.core.http_retry_utils import with_retry
from app.shared.integrations.email_templates import render_email, get_fallback_text

if TYPE_CHECKING:
    from app.shared.config.settings_base import BaseAppSettings

logger = logging.getLogger(__name__)

# MailerSend API endpoint
MAILERSEND_API_URL = "https://api.mailersend.com/v1/email"


def _normalize_base_url(url: Optional[str]) -> Optional[str]:
    """Normaliza una URL base (quita espacios y slash final)."""
    if not url:
        return None
    u = url.strip()
    return u.rstrip("/") if u else None


class MailerSendEmailSender:
    """Envío de correos usando MailerSend API."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str = "Eat Meet Club",
        timeout: int = 30,
        frontend_url: Optional[str] = None,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("MAILERSEND_API_KEY es requerido")
        if not from_email:
            raise ValueError("MAILERSEND_FROM_EMAIL es requerido")

        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self.frontend_url = _normalize_base_url(frontend_url)
        self._transport = transport
        # 429/5xx y errores de transporte se reintentan; 4xx no
        self._post = with_retry(max_retries=max_retries, base_delay=retry_base_delay)(self._post_once)

    @classmethod
    def from_settings(cls, settings: BaseAppSettings) -> "MailerSendEmailSender":
        """
        Crea instancia desde settings.

        Raises:
            ValueError: si faltan credenciales requeridas
        """
        api_key = ""
        if settings.mailersend_api_key:
            api_key = settings.mailersend_api_key.get_secret_value().strip()

        from_email = (settings.mailersend_from_email or "").strip()
        from_name = (settings.mailersend_from_name or "Eat Meet Club").strip()
        timeout = settings.email_timeout_sec or 30

        logger.info("[MailerSend] config: from=%s (%s) timeout=%ss", from_email, from_name, timeout)

        return cls(
            api_key=api_key,
            from_email=from_email,
            from_name=from_name,
            timeout=timeout,
            frontend_url=settings.frontend_url,
        )

    def _build_invite_body(
        self, full_name: str, set_password_link: Optional[str]
    ) -> Tuple[str, str]:
        context = {
            "user_name": full_name or "Miembro",
            "set_password_link": set_password_link or self.frontend_url or "",
            "frontend_url": self.frontend_url or "",
        }
        html, text, _ = render_email("membership_invite_email", context)
        text = text or get_fallback_text("membership_invite", context)
        return html or f"<pre>{text}</pre>", text

    def _build_welcome_body(
        self, full_name: str, invoice_url: str, paid_through: str
    ) -> Tuple[str, str]:
        context = {
            "user_name": full_name or "Miembro",
            "invoice_url": invoice_url,
            "paid_through": paid_through,
            "frontend_url": self.frontend_url or "",
        }
        html, text, _ = render_email("membership_welcome_email", context)
        text = text or get_fallback_text("membership_welcome", context)
        return html or f"<pre>{text}</pre>", text

    async def _post_once(self, client: httpx.AsyncClient, payload: dict, headers: dict) -> httpx.Response:
        return await client.post(MAILERSEND_API_URL, json=payload, headers=headers)

    async def _send_email(
        self, to_email: str, subject: str, html_body: str, text_body: str
    ) -> str:
        """Envía email via MailerSend API. Retorna message_id."""
        payload = {
            "from": {"email": self.from_email, "name": self.from_name},
            "to": [{"email": to_email}],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.info("[MailerSend] sending: to=%s subject=%s", to_email, subject)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await self._post(client, payload, headers)
            except httpx.HTTPStatusError as e:
                logger.error("[MailerSend] retries exhausted: to=%s status=%d", to_email, e.response.status_code)
                raise RuntimeError(f"MailerSend API error: {e.response.status_code}") from e
            except httpx.TimeoutException as e:
                logger.error("[MailerSend] timeout: to=%s error=%s", to_email, e)
                raise RuntimeError(f"MailerSend timeout: {e}") from e
            except httpx.RequestError as e:
                logger.error("[MailerSend] request error: to=%s error=%s", to_email, e)
                raise RuntimeError(f"MailerSend request error: {e}") from e

        # MailerSend returns 202 Accepted on success
        if response.status_code == 202:
            message_id = response.headers.get("X-Message-Id", "accepted")
            logger.info("[MailerSend] sent ok: to=%s message_id=%s", to_email, message_id)
            return message_id

        logger.error(
            "[MailerSend] send failed: to=%s status=%d body=%s",
            to_email, response.status_code, response.text[:500],
        )
        raise RuntimeError(
            f"MailerSend API error: {response.status_code} - {response.text[:200]}"
        )

    async def send_membership_invite_email(
        self, to_email: str, full_name: str, set_password_link: Optional[str]
    ) -> None:
        """Invitación a definir contraseña tras crear la cuenta en checkout."""
        html, text = self._build_invite_body(full_name, set_password_link)
        await self._send_email(to_email, "Complete su registro en Eat Meet Club", html, text)

    async def send_membership_welcome_email(
        self, to_email: str, full_name: str, invoice_url: str, paid_through: str
    ) -> None:
        """Bienvenida con enlace a la factura de la membresía."""
        html, text = self._build_welcome_body(full_name, invoice_url, paid_through)
        await self._send_email(to_email, "Bienvenido a Eat Meet Club", html, text)


__all__ = ["MailerSendEmailSender", "MAILERSEND_API_URL"]
# Fin del archivo backend/app/shared/integrations/mailersend_email_sender.py
