# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/email_templates.py

Helper para carga y renderizado de templates de email.
Convención: todos los templates viven en templates/emails/ con nombres *_email.(html|txt).

Autor: EatMeetClub
Fecha: 2026-10-19
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Dict, Any

logger = logging.getLogger(__name__)

# Directorio canónico de templates
EMAILS_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"


def load_template(template_name: str) -> Optional[str]:
    """
    Carga template desde templates/emails/.

    Returns:
        Contenido del template o None si no existe.
    """
    path = EMAILS_DIR / template_name
    if not path.exists():
        logger.debug("[EmailTemplates] not found: %s", template_name)
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("[EmailTemplates] error reading %s: %s", template_name, e)
        return None


def render_template(raw: str, context: Dict[str, Any]) -> str:
    """Reemplaza placeholders {{ variable }} y {{variable}}."""
    result = raw
    for key, value in context.items():
        result = result.replace(f"{{{{ {key} }}}}", str(value))
        result = result.replace(f"{{{{{key}}}}}", str(value))
    return result


def render_email(
    template_base: str,
    context: Dict[str, Any],
) -> Tuple[Optional[str], Optional[str], bool]:
    """
    Renderiza email completo (HTML y texto) desde templates/emails/.

    Returns:
        (html, text, used_template) - html/text pueden ser None si no hay template
    """
    html_content = load_template(f"{template_base}.html")
    txt_content = load_template(f"{template_base}.txt")

    html = render_template(html_content, context) if html_content else None
    text = render_template(txt_content, context) if txt_content else None

    return html, text, html_content is not None


# Fallbacks de texto plano mínimos (sin HTML)
FALLBACK_INVITE_TEXT = """Hola {user_name},

Creamos su cuenta de Eat Meet Club para completar la membresía.
Defina su contraseña aquí: {set_password_link}

Atentamente,
El equipo de Eat Meet Club
"""

FALLBACK_WELCOME_TEXT = """Hola {user_name},

¡Bienvenido a Eat Meet Club! Su membresía está activa hasta el {paid_through}.

Consulte su factura aquí: {invoice_url}

Atentamente,
El equipo de Eat Meet Club
"""


def get_fallback_text(email_type: str, context: Dict[str, Any]) -> str:
    """Texto de fallback mínimo para cuando no hay templates."""
    templates = {
        "membership_invite": FALLBACK_INVITE_TEXT,
        "membership_welcome": FALLBACK_WELCOME_TEXT,
    }
    template = templates[email_type]
    try:
        return template.format(**context)
    except KeyError:
        return template


__all__ = [
    "EMAILS_DIR",
    "load_template",
    "render_template",
    "render_email",
    "get_fallback_text",
]
