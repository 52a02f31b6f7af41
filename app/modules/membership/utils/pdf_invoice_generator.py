# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/utils/pdf_invoice_generator.py

Generador de facturas PDF para pagos de membresía.

Documento mínimo con ReportLab: identidad del suscriptor, importe,
fecha de pago, vigencia pagada y referencia de recibo, más un hash de
verificación derivado del contenido.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from typing import Optional

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@dataclass
class InvoiceData:
    """Datos necesarios para generar una factura PDF."""
    entry_id: str
    email: str
    full_name: Optional[str]
    amount_cents: int
    currency: str
    paid_at: datetime
    expires_at: datetime
    receipt_ref: Optional[str]
    scope_key: str = ""


def format_amount(amount_cents: int, currency: str) -> str:
    """Formatea centavos a string legible."""
    amount = amount_cents / 100
    code = currency.upper()
    if code in ("USD", "MXN", "CAD"):
        return f"${amount:,.2f} {code}"
    return f"{amount:,.2f} {code}"


def invoice_verification_hash(data: InvoiceData) -> str:
    hash_input = f"{data.entry_id}:{data.email}:{data.amount_cents}:{data.paid_at.isoformat()}"
    return hashlib.sha256(hash_input.encode()).hexdigest()[:16].upper()


def generate_membership_invoice_pdf(data: InvoiceData) -> bytes:
    """
    Genera el PDF de la factura de membresía.

    Args:
        data: Datos de la factura

    Returns:
        bytes del PDF generado
    """
    paid_str = data.paid_at.strftime("%Y-%m-%d %H:%M UTC")
    through_str = data.expires_at.strftime("%Y-%m-%d")
    generated_str = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    width, height = letter  # 612 x 792 puntos

    y = height - 50
    line_height = 16
    left_margin = 50

    def draw_line(text: str, size: int = 11):
        nonlocal y
        c.setFont("Helvetica", size)
        c.drawString(left_margin, y, text)
        y -= line_height

    def draw_section(title: str):
        nonlocal y
        c.setStrokeColorRGB(0.7, 0.7, 0.7)
        c.line(left_margin, y + 5, width - left_margin, y + 5)
        y -= line_height
        c.setFont("Helvetica-Bold", 12)
        c.drawString(left_margin, y, title)
        y -= line_height + 4

    # === ENCABEZADO ===
    c.setFont("Helvetica-Bold", 16)
    c.drawString(left_margin, y, "Eat Meet Club - Membership Invoice")
    y -= 24
    c.setFillColorRGB(0.4, 0.4, 0.4)
    draw_line(f"Invoice #: {data.entry_id}", size=10)
    draw_line(f"Issued: {generated_str}", size=10)
    c.setFillColorRGB(0, 0, 0)
    y -= line_height

    draw_section("BILL TO")
    if data.full_name:
        draw_line(data.full_name)
    draw_line(data.email)
    if data.scope_key:
        draw_line(f"Restaurant: {data.scope_key}")
    y -= line_height

    draw_section("PAYMENT")
    draw_line("Membership fee")
    draw_line(f"Amount paid: {format_amount(data.amount_cents, data.currency)}")
    draw_line(f"Paid at: {paid_str}")
    draw_line(f"Paid through: {through_str}")
    draw_line(f"Receipt reference: {data.receipt_ref or 'N/A'}")
    y -= line_height

    c.setFont("Helvetica", 9)
    c.setFillColorRGB(0.3, 0.3, 0.3)
    c.drawString(left_margin, y, "This document is not a tax invoice.")
    y -= 14
    c.drawString(left_margin, y, f"Verification hash: {invoice_verification_hash(data)}")

    c.showPage()
    c.save()

    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes


__all__ = [
    "InvoiceData",
    "format_amount",
    "generate_membership_invoice_pdf",
]
