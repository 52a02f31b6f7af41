# -*- coding: utf-8 -*-
"""
backend/app/modules/membership/services/ledger_service.py

Ledger de facturación y generación de facturas PDF.

Por cada pago aplicado:
1. Inserta una fila en membership_billing_history (append-only; un
   receipt_ref repetido no genera una segunda fila).
2. Genera la factura PDF y la sube a Supabase Storage en
   {identity_key}/{entry_id}.pdf con x-upsert (regenerar sobrescribe).
3. Envía el email de bienvenida con la URL de la factura (best-effort).

Si Storage no está configurado o falla, la URL de la factura cae al
receipt_ref del procesador de pagos.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID, uuid4

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.integrations.email_sender import IEmailSender
from app.shared.utils.http_storage_client import StorageUploadError, SupabaseStorageHTTPClient
from ..errors import InvoiceStorageError
from ..models import BillingHistoryEntry
from ..repository import (
    BillingHistoryRepository,
    MemberAccountRepository,
    NewBillingEntry,
    normalize_email,
)
from ..utils.datetime_helpers import ensure_utc
from ..utils.pdf_invoice_generator import InvoiceData, generate_membership_invoice_pdf

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def identity_key(email: str) -> str:
    """Clave estable y no reversible de la identidad (16 hex)."""
    return hashlib.sha256(normalize_email(email).encode("utf-8")).hexdigest()[:16]


def invoice_path_for(email: str, entry_id: UUID) -> str:
    return f"{identity_key(email)}/{entry_id}.pdf"


class LedgerInvoiceProducer:
    """
    Registra pagos en el ledger y produce la factura.

    Args:
        storage_client: cliente de Storage (None → sin subida, URL = receipt_ref)
        email_sender: sender para el email de bienvenida (None → sin email)
        bucket: bucket de facturas
        send_welcome_email: desactiva el email de bienvenida
    """

    def __init__(
        self,
        *,
        storage_client: Optional[SupabaseStorageHTTPClient] = None,
        email_sender: Optional[IEmailSender] = None,
        bucket: str = "membership-invoices",
        send_welcome_email: bool = True,
        repository: Optional[BillingHistoryRepository] = None,
        accounts: Optional[MemberAccountRepository] = None,
        pdf_renderer: Callable[[InvoiceData], bytes] = generate_membership_invoice_pdf,
    ):
        self._storage = storage_client
        self._email_sender = email_sender
        self._bucket = bucket
        self._send_welcome = send_welcome_email
        self._repo = repository or BillingHistoryRepository()
        self._accounts = accounts or MemberAccountRepository()
        self._render = pdf_renderer

    def _existing_url(self, entry: BillingHistoryEntry) -> Optional[str]:
        if self._storage is None:
            return entry.receipt_ref
        return self._storage.get_public_url(self._bucket, entry.invoice_path)

    async def record(
        self,
        session: AsyncSession,
        *,
        email: str,
        amount_cents: int,
        currency: str,
        paid_at: datetime,
        expires_at: datetime,
        receipt_ref: Optional[str],
        scope_key: str = "",
        full_name: Optional[str] = None,
    ) -> Optional[str]:
        """
        Registra el pago y devuelve la URL de la factura (o el receipt_ref).
        """
        if receipt_ref:
            existing = await self._repo.get_by_receipt_ref(session, receipt_ref)
            if existing is not None:
                logger.info(
                    "Billing entry already recorded: receipt_ref=%s entry=%s",
                    receipt_ref, existing.id,
                )
                return self._existing_url(existing)

        entry_id = uuid4()
        path = invoice_path_for(email, entry_id)
        inserted = await self._repo.insert_if_absent(
            session,
            NewBillingEntry(
                entry_id=entry_id,
                email=email,
                scope_key=scope_key,
                amount_cents=amount_cents,
                currency=currency,
                paid_at=paid_at,
                expires_at=expires_at,
                receipt_ref=receipt_ref,
                invoice_path=path,
            ),
        )
        await session.commit()

        if not inserted:
            # Otra entrega concurrente registró el mismo receipt_ref
            existing = await self._repo.get_by_receipt_ref(session, receipt_ref or "")
            return self._existing_url(existing) if existing else receipt_ref

        logger.info(
            "Billing entry recorded: entry=%s email=%s amount=%s %s",
            entry_id, normalize_email(email), amount_cents, currency,
        )

        data = InvoiceData(
            entry_id=str(entry_id),
            email=normalize_email(email),
            full_name=full_name,
            amount_cents=amount_cents,
            currency=currency,
            paid_at=ensure_utc(paid_at),
            expires_at=ensure_utc(expires_at),
            receipt_ref=receipt_ref,
            scope_key=scope_key,
        )
        try:
            invoice_url = await self._store_invoice(data, path)
        except InvoiceStorageError as e:
            logger.warning(
                "Invoice storage failed, falling back to receipt_ref: entry=%s error=%s",
                entry_id, e,
            )
            invoice_url = receipt_ref

        await self._send_welcome_email(
            email=data.email,
            full_name=full_name,
            invoice_url=invoice_url,
            paid_through=data.expires_at,
        )
        return invoice_url

    async def regenerate_invoice(self, session: AsyncSession, entry_id: UUID) -> str:
        """
        Vuelve a generar la factura de una entrada existente en la misma ruta.

        Raises:
            LookupError: si la entrada no existe
            InvoiceStorageError: si Storage no está configurado o falla
        """
        entry = await self._repo.get_by_id(session, entry_id)
        if entry is None:
            raise LookupError(f"Billing entry not found: {entry_id}")

        account = await self._accounts.get_by_email(session, entry.email)
        data = InvoiceData(
            entry_id=str(entry.id),
            email=entry.email,
            full_name=account.full_name if account else None,
            amount_cents=entry.amount_cents,
            currency=entry.currency,
            paid_at=ensure_utc(entry.paid_at),
            expires_at=ensure_utc(entry.expires_at),
            receipt_ref=entry.receipt_ref,
            scope_key=entry.scope_key,
        )
        url = await self._store_invoice(data, entry.invoice_path)
        logger.info("Invoice regenerated: entry=%s path=%s", entry.id, entry.invoice_path)
        return url

    async def _store_invoice(self, data: InvoiceData, path: str) -> str:
        if self._storage is None:
            raise InvoiceStorageError("Storage not configured")

        try:
            pdf_bytes = await run_in_threadpool(self._render, data)
        except Exception as e:
            # cualquier error del renderer degrada a receipt_ref
            logger.error("Invoice render failed: entry=%s error=%r", data.entry_id, e)
            raise InvoiceStorageError(f"Invoice render failed: {e}") from e

        try:
            await self._storage.upload_file(
                bucket=self._bucket,
                path=path,
                file_data=pdf_bytes,
                content_type=PDF_CONTENT_TYPE,
                overwrite=True,
            )
        except StorageUploadError as e:
            raise InvoiceStorageError(str(e)) from e
        return self._storage.get_public_url(self._bucket, path)

    async def _send_welcome_email(
        self,
        *,
        email: str,
        full_name: Optional[str],
        invoice_url: Optional[str],
        paid_through: datetime,
    ) -> None:
        if not self._send_welcome or self._email_sender is None:
            return
        try:
            await self._email_sender.send_membership_welcome_email(
                to_email=email,
                full_name=full_name or "",
                invoice_url=invoice_url or "",
                paid_through=paid_through.strftime("%Y-%m-%d"),
            )
        except Exception as e:
            logger.warning("Welcome email failed (non-fatal): email=%s error=%s", email, e)


__all__ = [
    "identity_key",
    "invoice_path_for",
    "LedgerInvoiceProducer",
]
