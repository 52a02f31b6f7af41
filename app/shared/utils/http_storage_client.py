# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/http_storage_client.py

Cliente HTTP para Supabase Storage usando httpx directamente.

- Uploads con upsert opcional (x-upsert: true) para sobrescribir.
- Concurrencia acotada por un BoundedRequestPool explícito.
- Reintentos con backoff exponencial + jitter ante fallos transitorios.
- URL pública determinística por bucket/path.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from app.shared.core.http_retry_utils import retry_with_backoff
from app.shared.core.request_pool import BoundedRequestPool

logger = logging.getLogger(__name__)


class StorageUploadError(RuntimeError):
    """El upload falló de forma definitiva (tras reintentos)."""


class SupabaseStorageHTTPClient:
    """
    Cliente HTTP para operaciones de Supabase Storage.

    El cliente httpx es inyectable; si no se provee se crea uno propio
    que debe cerrarse con aclose().
    """

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        *,
        pool: Optional[BoundedRequestPool] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
        max_retries: int = 3,
        retry_base_delay: float = 0.5,
    ):
        if not base_url or not service_role_key:
            raise RuntimeError("Faltan SUPABASE_URL o SUPABASE_SERVICE_ROLE_KEY para Storage")

        self.base_url = base_url.rstrip("/")
        self._service_role_key = service_role_key
        self.pool = pool or BoundedRequestPool("storage", max_concurrency=4)
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    @classmethod
    def from_settings(cls, settings, payments_settings) -> "SupabaseStorageHTTPClient":
        """Construye el cliente desde BaseAppSettings + PaymentsSettings."""
        key = settings.supabase_service_role_key
        return cls(
            base_url=str(settings.supabase_url),
            service_role_key=key.get_secret_value() if key else "",
            pool=BoundedRequestPool(
                "storage",
                max_concurrency=payments_settings.storage_max_concurrency,
            ),
            timeout=settings.storage_timeout_sec,
            max_retries=payments_settings.storage_max_retries,
            retry_base_delay=payments_settings.storage_retry_base_delay,
        )

    def object_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{bucket}/{path}"

    def get_public_url(self, bucket: str, path: str) -> str:
        """URL pública (bucket público) del objeto."""
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    async def upload_file(
        self,
        bucket: str,
        path: str,
        file_data: bytes,
        content_type: str = "application/octet-stream",
        overwrite: bool = False,
    ) -> Dict[str, Any]:
        """
        Sube un archivo a Supabase Storage.

        Args:
            bucket: Nombre del bucket
            path: Ruta completa del archivo en el bucket
            file_data: Contenido binario del archivo
            content_type: Tipo MIME del archivo
            overwrite: Si True, usa upsert para sobrescribir archivos existentes

        Returns:
            Dict con la respuesta de la API de Supabase

        Raises:
            StorageUploadError: Si la operación falla tras los reintentos
        """
        headers = {
            "Authorization": f"Bearer {self._service_role_key}",
            "Content-Type": content_type,
        }
        if overwrite:
            headers["x-upsert"] = "true"

        try:
            response = await self.pool.run(
                retry_with_backoff,
                self._client.post,
                self.object_url(bucket, path),
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                headers=headers,
                content=file_data,
            )
        except httpx.HTTPError as e:
            logger.error("[Storage] upload failed: bucket=%s path=%s error=%s", bucket, path, e)
            raise StorageUploadError(f"Error de conexión al subir {path}: {e}") from e

        if response.status_code not in (200, 201):
            logger.error(
                "[Storage] upload rejected: bucket=%s path=%s status=%d body=%s",
                bucket, path, response.status_code, response.text[:300],
            )
            raise StorageUploadError(
                f"Error al subir archivo a Supabase: {response.status_code}"
            )

        logger.info(
            "[Storage] %s: bucket=%s path=%s",
            "overwritten" if overwrite else "uploaded", bucket, path,
        )
        return response.json() if response.content else {}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["SupabaseStorageHTTPClient", "StorageUploadError"]
# Fin del archivo backend/app/shared/utils/http_storage_client.py
