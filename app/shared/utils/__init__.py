# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/__init__.py

Utilidades compartidas: cliente HTTP de Supabase Storage.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

from .http_storage_client import StorageUploadError, SupabaseStorageHTTPClient

__all__ = [
    "StorageUploadError",
    "SupabaseStorageHTTPClient",
]
