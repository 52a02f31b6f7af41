# -*- coding: utf-8 -*-
# conftest.py - fixtures comunes para core (reintentos y pool de requests)

import pytest


@pytest.fixture
def recorded_sleeps():
    """
    Sustituto de asyncio.sleep que no espera y registra los delays pedidos.
    Se inyecta por parámetro (sleep=...) en lugar de parchear asyncio.
    """
    delays = []

    async def _sleep(seconds):
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep
# Fin del archivo
