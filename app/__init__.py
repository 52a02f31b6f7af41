# -*- coding: utf-8 -*-
"""
backend/app/__init__.py

Paquete principal del backend de membresías de Eat Meet Club.

Autor: EatMeetClub
Fecha: 2026-10-19
"""

# Fin del archivo backend/app/__init__.py
