# app/shared/__init__.py
"""
Infraestructura compartida: configuración, base de datos, integraciones
(email, Storage), utilidades HTTP y middlewares.

No inicializa settings en import-time.
"""
# fin del archivo
