"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Configuración ASGI para el proyecto. Solo atiende HTTP; el módulo 
               de actas no usa conexiones en tiempo real.
--------------------------------------------------------------------------------
"""
import os
from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "gestor_actas.settings")

application = get_asgi_application()
