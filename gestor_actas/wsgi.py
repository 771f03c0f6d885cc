"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Configuración WSGI para el proyecto. Punto de entrada estándar 
               para servidores como Gunicorn en producción.
--------------------------------------------------------------------------------
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gestor_actas.settings')

application = get_wsgi_application()
