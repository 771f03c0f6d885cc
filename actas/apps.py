"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Configuración de la aplicación Actas. Registra el chequeo de la
               clave de firma e importa las señales al iniciar.
--------------------------------------------------------------------------------
"""
from django.apps import AppConfig
from django.core import checks


class ActasConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'actas'

    def ready(self):
        from .checks import verificar_clave_firma

        checks.register(verificar_clave_firma, checks.Tags.security)
        import actas.signals  # Carga las señales
